"""Invoice Repository Interface

Defines the contract for reading invoices.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.invoice import Invoice


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Read access to invoices for status and PDF rendering.
    """

    @abstractmethod
    async def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID

        Returns:
            Invoice if found, None otherwise
        """
        pass
