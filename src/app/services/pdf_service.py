"""PDF Generation Service Interface

Defines the contract for PDF generation operations.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from src.domain.invoice import Invoice, InvoiceStatus


class PdfService(ABC):
    """
    Abstract PDF generation service
    """

    @abstractmethod
    def generate_rental_invoice(
        self,
        invoice: Invoice,
        paid_amount: Decimal,
        status: InvoiceStatus,
        company_name: str,
        company_address: str,
    ) -> bytes:
        """
        Render a rental invoice

        Args:
            invoice: Invoice with its price breakdown
            paid_amount: Amount collected against the invoice
            status: Computed payment status
            company_name: Company name to display on invoice
            company_address: Company address to display on invoice

        Returns:
            PDF document as bytes
        """
        pass
