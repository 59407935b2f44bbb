"""Ledger Repository Interface

Defines the contract for ledger entry persistence and balance aggregation.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional, List, Sequence
from src.domain.ledger_entry import LedgerEntry


class LedgerRepository(ABC):
    """
    Repository interface for LedgerEntry persistence

    Supports row-level locking for allocation writes.
    """

    @abstractmethod
    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Create a new ledger entry

        Args:
            entry: LedgerEntry to persist

        Returns:
            Created LedgerEntry
        """
        pass

    @abstractmethod
    async def get_by_id(self, entry_id: str, for_update: bool = False) -> Optional[LedgerEntry]:
        """
        Retrieve ledger entry by ID with optional row-level locking

        Args:
            entry_id: Ledger entry ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            LedgerEntry if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_payment_id(self, payment_id: str) -> Optional[LedgerEntry]:
        """
        Retrieve the payment entry recording a payment

        Args:
            payment_id: Payment ID

        Returns:
            Payment-type LedgerEntry if one was written, None otherwise
        """
        pass

    @abstractmethod
    async def get_open_charges(
        self,
        customer_id: str,
        categories: Sequence[str],
        rental_id: Optional[str] = None,
        for_update: bool = False,
    ) -> List[LedgerEntry]:
        """
        Retrieve unsettled charges in allocation order

        Charges are ordered by due_date, entry_date, then id so that the
        oldest debt is settled first.

        Args:
            customer_id: Customer owning the charges
            categories: Charge categories to include
            rental_id: Restrict to one rental when given
            for_update: If True, locks the rows with SELECT FOR UPDATE

        Returns:
            Charges with remaining_amount > 0
        """
        pass

    @abstractmethod
    async def update(self, entry: LedgerEntry) -> LedgerEntry:
        """Persist changes to an existing entry"""
        pass

    @abstractmethod
    async def sum_outstanding(
        self, customer_id: str, as_of: date, tenant_id: Optional[str] = None
    ) -> Decimal:
        """
        Sum remaining_amount over the customer's currently due charges

        Rental charges with due_date after ``as_of`` are excluded.

        Args:
            customer_id: Customer identifier
            as_of: Business date
            tenant_id: Optional tenant scope

        Returns:
            Non-negative outstanding amount
        """
        pass

    @abstractmethod
    async def sum_charges(self, customer_id: str, tenant_id: Optional[str] = None) -> Decimal:
        """Sum of all charge amounts for the customer"""
        pass

    @abstractmethod
    async def sum_payment_entries(self, customer_id: str, tenant_id: Optional[str] = None) -> Decimal:
        """Sum of |amount| over the customer's payment entries"""
        pass

    @abstractmethod
    async def list_charges(self, tenant_id: Optional[str] = None) -> List[LedgerEntry]:
        """All charge entries, optionally scoped to a tenant"""
        pass
