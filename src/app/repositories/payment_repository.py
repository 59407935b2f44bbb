"""Payment Repository Interfaces

Defines the contracts for payments and their allocation records.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Optional, List
from src.domain.payment import Payment, PaymentApplication


class PaymentRepository(ABC):
    """Repository interface for Payment persistence"""

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """
        Create a new payment

        Args:
            payment: Payment to persist

        Returns:
            Created Payment
        """
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: str, for_update: bool = False) -> Optional[Payment]:
        """
        Retrieve payment by ID with optional row-level locking

        Args:
            payment_id: Payment ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Payment if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_latest_with_intent_for_rental(
        self, rental_id: str, for_update: bool = False
    ) -> Optional[Payment]:
        """
        Most recent payment on a rental that has a processor intent id

        Args:
            rental_id: Rental ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Payment if any, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, payment: Payment) -> Payment:
        """Persist changes to an existing payment"""
        pass

    @abstractmethod
    async def sum_available_credit(self, customer_id: str, tenant_id: Optional[str] = None) -> Decimal:
        """
        Sum of unallocated credit across the customer's collected payments

        Uncaptured pre-authorisations and refunded or cancelled payments
        carry no credit.
        """
        pass

    @abstractmethod
    async def list_all(self, tenant_id: Optional[str] = None) -> List[Payment]:
        """All payments, optionally scoped to a tenant"""
        pass


class PaymentApplicationRepository(ABC):
    """Repository interface for insert-only allocation records"""

    @abstractmethod
    async def create(self, application: PaymentApplication) -> PaymentApplication:
        pass

    @abstractmethod
    async def sum_applied_for_payment(self, payment_id: str) -> Decimal:
        """Total already allocated from a payment"""
        pass

    @abstractmethod
    async def sum_collected_for_rental(self, rental_id: str) -> Decimal:
        """
        Total applied to a rental's charges from collected payments

        Applications from payments still awaiting capture are excluded.

        Args:
            rental_id: Rental whose charges received the allocations

        Returns:
            Paid amount
        """
        pass

    @abstractmethod
    async def get_totals_by_charge(self) -> Dict[str, Decimal]:
        """Map charge_entry_id -> sum(amount_applied)"""
        pass

    @abstractmethod
    async def get_totals_by_payment(self) -> Dict[str, Decimal]:
        """Map payment_id -> sum(amount_applied)"""
        pass
