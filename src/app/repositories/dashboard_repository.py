"""Dashboard Repository Interface

Read-only aggregate queries behind the operations dashboard. Each query is
independent so callers may run them concurrently.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple


class DashboardRepository(ABC):
    """Repository interface for dashboard KPI queries"""

    @abstractmethod
    async def overdue_rental_charges(
        self, tenant_id: Optional[str], today: date
    ) -> Tuple[int, Decimal]:
        """
        Rental charges past due with money still owed

        Returns:
            (count, remaining amount)
        """
        pass

    @abstractmethod
    async def rental_charges_due_on(
        self, tenant_id: Optional[str], day: date
    ) -> Tuple[int, Decimal]:
        """
        Rental charges due on ``day`` with money still owed

        Returns:
            (count, remaining amount)
        """
        pass

    @abstractmethod
    async def active_rentals(self, tenant_id: Optional[str]) -> int:
        pass

    @abstractmethod
    async def open_fines(
        self, tenant_id: Optional[str], today: date, due_soon_until: date
    ) -> Tuple[int, Decimal, int]:
        """
        Outstanding fine charges

        Returns:
            (count, remaining amount, count due between today and due_soon_until)
        """
        pass

    @abstractmethod
    async def collected_revenue(
        self, tenant_id: Optional[str], start: date, end: date
    ) -> Decimal:
        """Collected payment amounts dated within [start, end]"""
        pass

    @abstractmethod
    async def fleet_counts(self, tenant_id: Optional[str]) -> Tuple[int, int, int]:
        """
        Non-disposed fleet counts

        Returns:
            (total, rented, available)
        """
        pass
