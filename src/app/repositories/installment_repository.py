"""Installment Repository Interface

Defines the contract for installment policy, plans and scheduled
installments.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, List
from src.domain.installment import (
    InstallmentConfig,
    InstallmentPlan,
    ScheduledInstallment,
)


class InstallmentRepository(ABC):
    """Repository interface for installment plans and their schedules"""

    @abstractmethod
    async def get_config(self, tenant_id: Optional[str]) -> Optional[InstallmentConfig]:
        """
        Retrieve a tenant's installment policy

        Args:
            tenant_id: Tenant identifier

        Returns:
            InstallmentConfig if the tenant configured one, None otherwise
        """
        pass

    @abstractmethod
    async def create_plan(self, plan: InstallmentPlan) -> InstallmentPlan:
        pass

    @abstractmethod
    async def get_plan(self, plan_id: str, for_update: bool = False) -> Optional[InstallmentPlan]:
        pass

    @abstractmethod
    async def update_plan(self, plan: InstallmentPlan) -> InstallmentPlan:
        pass

    @abstractmethod
    async def create_installment(self, installment: ScheduledInstallment) -> ScheduledInstallment:
        pass

    @abstractmethod
    async def get_installment(
        self, installment_id: str, for_update: bool = False
    ) -> Optional[ScheduledInstallment]:
        """
        Retrieve scheduled installment by ID with optional row-level locking

        Args:
            installment_id: Installment ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            ScheduledInstallment if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_installment(self, installment: ScheduledInstallment) -> ScheduledInstallment:
        pass

    @abstractmethod
    async def list_installments(self, plan_id: str) -> List[ScheduledInstallment]:
        """Installments of a plan ordered by installment_number"""
        pass

    @abstractmethod
    async def list_processable(self, as_of: date, limit: int = 100) -> List[ScheduledInstallment]:
        """
        Installments ready for a charge attempt

        Scheduled installments due on or before ``as_of``, plus failed ones
        whose next_retry_date has arrived.

        Args:
            as_of: Business date
            limit: Maximum number of installments to return

        Returns:
            List of installments ordered by due_date
        """
        pass

    @abstractmethod
    async def get_plan_for_rental(self, rental_id: str) -> Optional[InstallmentPlan]:
        """Current (non-cancelled) plan of a rental, if any"""
        pass

    @abstractmethod
    async def list_unpaid_due_before(self, as_of: date, limit: int = 500) -> List[ScheduledInstallment]:
        """
        Scheduled, failed or processing installments with due_date before ``as_of``

        Used to sweep installments into OVERDUE once their grace period ends.
        """
        pass

    @abstractmethod
    async def list_unsettled_charges(self, limit: int = 100) -> List[ScheduledInstallment]:
        """
        Installments whose last charge attempt has no final outcome

        PROCESSING installments, plus overdue ones still holding a payment
        intent that was pending when they were swept.
        """
        pass
