"""Notification Service Interface

Defines the contract for customer and operator notifications. Delivery is
best-effort: callers never fail a business operation because a
notification could not be sent.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from src.domain.installment import InstallmentPlan, ScheduledInstallment


class CancellationNotice(BaseModel):
    """Data for the customer-facing cancellation message"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    customer_name: str = "Customer"
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    vehicle_name: str = "Vehicle"
    vehicle_reg: Optional[str] = None
    booking_ref: str
    reason: str
    refund_type: str
    refund_amount: Decimal = Decimal("0")
    tenant_id: Optional[str] = None


class NotificationService(ABC):
    """
    Abstract notification service

    Implementations can send notifications via:
    - Webhook (HTTP POST)
    - Logging
    """

    @abstractmethod
    async def send_cancellation_notice(self, notice: CancellationNotice) -> bool:
        """
        Notify a customer that their rental was cancelled

        Args:
            notice: CancellationNotice payload

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass

    @abstractmethod
    async def send_installment_failed(
        self, plan: InstallmentPlan, installment: ScheduledInstallment, reason: str
    ) -> bool:
        """
        Notify that an installment charge failed

        Args:
            plan: Plan the installment belongs to
            installment: Failed installment
            reason: Processor failure message

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass

    @abstractmethod
    async def send_installment_receipt(
        self, plan: InstallmentPlan, installment: ScheduledInstallment
    ) -> bool:
        """Confirm a successfully charged installment"""
        pass
