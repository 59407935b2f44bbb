"""Notification Service Implementations

Concrete channels for customer and operator notifications.
"""

import logging
from typing import Any, Dict, Optional
import httpx
from src.app.services.notification_service import NotificationService, CancellationNotice
from src.domain.installment import InstallmentPlan, ScheduledInstallment

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs notifications

    Useful for development and testing, or as a fallback.
    """

    async def send_cancellation_notice(self, notice: CancellationNotice) -> bool:
        logger.info(
            f"[CANCELLATION] {notice.booking_ref} for {notice.customer_name} "
            f"<{notice.customer_email or 'no email'}>, vehicle {notice.vehicle_name} {notice.vehicle_reg or ''}, "
            f"refund {notice.refund_type} {notice.refund_amount}, reason: {notice.reason}"
        )
        return True

    async def send_installment_failed(
        self, plan: InstallmentPlan, installment: ScheduledInstallment, reason: str
    ) -> bool:
        logger.warning(
            f"[INSTALLMENT FAILED] Plan: {plan.id}, Rental: {plan.rental_id}, "
            f"Installment: {installment.installment_number}/{plan.number_of_installments}, "
            f"Amount: {installment.amount}, Attempts: {installment.failure_count}, "
            f"Status: {installment.status.value}, Reason: {reason}"
        )
        return True

    async def send_installment_receipt(
        self, plan: InstallmentPlan, installment: ScheduledInstallment
    ) -> bool:
        logger.info(
            f"[INSTALLMENT PAID] Plan: {plan.id}, Rental: {plan.rental_id}, "
            f"Installment: {installment.installment_number}/{plan.number_of_installments}, "
            f"Amount: {installment.amount}"
        )
        return True


def _installment_payload(event: str, plan: InstallmentPlan, installment: ScheduledInstallment) -> Dict[str, Any]:
    return {
        "type": event,
        "tenant_id": plan.tenant_id,
        "rental_id": plan.rental_id,
        "customer_id": plan.customer_id,
        "installment_plan_id": plan.id,
        "installment_id": installment.id,
        "installment_number": installment.installment_number,
        "number_of_installments": plan.number_of_installments,
        "amount": str(installment.amount),
        "due_date": installment.due_date.isoformat(),
        "status": installment.status.value,
        "failure_count": installment.failure_count,
        "next_retry_date": installment.next_retry_date.isoformat() if installment.next_retry_date else None,
    }


class WebhookNotificationService(NotificationService):
    """
    Notification service that posts notifications to an HTTP webhook

    The receiver (e-mail/SMS sender) decides how to deliver each type.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST notifications to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_cancellation_notice(self, notice: CancellationNotice) -> bool:
        payload = {"type": "rental_cancelled", **notice.model_dump(mode="json", by_alias=True)}
        return await self._post(payload, f"cancellation {notice.booking_ref}")

    async def send_installment_failed(
        self, plan: InstallmentPlan, installment: ScheduledInstallment, reason: str
    ) -> bool:
        payload = _installment_payload("installment_failed", plan, installment)
        payload["reason"] = reason
        return await self._post(payload, f"failed installment {installment.id}")

    async def send_installment_receipt(
        self, plan: InstallmentPlan, installment: ScheduledInstallment
    ) -> bool:
        payload = _installment_payload("installment_paid", plan, installment)
        return await self._post(payload, f"paid installment {installment.id}")

    async def _post(self, payload: Dict[str, Any], description: str) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(f"Webhook notification sent for {description} to {self.webhook_url}")
                return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook notification for {description}: {e}")
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send_cancellation_notice(self, notice: CancellationNotice) -> bool:
        return await self._fan_out("send_cancellation_notice", notice)

    async def send_installment_failed(
        self, plan: InstallmentPlan, installment: ScheduledInstallment, reason: str
    ) -> bool:
        return await self._fan_out("send_installment_failed", plan, installment, reason)

    async def send_installment_receipt(
        self, plan: InstallmentPlan, installment: ScheduledInstallment
    ) -> bool:
        return await self._fan_out("send_installment_receipt", plan, installment)

    async def _fan_out(self, method: str, *args) -> bool:
        """True if at least one service succeeded"""
        success = False
        for service in self.services:
            try:
                if await getattr(service, method)(*args):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
