"""ProcessInstallment Use Case

Charges one scheduled installment off-session and records the outcome.
"""

import logging
from datetime import date
from typing import Optional
from src.domain.base import utc_now
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.services.payment_gateway import (
    PaymentGateway,
    PaymentGatewayError,
    IntentStatus,
)
from src.app.repositories.installment_repository import InstallmentRepository
from src.app.repositories.ledger_repository import LedgerRepository
from src.app.repositories.payment_repository import (
    PaymentRepository,
    PaymentApplicationRepository,
)
from src.app.repositories.tenant_repository import TenantRepository
from src.domain.installment import (
    InstallmentConfig,
    InstallmentPlan,
    ScheduledInstallment,
    InstallmentStatus,
    PlanStatus,
)
from src.domain.ledger_entry import LedgerEntry, EntryType, ChargeCategory
from src.domain.money import ZERO, to_money
from src.domain.payment import (
    Payment,
    PaymentApplication,
    PaymentStatus,
    CaptureStatus,
    PaymentType,
)
from .dtos import ProcessInstallmentResultDTO
from . import policy

logger = logging.getLogger(__name__)

PROCESSABLE = (InstallmentStatus.SCHEDULED, InstallmentStatus.FAILED)


class ProcessInstallment:
    """
    Use Case: Charge a scheduled installment

    Business Rules:
    1. Only scheduled or failed installments are charged; paid ones are
       returned unchanged
    2. The installment is marked PROCESSING and committed before the
       processor call so concurrent workers skip it
    3. Success records a captured Payment, its ledger entry, and allocates
       it to the installment's charge
    4. Failure increments failure_count and schedules the next retry per
       tenant policy; past the grace period the installment is OVERDUE
       and so is its plan
    5. A declined card is an outcome, not an error

    Flow:
    1. Lock installment and plan, validate
    2. Mark PROCESSING, commit
    3. Charge off-session
    4. Record success or failure, commit
    5. Notify (best-effort)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        installment_repo: InstallmentRepository,
        tenant_repo: TenantRepository,
        payment_repo: PaymentRepository,
        ledger_repo: LedgerRepository,
        application_repo: PaymentApplicationRepository,
        gateway: PaymentGateway,
        notification_service: Optional[NotificationService] = None,
        currency: str = "usd",
    ):
        self.uow = uow
        self.installment_repo = installment_repo
        self.tenant_repo = tenant_repo
        self.payment_repo = payment_repo
        self.ledger_repo = ledger_repo
        self.application_repo = application_repo
        self.gateway = gateway
        self.notification_service = notification_service
        self.currency = currency

    async def execute(
        self, installment_id: str, as_of: Optional[date] = None
    ) -> Result[ProcessInstallmentResultDTO]:
        today = as_of or date.today()

        try:
            # Step 1: Lock and validate
            installment = await self.installment_repo.get_installment(installment_id, for_update=True)
            if not installment:
                return Return.err(
                    Error(
                        code="INSTALLMENT_NOT_FOUND",
                        message=f"Installment {installment_id} not found",
                    )
                )

            if installment.status == InstallmentStatus.PAID:
                return Return.ok(self._result(installment, "skipped"))

            if installment.status not in PROCESSABLE:
                return Return.err(
                    Error(
                        code="INSTALLMENT_NOT_PROCESSABLE",
                        message=f"Installment in status {installment.status.value} cannot be charged",
                    )
                )

            plan = await self.installment_repo.get_plan(installment.installment_plan_id, for_update=True)
            if not plan:
                return Return.err(
                    Error(
                        code="PLAN_NOT_FOUND",
                        message=f"Plan {installment.installment_plan_id} not found",
                    )
                )

            config = await self.installment_repo.get_config(plan.tenant_id) or policy.default_config()

            if not plan.stripe_customer_id or not plan.stripe_payment_method_id:
                outcome = await self._record_failure(
                    plan, installment, config, "No payment method on file", today
                )
                return Return.ok(outcome)

            account_id = None
            if plan.tenant_id:
                tenant = await self.tenant_repo.get_by_id(plan.tenant_id)
                account_id = tenant.connected_account_id if tenant else None

            # Step 2: Claim
            installment.status = InstallmentStatus.PROCESSING
            installment.last_attempted_at = utc_now()
            await self.installment_repo.update_installment(installment)
            await self.uow.commit()

            # Step 3: Charge
            try:
                intent = await self.gateway.charge_off_session(
                    amount=installment.amount,
                    currency=self.currency,
                    customer_id=plan.stripe_customer_id,
                    payment_method_id=plan.stripe_payment_method_id,
                    metadata={
                        "installment_id": installment.id,
                        "installment_plan_id": plan.id,
                        "rental_id": plan.rental_id,
                        "installment_number": str(installment.installment_number),
                    },
                    account_id=account_id,
                    idempotency_key=f"installment-{installment.id}-{installment.failure_count}",
                )
            except PaymentGatewayError as e:
                logger.warning(f"Installment {installment.id} charge failed: {e.message}")
                outcome = await self._record_failure(plan, installment, config, e.message, today)
                return Return.ok(outcome)

            # Step 4: Record
            if intent.status == IntentStatus.SUCCEEDED:
                outcome = await self._record_success(plan, installment, intent.id, today)
            elif intent.status == IntentStatus.PROCESSING:
                installment.stripe_payment_intent_id = intent.id
                await self.installment_repo.update_installment(installment)
                await self.uow.commit()
                outcome = self._result(installment, "processing")
            else:
                outcome = await self._record_failure(
                    plan,
                    installment,
                    config,
                    intent.failure_message or f"Payment {intent.raw_status}",
                    today,
                )
            return Return.ok(outcome)

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="PROCESS_INSTALLMENT_FAILED",
                    message="Failed to process installment",
                    reason=str(e),
                )
            )

    async def _record_success(
        self,
        plan: InstallmentPlan,
        installment: ScheduledInstallment,
        intent_id: str,
        today: date,
    ) -> ProcessInstallmentResultDTO:
        amount = to_money(installment.amount)

        payment = await self.payment_repo.create(
            Payment(
                tenant_id=plan.tenant_id,
                customer_id=plan.customer_id,
                rental_id=plan.rental_id,
                amount=amount,
                remaining_amount=amount,
                payment_type=PaymentType.PAYMENT,
                method="card",
                payment_date=today,
                status=PaymentStatus.APPLIED,
                capture_status=CaptureStatus.CAPTURED,
                stripe_payment_intent_id=intent_id,
            )
        )
        await self.ledger_repo.create(
            LedgerEntry(
                tenant_id=plan.tenant_id,
                customer_id=plan.customer_id,
                rental_id=plan.rental_id,
                payment_id=payment.id,
                type=EntryType.PAYMENT,
                category=ChargeCategory.RENTAL,
                amount=-amount,
                remaining_amount=ZERO,
                entry_date=today,
            )
        )

        # Settle the installment's own charge
        applied = ZERO
        if installment.ledger_entry_id:
            charge = await self.ledger_repo.get_by_id(installment.ledger_entry_id, for_update=True)
            if charge and charge.remaining_amount > ZERO:
                applied = min(amount, to_money(charge.remaining_amount))
                await self.application_repo.create(
                    PaymentApplication(
                        tenant_id=plan.tenant_id,
                        payment_id=payment.id,
                        charge_entry_id=charge.id,
                        amount_applied=applied,
                    )
                )
                charge.remaining_amount = to_money(charge.remaining_amount - applied)
                await self.ledger_repo.update(charge)

        payment.remaining_amount = amount - applied
        if payment.remaining_amount == amount:
            payment.status = PaymentStatus.CREDIT
        elif payment.remaining_amount > ZERO:
            payment.status = PaymentStatus.PARTIAL
        await self.payment_repo.update(payment)

        installment.status = InstallmentStatus.PAID
        installment.paid_at = utc_now()
        installment.payment_id = payment.id
        installment.stripe_payment_intent_id = intent_id
        installment.next_retry_date = None
        await self.installment_repo.update_installment(installment)

        await self._advance_plan(plan, installment)
        await self.uow.commit()

        logger.info(
            f"Installment {installment.installment_number}/{plan.number_of_installments} "
            f"of plan {plan.id} paid ({amount})"
        )
        await self._notify(self._send_receipt, plan, installment)

        return self._result(installment, "paid")

    async def _advance_plan(self, plan: InstallmentPlan, paid: ScheduledInstallment) -> None:
        plan.paid_installments += 1
        plan.total_paid = to_money(plan.total_paid + paid.amount)

        installments = await self.installment_repo.list_installments(plan.id)
        unpaid = [
            i for i in installments
            if i.id != paid.id and i.status not in (InstallmentStatus.PAID, InstallmentStatus.CANCELLED)
        ]

        if not unpaid:
            plan.status = PlanStatus.COMPLETED
            plan.next_due_date = None
        else:
            plan.next_due_date = min(i.due_date for i in unpaid)
            if plan.status == PlanStatus.OVERDUE and not any(
                i.status == InstallmentStatus.OVERDUE for i in unpaid
            ):
                plan.status = PlanStatus.ACTIVE

        await self.installment_repo.update_plan(plan)

    async def _record_failure(
        self,
        plan: InstallmentPlan,
        installment: ScheduledInstallment,
        config: InstallmentConfig,
        reason: str,
        today: date,
    ) -> ProcessInstallmentResultDTO:
        installment.failure_count += 1
        installment.last_failure_reason = reason
        installment.last_attempted_at = utc_now()
        installment.status, installment.next_retry_date = policy.after_failure(
            installment.due_date, installment.failure_count, config, today
        )
        await self.installment_repo.update_installment(installment)

        if installment.status == InstallmentStatus.OVERDUE and plan.status != PlanStatus.OVERDUE:
            plan.status = PlanStatus.OVERDUE
            await self.installment_repo.update_plan(plan)

        await self.uow.commit()

        logger.info(
            f"Installment {installment.id} failed (attempt {installment.failure_count}): {reason}; "
            f"status={installment.status.value}, next_retry={installment.next_retry_date}"
        )
        await self._notify(self._send_failure, plan, installment, reason)

        return self._result(installment, "failed", failure_reason=reason)

    async def _send_receipt(self, plan, installment):
        return await self.notification_service.send_installment_receipt(plan, installment)

    async def _send_failure(self, plan, installment, reason):
        return await self.notification_service.send_installment_failed(plan, installment, reason)

    async def _notify(self, send, *args) -> None:
        if not self.notification_service:
            return
        try:
            await send(*args)
        except Exception as e:
            logger.error(f"Installment notification failed: {e}")

    @staticmethod
    def _result(
        installment: ScheduledInstallment, outcome: str, failure_reason: Optional[str] = None
    ) -> ProcessInstallmentResultDTO:
        return ProcessInstallmentResultDTO(
            installment_id=installment.id,
            outcome=outcome,
            status=installment.status,
            payment_id=installment.payment_id,
            failure_reason=failure_reason,
            failure_count=installment.failure_count,
            next_retry_date=installment.next_retry_date,
        )
