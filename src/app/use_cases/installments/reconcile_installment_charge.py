"""ReconcileInstallmentCharge Use Case

Settles installments whose charge attempt never reached a final outcome.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional
from libs.result import Result, Return, Error
from src.app.services.payment_gateway import PaymentGatewayError, IntentStatus
from src.domain.base import utc_now
from src.domain.installment import ScheduledInstallment, InstallmentStatus
from .dtos import ProcessInstallmentResultDTO
from .process_installment import ProcessInstallment
from . import policy

logger = logging.getLogger(__name__)

STALE_CLAIM_AFTER = timedelta(minutes=30)

# Processor states that may still settle on their own
STILL_PENDING = (IntentStatus.PROCESSING, IntentStatus.UNKNOWN)


class ReconcileInstallmentCharge(ProcessInstallment):
    """
    Use Case: Resolve an installment left in PROCESSING

    Business Rules:
    1. With a recorded payment intent the processor's current state decides:
       succeeded records the payment exactly as a direct charge would, a
       terminal failure counts as a failed attempt, pending stays PROCESSING
    2. A claim with no intent (worker stopped mid-charge) is released back to
       the queue once older than ``stale_after``; failure_count is unchanged
       so the next attempt reuses the same idempotency key
    3. An installment swept into OVERDUE while its intent was pending is
       recorded as paid if that intent later succeeds; other outcomes only
       clear the intent reference
    """

    def __init__(
        self,
        *args,
        stale_after: timedelta = STALE_CLAIM_AFTER,
        clock: Callable[[], datetime] = utc_now,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.stale_after = stale_after
        self.clock = clock

    async def execute(
        self, installment_id: str, as_of: Optional[date] = None
    ) -> Result[ProcessInstallmentResultDTO]:
        today = as_of or date.today()

        try:
            installment = await self.installment_repo.get_installment(installment_id, for_update=True)
            if not installment:
                return Return.err(
                    Error(
                        code="INSTALLMENT_NOT_FOUND",
                        message=f"Installment {installment_id} not found",
                    )
                )

            swept_while_pending = (
                installment.status == InstallmentStatus.OVERDUE
                and installment.stripe_payment_intent_id is not None
                and installment.payment_id is None
            )
            if installment.status != InstallmentStatus.PROCESSING and not swept_while_pending:
                return Return.ok(self._result(installment, "skipped"))

            plan = await self.installment_repo.get_plan(installment.installment_plan_id, for_update=True)
            if not plan:
                return Return.err(
                    Error(
                        code="PLAN_NOT_FOUND",
                        message=f"Plan {installment.installment_plan_id} not found",
                    )
                )

            if not installment.stripe_payment_intent_id:
                return Return.ok(await self._release_claim(installment, today))

            account_id = None
            if plan.tenant_id:
                tenant = await self.tenant_repo.get_by_id(plan.tenant_id)
                account_id = tenant.connected_account_id if tenant else None

            intent = await self.gateway.retrieve_intent(
                installment.stripe_payment_intent_id, account_id=account_id
            )

            if intent.status == IntentStatus.SUCCEEDED:
                logger.info(f"Pending charge {intent.id} for installment {installment.id} succeeded")
                return Return.ok(await self._record_success(plan, installment, intent.id, today))

            if intent.status in STILL_PENDING:
                outcome = "skipped" if swept_while_pending else "processing"
                return Return.ok(self._result(installment, outcome))

            # The failed intent is final; the next attempt creates a new one
            installment.stripe_payment_intent_id = None
            reason = intent.failure_message or f"Payment {intent.raw_status}"

            if swept_while_pending:
                installment.last_failure_reason = reason
                await self.installment_repo.update_installment(installment)
                await self.uow.commit()
                return Return.ok(self._result(installment, "skipped", failure_reason=reason))

            config = await self.installment_repo.get_config(plan.tenant_id) or policy.default_config()
            return Return.ok(await self._record_failure(plan, installment, config, reason, today))

        except PaymentGatewayError as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="INTENT_LOOKUP_FAILED",
                    message=f"Could not read payment intent for installment {installment_id}",
                    reason=e.message,
                )
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="RECONCILE_INSTALLMENT_FAILED",
                    message="Failed to reconcile installment charge",
                    reason=str(e),
                )
            )

    async def _release_claim(
        self, installment: ScheduledInstallment, today: date
    ) -> ProcessInstallmentResultDTO:
        attempted = installment.last_attempted_at
        if attempted is not None and attempted.tzinfo is None:
            attempted = attempted.replace(tzinfo=timezone.utc)

        if attempted is not None and self.clock() - attempted < self.stale_after:
            return self._result(installment, "processing")

        if installment.failure_count:
            installment.status = InstallmentStatus.FAILED
            installment.next_retry_date = today
        else:
            installment.status = InstallmentStatus.SCHEDULED
            installment.next_retry_date = None
        await self.installment_repo.update_installment(installment)
        await self.uow.commit()

        logger.warning(
            f"Released stale charge claim on installment {installment.id} "
            f"(claimed at {installment.last_attempted_at})"
        )
        return self._result(installment, "released")
