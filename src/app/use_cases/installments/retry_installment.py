"""Installment retry and delinquency use cases"""

import logging
from datetime import date
from typing import Dict, Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.installment_repository import InstallmentRepository
from src.domain.installment import InstallmentConfig, InstallmentStatus, PlanStatus
from .dtos import ScheduledInstallmentDTO, MarkOverdueResultDTO
from . import policy

logger = logging.getLogger(__name__)

RETRYABLE = (InstallmentStatus.FAILED, InstallmentStatus.OVERDUE)


class RetryInstallment:
    """
    Use Case: Operator retry of a failed installment

    Business Rules:
    1. Only failed or overdue installments can be retried
    2. The installment returns to SCHEDULED with a fresh retry budget and
       is picked up by the next processing cycle
    """

    def __init__(self, uow: UnitOfWork, installment_repo: InstallmentRepository):
        self.uow = uow
        self.installment_repo = installment_repo

    async def execute(self, installment_id: str) -> Result[ScheduledInstallmentDTO]:
        try:
            installment = await self.installment_repo.get_installment(installment_id, for_update=True)
            if not installment:
                return Return.err(
                    Error(
                        code="INSTALLMENT_NOT_FOUND",
                        message=f"Installment {installment_id} not found",
                    )
                )

            if installment.status not in RETRYABLE:
                return Return.err(
                    Error(
                        code="INSTALLMENT_NOT_RETRYABLE",
                        message=f"Installment in status {installment.status.value} cannot be retried",
                    )
                )

            installment.status = InstallmentStatus.SCHEDULED
            installment.failure_count = 0
            installment.next_retry_date = None
            await self.installment_repo.update_installment(installment)
            await self.uow.commit()

            logger.info(f"Installment {installment.id} rescheduled for retry")

            return Return.ok(
                ScheduledInstallmentDTO(
                    id=installment.id,
                    installment_number=installment.installment_number,
                    amount=installment.amount,
                    due_date=installment.due_date,
                    status=installment.status,
                    failure_count=installment.failure_count,
                    next_retry_date=installment.next_retry_date,
                    ledger_entry_id=installment.ledger_entry_id,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="RETRY_INSTALLMENT_FAILED",
                    message="Failed to reschedule installment",
                    reason=str(e),
                )
            )


class MarkOverdueInstallments:
    """
    Use Case: Sweep unpaid installments past their grace period into OVERDUE

    Applies whatever retry budget remains; the plan becomes OVERDUE too.
    """

    def __init__(self, uow: UnitOfWork, installment_repo: InstallmentRepository):
        self.uow = uow
        self.installment_repo = installment_repo

    async def execute(self, as_of: Optional[date] = None) -> Result[MarkOverdueResultDTO]:
        today = as_of or date.today()
        configs: Dict[Optional[str], InstallmentConfig] = {}

        try:
            candidates = await self.installment_repo.list_unpaid_due_before(today)
            marked = 0

            for installment in candidates:
                if installment.tenant_id not in configs:
                    configs[installment.tenant_id] = (
                        await self.installment_repo.get_config(installment.tenant_id)
                        or policy.default_config()
                    )

                if not policy.is_past_grace(installment.due_date, configs[installment.tenant_id], today):
                    continue

                installment.status = InstallmentStatus.OVERDUE
                installment.next_retry_date = None
                await self.installment_repo.update_installment(installment)

                plan = await self.installment_repo.get_plan(installment.installment_plan_id, for_update=True)
                if plan and plan.status == PlanStatus.ACTIVE:
                    plan.status = PlanStatus.OVERDUE
                    await self.installment_repo.update_plan(plan)

                marked += 1

            await self.uow.commit()

            if marked:
                logger.warning(f"Marked {marked} installments overdue")

            return Return.ok(MarkOverdueResultDTO(checked=len(candidates), marked_overdue=marked))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="MARK_OVERDUE_FAILED",
                    message="Failed to mark overdue installments",
                    reason=str(e),
                )
            )
