"""CreateInstallmentPlan Use Case

Persists the chosen payment cadence for a rental together with its schedule
and the ledger charges the schedule bills.
"""

import logging
from datetime import date
from typing import List
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.installment_repository import InstallmentRepository
from src.app.repositories.ledger_repository import LedgerRepository
from src.app.repositories.rental_repository import RentalRepository
from src.domain.installment import (
    InstallmentPlan,
    ScheduledInstallment,
    PlanStatus,
    PlanType,
)
from src.domain.ledger_entry import LedgerEntry, EntryType, ChargeCategory
from .dtos import (
    CreateInstallmentPlanCommandDTO,
    InstallmentPlanDTO,
    ScheduledInstallmentDTO,
)
from . import policy

logger = logging.getLogger(__name__)


def to_plan_dto(plan: InstallmentPlan, installments: List[ScheduledInstallment]) -> InstallmentPlanDTO:
    return InstallmentPlanDTO(
        id=plan.id,
        rental_id=plan.rental_id,
        plan_type=plan.plan_type,
        status=plan.status,
        total_installable_amount=plan.total_installable_amount,
        number_of_installments=plan.number_of_installments,
        installment_amount=plan.installment_amount,
        upfront_amount=plan.upfront_amount,
        next_due_date=plan.next_due_date,
        installments=[
            ScheduledInstallmentDTO(
                id=i.id,
                installment_number=i.installment_number,
                amount=i.amount,
                due_date=i.due_date,
                status=i.status,
                failure_count=i.failure_count,
                next_retry_date=i.next_retry_date,
                ledger_entry_id=i.ledger_entry_id,
            )
            for i in installments
        ],
    )


class CreateInstallmentPlan:
    """
    Use Case: Create an installment plan for a rental

    Business Rules:
    1. Weekly/monthly plans require the rental to meet the cadence threshold
       and to produce at least 2 installments
    2. Only the split basis is installable; deposit and one-time fees stay upfront
    3. With charge_first_upfront, installment #1 is due on the booking date
    4. Each installment bills a Rental charge dated on its due date, so
       future installments never count as outstanding early
    5. One live plan per rental

    Flow:
    1. Load rental and tenant policy
    2. Validate cadence
    3. Compute split and schedule
    4. Create plan, charges and installments
    5. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        rental_repo: RentalRepository,
        installment_repo: InstallmentRepository,
        ledger_repo: LedgerRepository,
    ):
        self.uow = uow
        self.rental_repo = rental_repo
        self.installment_repo = installment_repo
        self.ledger_repo = ledger_repo

    async def execute(self, command: CreateInstallmentPlanCommandDTO) -> Result[InstallmentPlanDTO]:
        try:
            # Step 1: Rental and policy
            rental = await self.rental_repo.get_by_id(command.rental_id, for_update=True)
            if not rental:
                return Return.err(
                    Error(code="RENTAL_NOT_FOUND", message=f"Rental {command.rental_id} not found")
                )

            rental_days = rental.duration_days
            if rental_days is None or rental_days < 1:
                return Return.err(
                    Error(
                        code="INVALID_RENTAL_DATES",
                        message="Rental needs a start and end date to schedule installments",
                    )
                )

            existing = await self.installment_repo.get_plan_for_rental(rental.id)
            if existing:
                return Return.err(
                    Error(
                        code="PLAN_ALREADY_EXISTS",
                        message=f"Rental {rental.id} already has an installment plan",
                    )
                )

            config = await self.installment_repo.get_config(rental.tenant_id) or policy.default_config()

            # Step 2: Cadence
            count = policy.installment_count(command.plan_type, rental_days, config)
            if command.plan_type != PlanType.FULL:
                if not config.enabled or not policy.meets_threshold(command.plan_type, rental_days, config):
                    return Return.err(
                        Error(
                            code="NOT_ELIGIBLE",
                            message=f"A {rental_days}-day rental is not eligible for {command.plan_type.value} installments",
                        )
                    )
                if count < 2:
                    return Return.err(
                        Error(
                            code="NOT_ELIGIBLE",
                            message=f"{command.plan_type.value} cadence yields fewer than 2 installments",
                        )
                    )

            # Step 3: Split and schedule
            installable, upfront = policy.split_basis(config.what_gets_split, command.breakdown)
            booking_date = command.booking_date or date.today()
            schedule = policy.build_schedule(
                command.plan_type,
                installable,
                count,
                rental.start_date,
                booking_date,
                config.charge_first_upfront,
            )

            # Step 4: Persist
            plan = await self.installment_repo.create_plan(
                InstallmentPlan(
                    tenant_id=rental.tenant_id,
                    rental_id=rental.id,
                    customer_id=rental.customer_id,
                    plan_type=command.plan_type,
                    total_installable_amount=installable,
                    number_of_installments=count,
                    installment_amount=schedule[0][1],
                    upfront_amount=upfront,
                    stripe_customer_id=command.stripe_customer_id,
                    stripe_payment_method_id=command.stripe_payment_method_id,
                    status=PlanStatus.ACTIVE,
                    next_due_date=schedule[0][2],
                )
            )

            installments: List[ScheduledInstallment] = []
            for number, amount, due in schedule:
                charge = await self.ledger_repo.create(
                    LedgerEntry(
                        tenant_id=rental.tenant_id,
                        customer_id=rental.customer_id,
                        rental_id=rental.id,
                        type=EntryType.CHARGE,
                        category=ChargeCategory.RENTAL,
                        amount=amount,
                        remaining_amount=amount,
                        due_date=due,
                        entry_date=booking_date,
                        reference=f"Installment {number}/{count}",
                    )
                )
                installments.append(
                    await self.installment_repo.create_installment(
                        ScheduledInstallment(
                            tenant_id=rental.tenant_id,
                            installment_plan_id=plan.id,
                            installment_number=number,
                            amount=amount,
                            due_date=due,
                            ledger_entry_id=charge.id,
                        )
                    )
                )

            # Step 5: Commit
            await self.uow.commit()

            logger.info(
                f"Created {command.plan_type.value} plan {plan.id} for rental {rental.id}: "
                f"{count} x {plan.installment_amount}, upfront {upfront}"
            )

            return Return.ok(to_plan_dto(plan, installments))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_PLAN_FAILED",
                    message="Failed to create installment plan",
                    reason=str(e),
                )
            )
