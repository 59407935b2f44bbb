"""ApplyPayment Use Case

Allocates a collected payment across the customer's outstanding charges.
"""

import logging
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.ledger_repository import LedgerRepository
from src.app.repositories.payment_repository import (
    PaymentRepository,
    PaymentApplicationRepository,
)
from src.domain.ledger_entry import LedgerEntry, EntryType, ChargeCategory
from src.domain.money import ZERO, to_money
from src.domain.payment import (
    Payment,
    PaymentApplication,
    PaymentStatus,
    CaptureStatus,
)
from .dtos import ApplyPaymentCommandDTO, ApplyPaymentResponseDTO, AllocationDTO
from .ledger_rules import AllocationConflict, plan_allocations

logger = logging.getLogger(__name__)

NOT_APPLICABLE_STATUSES = (PaymentStatus.REFUNDED, PaymentStatus.CANCELLED)
NOT_APPLICABLE_CAPTURE = (CaptureStatus.REFUNDED, CaptureStatus.CANCELLED)


class ApplyPayment:
    """
    Use Case: Allocate a payment to outstanding charges (FIFO)

    Business Rules:
    1. Only collected payments are allocated; pre-authorisations are rejected
    2. Charges are settled by category (Initial Fees, Extension, Rental,
       Fines, Other) then oldest due date first
    3. Charges are restricted to the payment's rental when it has one
    4. Each allocation inserts a PaymentApplication and decrements the
       charge's remaining_amount in the same transaction
    5. Payment and charge rows are locked (SELECT FOR UPDATE)
    6. Idempotent: amounts already allocated are never allocated again

    Flow:
    1. Lock payment, validate it is allocatable
    2. Write the payment ledger entry once
    3. Compute unallocated amount from existing applications
    4. Lock open charges and plan allocations
    5. Insert applications and decrement charges
    6. Update payment remaining_amount and status
    7. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        payment_repo: PaymentRepository,
        ledger_repo: LedgerRepository,
        application_repo: PaymentApplicationRepository,
    ):
        self.uow = uow
        self.payment_repo = payment_repo
        self.ledger_repo = ledger_repo
        self.application_repo = application_repo

    async def execute(self, command: ApplyPaymentCommandDTO) -> Result[ApplyPaymentResponseDTO]:
        """
        Execute payment allocation

        Args:
            command: ApplyPaymentCommandDTO with payment_id and optional categories

        Returns:
            Result[ApplyPaymentResponseDTO]: Success with allocations or error
        """
        try:
            # Step 1: Lock payment and validate
            payment = await self.payment_repo.get_by_id(command.payment_id, for_update=True)
            if not payment:
                return Return.err(
                    Error(
                        code="PAYMENT_NOT_FOUND",
                        message=f"Payment {command.payment_id} not found",
                    )
                )

            if payment.capture_status == CaptureStatus.REQUIRES_CAPTURE:
                return Return.err(
                    Error(
                        code="PAYMENT_NOT_CAPTURED",
                        message="Pre-authorised payment must be captured before it can be applied",
                    )
                )

            if payment.status in NOT_APPLICABLE_STATUSES or payment.capture_status in NOT_APPLICABLE_CAPTURE:
                return Return.err(
                    Error(
                        code="PAYMENT_NOT_APPLICABLE",
                        message=f"Payment in status {payment.status.value} cannot be applied",
                    )
                )

            # Step 2: Record the payment on the ledger once
            await self._ensure_payment_entry(payment)

            # Step 3: Unallocated amount
            already_applied = await self.application_repo.sum_applied_for_payment(payment.id)
            available = to_money(payment.amount) - already_applied
            if available < ZERO:
                raise AllocationConflict(
                    f"Payment {payment.id} over-allocated: applied {already_applied} of {payment.amount}"
                )

            # Step 4: Lock charges and plan
            categories = command.target_categories or list(ChargeCategory.ALLOCATION_ORDER)
            charges = await self.ledger_repo.get_open_charges(
                payment.customer_id,
                categories,
                rental_id=payment.rental_id,
                for_update=True,
            )
            plan = plan_allocations(available, charges, categories)

            # Step 5: Apply
            allocations: list[AllocationDTO] = []
            total_allocated = ZERO
            for charge, amount in plan:
                if amount > charge.remaining_amount:
                    raise AllocationConflict(
                        f"Charge {charge.id} has {charge.remaining_amount} remaining, cannot apply {amount}"
                    )

                await self.application_repo.create(
                    PaymentApplication(
                        tenant_id=payment.tenant_id,
                        payment_id=payment.id,
                        charge_entry_id=charge.id,
                        amount_applied=amount,
                    )
                )
                charge.remaining_amount = to_money(charge.remaining_amount - amount)
                await self.ledger_repo.update(charge)

                total_allocated += amount
                allocations.append(
                    AllocationDTO(
                        charge_entry_id=charge.id,
                        category=charge.category,
                        amount_applied=amount,
                        charge_remaining=charge.remaining_amount,
                    )
                )

            # Step 6: Payment bookkeeping
            payment.remaining_amount = to_money(available - total_allocated)
            payment.status = self._status_for(payment.remaining_amount, payment.amount)
            await self.payment_repo.update(payment)

            # Step 7: Commit
            await self.uow.commit()

            logger.info(
                f"Applied payment {payment.id}: allocated {total_allocated} "
                f"across {len(allocations)} charges, credit left {payment.remaining_amount}"
            )

            return Return.ok(
                ApplyPaymentResponseDTO(
                    payment_id=payment.id,
                    payment_status=payment.status.value,
                    total_allocated=to_money(total_allocated),
                    remaining_credit=payment.remaining_amount,
                    allocations=allocations,
                )
            )

        except AllocationConflict as e:
            await self.uow.rollback()
            logger.warning(f"Allocation conflict for payment {command.payment_id}: {e}")
            return Return.err(
                Error(
                    code="ALLOCATION_CONFLICT",
                    message="Ledger changed while allocating payment; retry the request",
                    reason=str(e),
                )
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="APPLY_PAYMENT_FAILED",
                    message="Failed to apply payment",
                    reason=str(e),
                )
            )

    async def _ensure_payment_entry(self, payment: Payment) -> None:
        existing = await self.ledger_repo.get_by_payment_id(payment.id)
        if existing:
            return

        await self.ledger_repo.create(
            LedgerEntry(
                tenant_id=payment.tenant_id,
                customer_id=payment.customer_id,
                rental_id=payment.rental_id,
                payment_id=payment.id,
                type=EntryType.PAYMENT,
                category=payment.payment_type.ledger_category,
                amount=-abs(to_money(payment.amount)),
                remaining_amount=ZERO,
                entry_date=payment.payment_date,
            )
        )

    @staticmethod
    def _status_for(remaining: Decimal, amount: Decimal) -> PaymentStatus:
        if remaining == ZERO:
            return PaymentStatus.APPLIED
        if remaining == to_money(amount):
            return PaymentStatus.CREDIT
        return PaymentStatus.PARTIAL
