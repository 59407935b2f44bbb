"""CancelRental Use Case

Cancels a rental, settles the money side with the payment processor and
returns the vehicle to inventory.
"""

import logging
from decimal import Decimal
from typing import Optional
from src.domain.base import utc_now
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import CancellationNotice
from src.app.services.payment_gateway import PaymentGateway, IntentStatus
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.app.repositories.rental_repository import RentalRepository, VehicleRepository
from src.app.repositories.tenant_repository import TenantRepository
from src.domain.money import ZERO, to_money
from src.domain.payment import Payment, PaymentStatus, CaptureStatus
from src.domain.rental import Rental, RentalStatus
from src.domain.vehicle import Vehicle, VehicleStatus
from .dtos import (
    CancelRentalCommandDTO,
    CancelRentalResponseDTO,
    RefundOutcomeDTO,
    RefundOutcomeType,
    RefundType,
)

logger = logging.getLogger(__name__)


class CancelRental:
    """
    Use Case: Cancel a rental and refund or release its payment

    Business Rules:
    1. A reason is mandatory
    2. A partial refund must satisfy 0 < refund_amount <= payment.amount,
       checked before the processor is contacted
    3. An uncaptured pre-authorisation is released, whatever refund was asked for
    4. A captured payment is refunded (full or partial) unless refund_type is none
    5. Any other intent state is skipped; a processor error is recorded and
       the cancellation still goes through
    6. Rental status, notes, vehicle availability and payment status are
       written in one transaction after the processor call
    7. Processor calls go through the tenant's connected account when usable

    Flow:
    1. Validate command
    2. Load rental, payment, customer, vehicle, tenant
    3. Settle with the processor
    4. Apply state changes, commit
    5. Return outcome and notification data
    """

    def __init__(
        self,
        uow: UnitOfWork,
        rental_repo: RentalRepository,
        vehicle_repo: VehicleRepository,
        payment_repo: PaymentRepository,
        customer_repo: CustomerRepository,
        tenant_repo: TenantRepository,
        gateway: PaymentGateway,
    ):
        self.uow = uow
        self.rental_repo = rental_repo
        self.vehicle_repo = vehicle_repo
        self.payment_repo = payment_repo
        self.customer_repo = customer_repo
        self.tenant_repo = tenant_repo
        self.gateway = gateway

    async def execute(self, command: CancelRentalCommandDTO) -> Result[CancelRentalResponseDTO]:
        # Step 1: Validate
        reason = command.reason.strip()
        if not reason:
            return Return.err(
                Error(code="MISSING_REASON", message="A cancellation reason is required")
            )

        if command.refund_type == RefundType.PARTIAL:
            if command.refund_amount is None or command.refund_amount <= ZERO:
                return Return.err(
                    Error(
                        code="REFUND_AMOUNT_REQUIRED",
                        message="Partial refunds need a positive refund amount",
                    )
                )

        try:
            # Step 2: Load
            rental = await self.rental_repo.get_by_id(command.rental_id, for_update=True)
            if not rental:
                return Return.err(
                    Error(code="RENTAL_NOT_FOUND", message=f"Rental {command.rental_id} not found")
                )

            if rental.status == RentalStatus.CANCELLED:
                return Return.err(
                    Error(
                        code="RENTAL_ALREADY_CANCELLED",
                        message=f"Rental {rental.id} is already cancelled",
                    )
                )

            payment = await self._resolve_payment(rental, command.payment_id)
            if command.payment_id and not payment:
                return Return.err(
                    Error(code="PAYMENT_NOT_FOUND", message=f"Payment {command.payment_id} not found")
                )

            if (
                command.refund_type == RefundType.PARTIAL
                and payment
                and to_money(command.refund_amount) > to_money(payment.amount)
            ):
                return Return.err(
                    Error(
                        code="REFUND_AMOUNT_EXCEEDS_PAYMENT",
                        message=f"Refund amount {command.refund_amount} exceeds the payment amount {payment.amount}",
                    )
                )

            customer = await self.customer_repo.get_by_id(rental.customer_id)
            vehicle = (
                await self.vehicle_repo.get_by_id(rental.vehicle_id, for_update=True)
                if rental.vehicle_id
                else None
            )
            tenant_id = command.tenant_id or rental.tenant_id
            account_id = None
            if tenant_id:
                tenant = await self.tenant_repo.get_by_id(tenant_id)
                account_id = tenant.connected_account_id if tenant else None

            # Step 3: Processor
            outcome = await self._settle_with_processor(payment, command, account_id)

            # Step 4: State changes
            now = utc_now()
            note = f"Cancelled by {command.cancelled_by}. Reason: {reason}"
            if outcome:
                note += f". Refund: {outcome.model_dump_json(by_alias=True, exclude_none=True)}"
            rental.status = RentalStatus.CANCELLED
            rental.append_note(note)
            rental.updated_at = now
            await self.rental_repo.update(rental)

            if vehicle:
                vehicle.status = VehicleStatus.AVAILABLE
                vehicle.updated_at = now
                await self.vehicle_repo.update(vehicle)

            if payment and outcome:
                self._apply_outcome(payment, outcome, command)
                payment.updated_at = now
                await self.payment_repo.update(payment)

            await self.uow.commit()

            logger.info(
                f"Rental {rental.id} cancelled by {command.cancelled_by}; "
                f"refund outcome: {outcome.type.value if outcome else 'none'}"
            )

            # Step 5: Response
            return Return.ok(
                CancelRentalResponseDTO(
                    refund=outcome,
                    notification_data=self._notice(rental, customer, vehicle, payment, command, tenant_id, reason),
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CANCEL_RENTAL_FAILED",
                    message="Failed to cancel rental",
                    reason=str(e),
                )
            )

    async def _resolve_payment(self, rental: Rental, payment_id: Optional[str]) -> Optional[Payment]:
        if payment_id:
            return await self.payment_repo.get_by_id(payment_id, for_update=True)
        return await self.payment_repo.get_latest_with_intent_for_rental(rental.id, for_update=True)

    async def _settle_with_processor(
        self,
        payment: Optional[Payment],
        command: CancelRentalCommandDTO,
        account_id: Optional[str],
    ) -> Optional[RefundOutcomeDTO]:
        if not payment or not payment.stripe_payment_intent_id:
            return None

        intent_id = payment.stripe_payment_intent_id
        try:
            intent = await self.gateway.retrieve_intent(intent_id, account_id=account_id)

            if intent.status == IntentStatus.REQUIRES_CAPTURE:
                await self.gateway.cancel_intent(intent_id, account_id=account_id)
                return RefundOutcomeDTO(
                    type=RefundOutcomeType.CANCELLED,
                    message="Pre-authorization hold released",
                )

            if command.refund_type == RefundType.NONE:
                return None

            if intent.status == IntentStatus.SUCCEEDED:
                amount = command.refund_amount if command.refund_type == RefundType.PARTIAL else None
                refund = await self.gateway.create_refund(intent_id, amount=amount, account_id=account_id)
                return RefundOutcomeDTO(
                    type=RefundOutcomeType(command.refund_type.value),
                    refund_id=refund.id,
                    amount=refund.amount,
                    status=refund.status,
                )

            logger.info(f"Payment intent {intent_id} not refundable: {intent.raw_status}")
            return RefundOutcomeDTO(
                type=RefundOutcomeType.SKIPPED,
                message=f"Payment not in refundable state: {intent.raw_status}",
            )

        except Exception as e:
            logger.error(f"Processor error while cancelling payment {payment.id}: {e}")
            return RefundOutcomeDTO(type=RefundOutcomeType.ERROR, message=str(e))

    @staticmethod
    def _apply_outcome(payment: Payment, outcome: RefundOutcomeDTO, command: CancelRentalCommandDTO) -> None:
        if outcome.type == RefundOutcomeType.CANCELLED:
            payment.status = PaymentStatus.CANCELLED
            payment.capture_status = CaptureStatus.CANCELLED
        elif outcome.type == RefundOutcomeType.FULL:
            payment.status = PaymentStatus.REFUNDED
            payment.capture_status = CaptureStatus.REFUNDED
            payment.refund_amount = to_money(payment.amount)
        elif outcome.type == RefundOutcomeType.PARTIAL:
            payment.status = PaymentStatus.PARTIAL_REFUND
            payment.capture_status = CaptureStatus.PARTIAL_REFUND
            payment.refund_amount = to_money(command.refund_amount)

        if outcome.refund_id:
            payment.stripe_refund_id = outcome.refund_id

    @staticmethod
    def _notice(
        rental: Rental,
        customer,
        vehicle: Optional[Vehicle],
        payment: Optional[Payment],
        command: CancelRentalCommandDTO,
        tenant_id: Optional[str],
        reason: str,
    ) -> CancellationNotice:
        if command.refund_type == RefundType.PARTIAL:
            refund_amount = to_money(command.refund_amount)
        elif command.refund_type == RefundType.FULL and payment:
            refund_amount = to_money(payment.amount)
        else:
            refund_amount = Decimal("0")

        return CancellationNotice(
            customer_name=(customer.name if customer and customer.name else "Customer"),
            customer_email=customer.email if customer else None,
            customer_phone=customer.phone if customer else None,
            vehicle_name=vehicle.display_name if vehicle else "Vehicle",
            vehicle_reg=(vehicle.registration_number or "") if vehicle else "",
            booking_ref=rental.booking_reference,
            reason=reason,
            refund_type=command.refund_type.value,
            refund_amount=refund_amount,
            tenant_id=tenant_id,
        )
