"""Unit tests for CancelRental use case

Tests cover:
- Pre-authorisation hold released regardless of refund type
- Full and partial refunds of captured payments
- Partial refund validation before any processor call
- Processor errors recorded while the cancellation still goes through
- Rental, vehicle and payment updated in one commit
- Connected account routing and notification data
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.payment_gateway import (
    IntentStatus,
    PaymentGatewayError,
    PaymentIntentInfo,
    RefundInfo,
)
from src.app.use_cases.rentals.cancel_rental import CancelRental
from src.app.use_cases.rentals.dtos import CancelRentalCommandDTO, RefundOutcomeType, RefundType
from src.domain.customer import Customer
from src.domain.payment import Payment, PaymentStatus, CaptureStatus
from src.domain.rental import Rental, RentalStatus
from src.domain.tenant import Tenant
from src.domain.vehicle import Vehicle, VehicleStatus


def _intent(status):
    return PaymentIntentInfo(id="pi_123", status=status, raw_status=status.value, amount=Decimal("500.00"))


@pytest.fixture
def sample_rental():
    return Rental(
        id="a1b2c3d4-0000-0000-0000-000000000001",
        tenant_id="tenant_1",
        customer_id="cust_1",
        vehicle_id="veh_1",
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 10),
        status=RentalStatus.ACTIVE,
        notes="Airport pickup",
    )


@pytest.fixture
def sample_vehicle():
    return Vehicle(id="veh_1", tenant_id="tenant_1", make="Toyota", model="Corolla",
                   registration_number="AB12 CDE", status=VehicleStatus.RENTED)


@pytest.fixture
def sample_payment():
    """Captured 500.00 processor payment"""
    return Payment(
        id="pay_1",
        tenant_id="tenant_1",
        customer_id="cust_1",
        rental_id="a1b2c3d4-0000-0000-0000-000000000001",
        amount=Decimal("500.00"),
        remaining_amount=Decimal("0.00"),
        status=PaymentStatus.APPLIED,
        capture_status=CaptureStatus.CAPTURED,
        stripe_payment_intent_id="pi_123",
    )


@pytest.fixture
def repos(sample_rental, sample_vehicle, sample_payment):
    """Rental, vehicle, payment, customer and tenant repository mocks"""
    rental_repo = MagicMock()
    rental_repo.get_by_id = AsyncMock(return_value=sample_rental)
    rental_repo.update = AsyncMock()

    vehicle_repo = MagicMock()
    vehicle_repo.get_by_id = AsyncMock(return_value=sample_vehicle)
    vehicle_repo.update = AsyncMock()

    payment_repo = MagicMock()
    payment_repo.get_by_id = AsyncMock(return_value=sample_payment)
    payment_repo.get_latest_with_intent_for_rental = AsyncMock(return_value=sample_payment)
    payment_repo.update = AsyncMock()

    customer_repo = MagicMock()
    customer_repo.get_by_id = AsyncMock(
        return_value=Customer(id="cust_1", name="Ada Driver", email="ada@example.com", phone="+15550100")
    )

    tenant_repo = MagicMock()
    tenant_repo.get_by_id = AsyncMock(
        return_value=Tenant(id="tenant_1", name="Acme", stripe_account_id="acct_123",
                            stripe_onboarding_complete=True)
    )
    return rental_repo, vehicle_repo, payment_repo, customer_repo, tenant_repo


@pytest.fixture
def mock_gateway():
    gateway = MagicMock()
    gateway.retrieve_intent = AsyncMock(return_value=_intent(IntentStatus.SUCCEEDED))
    gateway.cancel_intent = AsyncMock(return_value=_intent(IntentStatus.CANCELED))
    gateway.create_refund = AsyncMock(
        return_value=RefundInfo(id="re_123", amount=Decimal("500.00"), status="succeeded")
    )
    return gateway


@pytest.fixture
def cancel_use_case(mock_uow, repos, mock_gateway):
    """CancelRental use case instance with mocked dependencies"""
    rental_repo, vehicle_repo, payment_repo, customer_repo, tenant_repo = repos
    return CancelRental(
        uow=mock_uow,
        rental_repo=rental_repo,
        vehicle_repo=vehicle_repo,
        payment_repo=payment_repo,
        customer_repo=customer_repo,
        tenant_repo=tenant_repo,
        gateway=mock_gateway,
    )


def _command(**overrides):
    values = dict(
        rental_id="a1b2c3d4-0000-0000-0000-000000000001",
        refund_type=RefundType.FULL,
        reason="Customer changed travel plans",
        cancelled_by="admin-42",
    )
    values.update(overrides)
    return CancelRentalCommandDTO(**values)


@pytest.mark.asyncio
class TestCancelRentalRefunds:
    async def test_full_refund_of_captured_payment(
        self, cancel_use_case, mock_gateway, mock_uow, sample_rental, sample_vehicle, sample_payment
    ):
        """
        Given: Active rental paid by a captured processor payment
        When: Cancelled with a full refund
        Then: Refund created on the connected account, rental cancelled, vehicle available
        """
        # Act
        result = await cancel_use_case.execute(_command())

        # Assert
        assert result.is_ok()
        assert result.value.refund.type == RefundOutcomeType.FULL
        assert result.value.refund.refund_id == "re_123"
        mock_gateway.create_refund.assert_called_once_with("pi_123", amount=None, account_id="acct_123")

        assert sample_rental.status == RentalStatus.CANCELLED
        assert sample_rental.notes.startswith("Airport pickup\n\nCancelled by admin-42. Reason: Customer changed travel plans")
        assert sample_vehicle.status == VehicleStatus.AVAILABLE
        assert sample_payment.status == PaymentStatus.REFUNDED
        assert sample_payment.capture_status == CaptureStatus.REFUNDED
        assert sample_payment.refund_amount == Decimal("500.00")
        assert sample_payment.stripe_refund_id == "re_123"
        mock_uow.commit.assert_called_once()

    async def test_partial_refund(self, cancel_use_case, mock_gateway, sample_payment):
        # Arrange
        mock_gateway.create_refund = AsyncMock(
            return_value=RefundInfo(id="re_456", amount=Decimal("120.00"), status="succeeded")
        )

        # Act
        result = await cancel_use_case.execute(
            _command(refund_type=RefundType.PARTIAL, refund_amount=Decimal("120.00"))
        )

        # Assert
        assert result.value.refund.type == RefundOutcomeType.PARTIAL
        mock_gateway.create_refund.assert_called_once_with(
            "pi_123", amount=Decimal("120.00"), account_id="acct_123"
        )
        assert sample_payment.status == PaymentStatus.PARTIAL_REFUND
        assert sample_payment.refund_amount == Decimal("120.00")
        assert result.value.notification_data.refund_amount == Decimal("120.00")

    async def test_preauthorisation_released_even_without_refund(
        self, cancel_use_case, mock_gateway, sample_payment
    ):
        """
        Given: Payment is an uncaptured pre-authorisation
        When: Cancelled with refund_type none
        Then: The hold is released and no refund is created
        """
        # Arrange
        sample_payment.capture_status = CaptureStatus.REQUIRES_CAPTURE
        mock_gateway.retrieve_intent = AsyncMock(return_value=_intent(IntentStatus.REQUIRES_CAPTURE))

        # Act
        result = await cancel_use_case.execute(_command(refund_type=RefundType.NONE))

        # Assert
        assert result.value.refund.type == RefundOutcomeType.CANCELLED
        mock_gateway.cancel_intent.assert_called_once_with("pi_123", account_id="acct_123")
        mock_gateway.create_refund.assert_not_called()
        assert sample_payment.status == PaymentStatus.CANCELLED
        assert sample_payment.capture_status == CaptureStatus.CANCELLED

    async def test_no_refund_requested(self, cancel_use_case, mock_gateway, sample_payment):
        # Act
        result = await cancel_use_case.execute(_command(refund_type=RefundType.NONE))

        # Assert
        assert result.value.refund is None
        mock_gateway.create_refund.assert_not_called()
        assert sample_payment.status == PaymentStatus.APPLIED

    async def test_unrefundable_intent_skipped(self, cancel_use_case, mock_gateway):
        # Arrange
        mock_gateway.retrieve_intent = AsyncMock(return_value=_intent(IntentStatus.PROCESSING))

        # Act
        result = await cancel_use_case.execute(_command())

        # Assert
        assert result.value.refund.type == RefundOutcomeType.SKIPPED
        assert "processing" in result.value.refund.message

    async def test_processor_error_still_cancels(
        self, cancel_use_case, mock_gateway, mock_uow, sample_rental, sample_vehicle, sample_payment
    ):
        """
        Given: The processor rejects the refund
        When: The rental is cancelled
        Then: The error is reported, the rental is still cancelled, payment untouched
        """
        # Arrange
        mock_gateway.create_refund = AsyncMock(side_effect=PaymentGatewayError("Charge already refunded"))

        # Act
        result = await cancel_use_case.execute(_command())

        # Assert
        assert result.is_ok()
        assert result.value.refund.type == RefundOutcomeType.ERROR
        assert result.value.refund.message == "Charge already refunded"
        assert sample_rental.status == RentalStatus.CANCELLED
        assert sample_vehicle.status == VehicleStatus.AVAILABLE
        assert sample_payment.status == PaymentStatus.APPLIED
        mock_uow.commit.assert_called_once()

    async def test_payment_without_intent_skips_processor(
        self, cancel_use_case, mock_gateway, sample_payment, sample_rental
    ):
        # Arrange
        sample_payment.stripe_payment_intent_id = None

        # Act
        result = await cancel_use_case.execute(_command())

        # Assert
        assert result.value.refund is None
        mock_gateway.retrieve_intent.assert_not_called()
        assert sample_rental.status == RentalStatus.CANCELLED

    async def test_notification_data(self, cancel_use_case):
        # Act
        result = await cancel_use_case.execute(_command())

        # Assert
        notice = result.value.notification_data
        assert notice.customer_name == "Ada Driver"
        assert notice.customer_email == "ada@example.com"
        assert notice.vehicle_name == "Toyota Corolla"
        assert notice.vehicle_reg == "AB12 CDE"
        assert notice.booking_ref == "RNT-A1B2C3D4"
        assert notice.refund_type == "full"
        assert notice.refund_amount == Decimal("500.00")
        assert notice.tenant_id == "tenant_1"

    async def test_incomplete_onboarding_uses_platform_account(
        self, cancel_use_case, repos, mock_gateway
    ):
        # Arrange
        _, _, _, _, tenant_repo = repos
        tenant_repo.get_by_id = AsyncMock(
            return_value=Tenant(id="tenant_1", name="Acme", stripe_account_id="acct_123",
                                stripe_onboarding_complete=False)
        )

        # Act
        await cancel_use_case.execute(_command())

        # Assert
        mock_gateway.retrieve_intent.assert_called_once_with("pi_123", account_id=None)


@pytest.mark.asyncio
class TestCancelRentalValidation:
    async def test_reason_required(self, cancel_use_case, repos):
        # Act
        result = await cancel_use_case.execute(_command(reason="   "))

        # Assert
        assert result.error.code == "MISSING_REASON"
        repos[0].get_by_id.assert_not_called()

    async def test_partial_refund_needs_amount(self, cancel_use_case):
        # Act
        result = await cancel_use_case.execute(_command(refund_type=RefundType.PARTIAL))

        # Assert
        assert result.error.code == "REFUND_AMOUNT_REQUIRED"

    async def test_partial_refund_above_payment_rejected_before_processor(
        self, cancel_use_case, mock_gateway, mock_uow, sample_rental
    ):
        """
        Given: Partial refund larger than the payment
        When: Cancellation is requested
        Then: Rejected without contacting the processor or changing the rental
        """
        # Act
        result = await cancel_use_case.execute(
            _command(refund_type=RefundType.PARTIAL, refund_amount=Decimal("600.00"))
        )

        # Assert
        assert result.error.code == "REFUND_AMOUNT_EXCEEDS_PAYMENT"
        mock_gateway.retrieve_intent.assert_not_called()
        assert sample_rental.status == RentalStatus.ACTIVE
        mock_uow.commit.assert_not_called()

    async def test_rental_not_found(self, cancel_use_case, repos):
        # Arrange
        repos[0].get_by_id = AsyncMock(return_value=None)

        # Act
        result = await cancel_use_case.execute(_command())

        # Assert
        assert result.error.code == "RENTAL_NOT_FOUND"

    async def test_already_cancelled(self, cancel_use_case, sample_rental, mock_gateway):
        # Arrange
        sample_rental.status = RentalStatus.CANCELLED

        # Act
        result = await cancel_use_case.execute(_command())

        # Assert
        assert result.error.code == "RENTAL_ALREADY_CANCELLED"
        mock_gateway.retrieve_intent.assert_not_called()

    async def test_explicit_payment_not_found(self, cancel_use_case, repos):
        # Arrange
        repos[2].get_by_id = AsyncMock(return_value=None)

        # Act
        result = await cancel_use_case.execute(_command(payment_id="pay_missing"))

        # Assert
        assert result.error.code == "PAYMENT_NOT_FOUND"

    async def test_write_failure_rolls_back(self, cancel_use_case, repos, mock_uow):
        # Arrange
        repos[0].update = AsyncMock(side_effect=Exception("deadlock detected"))

        # Act
        result = await cancel_use_case.execute(_command())

        # Assert
        assert result.error.code == "CANCEL_RENTAL_FAILED"
        mock_uow.rollback.assert_called_once()
