"""Unit tests for installment processing use cases

Tests cover:
- Successful charge records a payment and settles the installment charge
- Last installment paid completes the plan
- Declined charge schedules a retry; past grace marks installment and plan overdue
- Processor still processing leaves the installment PROCESSING
- Paid installments are skipped, missing payment method fails
- Charges left in PROCESSING resolved against the processor
- Stale charge claims released back to the queue
- Operator retry and overdue sweep, including stuck PROCESSING installments
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.payment_gateway import IntentStatus, PaymentGatewayError, PaymentIntentInfo
from src.app.use_cases.installments import (
    ProcessInstallment,
    ReconcileInstallmentCharge,
    RetryInstallment,
    MarkOverdueInstallments,
)
from src.domain.installment import (
    InstallmentPlan,
    ScheduledInstallment,
    InstallmentStatus,
    PlanStatus,
    PlanType,
)
from src.domain.ledger_entry import LedgerEntry, EntryType, ChargeCategory
from src.domain.payment import CaptureStatus, PaymentStatus
from src.domain.tenant import Tenant


def _intent(status, failure_message=None):
    return PaymentIntentInfo(
        id="pi_123",
        status=status,
        raw_status=status.value,
        amount=Decimal("360.00"),
        currency="usd",
        failure_message=failure_message,
    )


@pytest.fixture
def sample_plan():
    """Active weekly plan with a saved card"""
    return InstallmentPlan(
        id="plan_1",
        tenant_id="tenant_1",
        rental_id="rental_1",
        customer_id="cust_1",
        plan_type=PlanType.WEEKLY,
        total_installable_amount=Decimal("720.00"),
        number_of_installments=2,
        installment_amount=Decimal("360.00"),
        stripe_customer_id="cus_123",
        stripe_payment_method_id="pm_123",
        status=PlanStatus.ACTIVE,
        paid_installments=0,
        total_paid=Decimal("0.00"),
    )


@pytest.fixture
def sample_installment():
    return ScheduledInstallment(
        id="inst_1",
        tenant_id="tenant_1",
        installment_plan_id="plan_1",
        installment_number=1,
        amount=Decimal("360.00"),
        due_date=date(2024, 3, 1),
        status=InstallmentStatus.SCHEDULED,
        ledger_entry_id="charge_1",
        failure_count=0,
    )


@pytest.fixture
def second_installment():
    return ScheduledInstallment(
        id="inst_2",
        tenant_id="tenant_1",
        installment_plan_id="plan_1",
        installment_number=2,
        amount=Decimal("360.00"),
        due_date=date(2024, 3, 8),
        status=InstallmentStatus.SCHEDULED,
        failure_count=0,
    )


@pytest.fixture
def sample_charge():
    return LedgerEntry(
        id="charge_1",
        customer_id="cust_1",
        rental_id="rental_1",
        type=EntryType.CHARGE,
        category=ChargeCategory.RENTAL,
        amount=Decimal("360.00"),
        remaining_amount=Decimal("360.00"),
        due_date=date(2024, 3, 1),
    )


@pytest.fixture
def mock_installment_repo(sample_plan, sample_installment, second_installment):
    repo = MagicMock()
    repo.get_installment = AsyncMock(return_value=sample_installment)
    repo.get_plan = AsyncMock(return_value=sample_plan)
    repo.get_config = AsyncMock(return_value=None)
    repo.update_installment = AsyncMock()
    repo.update_plan = AsyncMock()
    repo.list_installments = AsyncMock(return_value=[sample_installment, second_installment])
    return repo


@pytest.fixture
def mock_tenant_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=Tenant(
            id="tenant_1", name="Acme Rentals",
            stripe_account_id="acct_123", stripe_onboarding_complete=True,
        )
    )
    return repo


@pytest.fixture
def mock_payment_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda payment: payment)
    repo.update = AsyncMock()
    return repo


@pytest.fixture
def mock_ledger_repo(sample_charge):
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda entry: entry)
    repo.get_by_id = AsyncMock(return_value=sample_charge)
    repo.update = AsyncMock()
    return repo


@pytest.fixture
def mock_application_repo():
    repo = MagicMock()
    repo.create = AsyncMock()
    return repo


@pytest.fixture
def mock_gateway():
    gateway = MagicMock()
    gateway.charge_off_session = AsyncMock(return_value=_intent(IntentStatus.SUCCEEDED))
    return gateway


@pytest.fixture
def mock_notifications():
    service = MagicMock()
    service.send_installment_receipt = AsyncMock()
    service.send_installment_failed = AsyncMock()
    return service


@pytest.fixture
def process_use_case(
    mock_uow, mock_installment_repo, mock_tenant_repo, mock_payment_repo,
    mock_ledger_repo, mock_application_repo, mock_gateway, mock_notifications,
):
    """ProcessInstallment use case instance with mocked dependencies"""
    return ProcessInstallment(
        uow=mock_uow,
        installment_repo=mock_installment_repo,
        tenant_repo=mock_tenant_repo,
        payment_repo=mock_payment_repo,
        ledger_repo=mock_ledger_repo,
        application_repo=mock_application_repo,
        gateway=mock_gateway,
        notification_service=mock_notifications,
        currency="usd",
    )


@pytest.mark.asyncio
class TestProcessInstallmentSuccess:
    async def test_successful_charge_settles_installment(
        self, process_use_case, mock_gateway, mock_payment_repo, mock_application_repo,
        mock_notifications, sample_installment, sample_plan, sample_charge, mock_uow,
    ):
        """
        Given: A scheduled installment with a saved card
        When: The processor charge succeeds
        Then: A captured payment is allocated to the installment's charge and the plan advances
        """
        # Act
        result = await process_use_case.execute("inst_1", as_of=date(2024, 3, 1))

        # Assert
        assert result.is_ok()
        assert result.value.outcome == "paid"
        assert sample_installment.status == InstallmentStatus.PAID
        assert sample_installment.stripe_payment_intent_id == "pi_123"

        payment = mock_payment_repo.create.call_args[0][0]
        assert payment.capture_status == CaptureStatus.CAPTURED
        assert payment.amount == Decimal("360.00")
        assert payment.remaining_amount == Decimal("0.00")
        assert payment.status == PaymentStatus.APPLIED

        application = mock_application_repo.create.call_args[0][0]
        assert application.charge_entry_id == "charge_1"
        assert application.amount_applied == Decimal("360.00")
        assert sample_charge.remaining_amount == Decimal("0.00")

        assert sample_plan.paid_installments == 1
        assert sample_plan.total_paid == Decimal("360.00")
        assert sample_plan.next_due_date == date(2024, 3, 8)
        assert sample_plan.status == PlanStatus.ACTIVE

        kwargs = mock_gateway.charge_off_session.call_args.kwargs
        assert kwargs["account_id"] == "acct_123"
        assert kwargs["customer_id"] == "cus_123"
        assert kwargs["idempotency_key"] == "installment-inst_1-0"
        assert mock_uow.commit.call_count == 2
        mock_notifications.send_installment_receipt.assert_called_once()

    async def test_last_installment_completes_plan(
        self, process_use_case, mock_installment_repo, sample_installment, second_installment, sample_plan
    ):
        # Arrange
        second_installment.status = InstallmentStatus.PAID
        sample_plan.paid_installments = 1

        # Act
        await process_use_case.execute("inst_1", as_of=date(2024, 3, 1))

        # Assert
        assert sample_plan.status == PlanStatus.COMPLETED
        assert sample_plan.next_due_date is None
        assert sample_plan.paid_installments == 2

    async def test_notification_failure_does_not_fail_charge(
        self, process_use_case, mock_notifications
    ):
        # Arrange
        mock_notifications.send_installment_receipt = AsyncMock(side_effect=Exception("smtp down"))

        # Act
        result = await process_use_case.execute("inst_1", as_of=date(2024, 3, 1))

        # Assert
        assert result.is_ok()
        assert result.value.outcome == "paid"

    async def test_processing_intent_stays_processing(
        self, process_use_case, mock_gateway, mock_payment_repo, sample_installment
    ):
        # Arrange
        mock_gateway.charge_off_session = AsyncMock(return_value=_intent(IntentStatus.PROCESSING))

        # Act
        result = await process_use_case.execute("inst_1", as_of=date(2024, 3, 1))

        # Assert
        assert result.value.outcome == "processing"
        assert sample_installment.status == InstallmentStatus.PROCESSING
        assert sample_installment.stripe_payment_intent_id == "pi_123"
        mock_payment_repo.create.assert_not_called()

    async def test_paid_installment_skipped(self, process_use_case, mock_gateway, sample_installment):
        # Arrange
        sample_installment.status = InstallmentStatus.PAID

        # Act
        result = await process_use_case.execute("inst_1")

        # Assert
        assert result.value.outcome == "skipped"
        mock_gateway.charge_off_session.assert_not_called()


@pytest.mark.asyncio
class TestProcessInstallmentFailure:
    async def test_decline_schedules_retry(
        self, process_use_case, mock_gateway, mock_notifications, sample_installment, sample_plan
    ):
        """
        Given: Card is declined on the due date
        When: The installment is processed
        Then: FAILED with failure_count 1 and retry the next day; plan stays active
        """
        # Arrange
        mock_gateway.charge_off_session = AsyncMock(
            side_effect=PaymentGatewayError("Your card was declined.", code="card_declined")
        )

        # Act
        result = await process_use_case.execute("inst_1", as_of=date(2024, 3, 1))

        # Assert
        assert result.is_ok()
        assert result.value.outcome == "failed"
        assert result.value.failure_reason == "Your card was declined."
        assert sample_installment.status == InstallmentStatus.FAILED
        assert sample_installment.failure_count == 1
        assert sample_installment.next_retry_date == date(2024, 3, 2)
        assert sample_plan.status == PlanStatus.ACTIVE
        mock_notifications.send_installment_failed.assert_called_once()

    async def test_failure_past_grace_is_overdue(
        self, process_use_case, mock_gateway, mock_installment_repo, sample_installment, sample_plan
    ):
        # Arrange
        sample_installment.status = InstallmentStatus.FAILED
        sample_installment.failure_count = 2
        mock_gateway.charge_off_session = AsyncMock(
            return_value=_intent(IntentStatus.REQUIRES_PAYMENT_METHOD, failure_message="Insufficient funds")
        )

        # Act
        result = await process_use_case.execute("inst_1", as_of=date(2024, 3, 10))

        # Assert
        assert result.value.outcome == "failed"
        assert sample_installment.status == InstallmentStatus.OVERDUE
        assert sample_installment.failure_count == 3
        assert sample_installment.next_retry_date is None
        assert sample_plan.status == PlanStatus.OVERDUE
        mock_installment_repo.update_plan.assert_called_once_with(sample_plan)

    async def test_missing_payment_method_fails_without_charging(
        self, process_use_case, mock_gateway, sample_plan, sample_installment
    ):
        # Arrange
        sample_plan.stripe_payment_method_id = None

        # Act
        result = await process_use_case.execute("inst_1", as_of=date(2024, 3, 1))

        # Assert
        assert result.value.failure_reason == "No payment method on file"
        assert sample_installment.failure_count == 1
        mock_gateway.charge_off_session.assert_not_called()

    async def test_processing_installment_rejected(self, process_use_case, sample_installment):
        # Arrange
        sample_installment.status = InstallmentStatus.PROCESSING

        # Act
        result = await process_use_case.execute("inst_1")

        # Assert
        assert result.error.code == "INSTALLMENT_NOT_PROCESSABLE"

    async def test_installment_not_found(self, process_use_case, mock_installment_repo):
        # Arrange
        mock_installment_repo.get_installment = AsyncMock(return_value=None)

        # Act
        result = await process_use_case.execute("missing")

        # Assert
        assert result.error.code == "INSTALLMENT_NOT_FOUND"


@pytest.mark.asyncio
class TestRetryInstallment:
    async def test_failed_installment_rescheduled(
        self, mock_uow, mock_installment_repo, sample_installment
    ):
        """
        Given: An overdue installment that exhausted its retries
        When: An operator retries it
        Then: It is SCHEDULED again with a fresh retry budget
        """
        # Arrange
        sample_installment.status = InstallmentStatus.OVERDUE
        sample_installment.failure_count = 4
        use_case = RetryInstallment(mock_uow, mock_installment_repo)

        # Act
        result = await use_case.execute("inst_1")

        # Assert
        assert result.is_ok()
        assert result.value.status == InstallmentStatus.SCHEDULED
        assert result.value.failure_count == 0
        mock_uow.commit.assert_called_once()

    async def test_paid_installment_not_retryable(self, mock_uow, mock_installment_repo, sample_installment):
        # Arrange
        sample_installment.status = InstallmentStatus.PAID
        use_case = RetryInstallment(mock_uow, mock_installment_repo)

        # Act
        result = await use_case.execute("inst_1")

        # Assert
        assert result.error.code == "INSTALLMENT_NOT_RETRYABLE"
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestMarkOverdueInstallments:
    async def test_marks_only_installments_past_grace(
        self, mock_uow, mock_installment_repo, sample_installment, second_installment, sample_plan
    ):
        """
        Given: One installment 9 days late and one 2 days late (grace 3 days)
        When: The overdue sweep runs
        Then: Only the first is overdue, and its plan becomes overdue
        """
        # Arrange
        mock_installment_repo.list_unpaid_due_before = AsyncMock(
            return_value=[sample_installment, second_installment]
        )
        use_case = MarkOverdueInstallments(mock_uow, mock_installment_repo)

        # Act
        result = await use_case.execute(as_of=date(2024, 3, 10))

        # Assert
        assert result.value.checked == 2
        assert result.value.marked_overdue == 1
        assert sample_installment.status == InstallmentStatus.OVERDUE
        assert second_installment.status == InstallmentStatus.SCHEDULED
        assert sample_plan.status == PlanStatus.OVERDUE
        mock_installment_repo.get_config.assert_called_once_with("tenant_1")
        mock_uow.commit.assert_called_once()

    async def test_processing_installment_past_grace_is_overdue(
        self, mock_uow, mock_installment_repo, sample_installment, sample_plan
    ):
        """
        Given: An installment stuck in PROCESSING since January 2024
        When: The overdue sweep runs a year later
        Then: It is overdue like any other unpaid installment
        """
        # Arrange
        sample_installment.status = InstallmentStatus.PROCESSING
        sample_installment.due_date = date(2024, 1, 1)
        sample_installment.next_retry_date = date(2024, 1, 2)
        mock_installment_repo.list_unpaid_due_before = AsyncMock(return_value=[sample_installment])
        use_case = MarkOverdueInstallments(mock_uow, mock_installment_repo)

        # Act
        result = await use_case.execute(as_of=date(2025, 1, 1))

        # Assert
        assert result.value.marked_overdue == 1
        assert sample_installment.status == InstallmentStatus.OVERDUE
        assert sample_installment.next_retry_date is None
        assert sample_plan.status == PlanStatus.OVERDUE


CLAIMED_AT = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def reconcile_use_case(
    mock_uow, mock_installment_repo, mock_tenant_repo, mock_payment_repo,
    mock_ledger_repo, mock_application_repo, mock_gateway, mock_notifications,
):
    """ReconcileInstallmentCharge with a clock two hours after the claim"""
    return ReconcileInstallmentCharge(
        uow=mock_uow,
        installment_repo=mock_installment_repo,
        tenant_repo=mock_tenant_repo,
        payment_repo=mock_payment_repo,
        ledger_repo=mock_ledger_repo,
        application_repo=mock_application_repo,
        gateway=mock_gateway,
        notification_service=mock_notifications,
        currency="usd",
        clock=lambda: CLAIMED_AT + timedelta(hours=2),
    )


@pytest.fixture
def processing_installment(sample_installment):
    """Installment whose off-session charge came back as processing"""
    sample_installment.status = InstallmentStatus.PROCESSING
    sample_installment.stripe_payment_intent_id = "pi_123"
    sample_installment.last_attempted_at = CLAIMED_AT
    return sample_installment


@pytest.mark.asyncio
class TestReconcileInstallmentCharge:
    async def test_succeeded_intent_records_payment(
        self, reconcile_use_case, mock_gateway, mock_payment_repo, processing_installment, sample_plan, sample_charge
    ):
        """
        Given: An installment left PROCESSING with a recorded payment intent
        When: The processor now reports the intent as succeeded
        Then: The installment is paid and its charge settled
        """
        # Arrange
        mock_gateway.retrieve_intent = AsyncMock(return_value=_intent(IntentStatus.SUCCEEDED))

        # Act
        result = await reconcile_use_case.execute("inst_1", as_of=date(2024, 3, 2))

        # Assert
        assert result.is_ok()
        assert result.value.outcome == "paid"
        assert processing_installment.status == InstallmentStatus.PAID
        assert sample_charge.remaining_amount == Decimal("0.00")
        assert sample_plan.paid_installments == 1
        mock_gateway.retrieve_intent.assert_called_once_with("pi_123", account_id="acct_123")
        mock_gateway.charge_off_session.assert_not_called()
        assert mock_payment_repo.create.call_args[0][0].stripe_payment_intent_id == "pi_123"

    async def test_failed_intent_records_failed_attempt(
        self, reconcile_use_case, mock_gateway, mock_payment_repo, processing_installment
    ):
        # Arrange
        mock_gateway.retrieve_intent = AsyncMock(
            return_value=_intent(IntentStatus.REQUIRES_PAYMENT_METHOD, failure_message="Bank declined")
        )

        # Act
        result = await reconcile_use_case.execute("inst_1", as_of=date(2024, 3, 2))

        # Assert
        assert result.value.outcome == "failed"
        assert result.value.failure_reason == "Bank declined"
        assert processing_installment.status == InstallmentStatus.FAILED
        assert processing_installment.failure_count == 1
        assert processing_installment.next_retry_date == date(2024, 3, 3)
        assert processing_installment.stripe_payment_intent_id is None
        mock_payment_repo.create.assert_not_called()

    async def test_still_processing_left_alone(
        self, reconcile_use_case, mock_gateway, mock_uow, processing_installment
    ):
        # Arrange
        mock_gateway.retrieve_intent = AsyncMock(return_value=_intent(IntentStatus.PROCESSING))

        # Act
        result = await reconcile_use_case.execute("inst_1", as_of=date(2024, 3, 2))

        # Assert
        assert result.value.outcome == "processing"
        assert processing_installment.status == InstallmentStatus.PROCESSING
        mock_uow.commit.assert_not_called()

    async def test_stale_claim_without_intent_released(
        self, reconcile_use_case, mock_gateway, mock_uow, processing_installment
    ):
        """
        Given: A worker claimed the installment two hours ago and never recorded an intent
        When: The charge is reconciled
        Then: The installment is scheduled again with its failure_count unchanged
        """
        # Arrange
        processing_installment.stripe_payment_intent_id = None

        # Act
        result = await reconcile_use_case.execute("inst_1", as_of=date(2024, 3, 1))

        # Assert
        assert result.value.outcome == "released"
        assert processing_installment.status == InstallmentStatus.SCHEDULED
        assert processing_installment.failure_count == 0
        mock_gateway.retrieve_intent.assert_not_called()
        mock_uow.commit.assert_called_once()

    async def test_stale_retry_claim_returns_to_failed(self, reconcile_use_case, processing_installment):
        # Arrange
        processing_installment.stripe_payment_intent_id = None
        processing_installment.failure_count = 2

        # Act
        result = await reconcile_use_case.execute("inst_1", as_of=date(2024, 3, 1))

        # Assert
        assert result.value.outcome == "released"
        assert processing_installment.status == InstallmentStatus.FAILED
        assert processing_installment.failure_count == 2
        assert processing_installment.next_retry_date == date(2024, 3, 1)

    async def test_recent_claim_not_released(self, reconcile_use_case, mock_uow, processing_installment):
        # Arrange
        processing_installment.stripe_payment_intent_id = None
        processing_installment.last_attempted_at = CLAIMED_AT + timedelta(hours=1, minutes=50)

        # Act
        result = await reconcile_use_case.execute("inst_1", as_of=date(2024, 3, 1))

        # Assert
        assert result.value.outcome == "processing"
        assert processing_installment.status == InstallmentStatus.PROCESSING
        mock_uow.commit.assert_not_called()

    async def test_overdue_installment_paid_when_pending_intent_succeeds(
        self, reconcile_use_case, mock_gateway, processing_installment, second_installment, sample_plan
    ):
        # Arrange
        processing_installment.status = InstallmentStatus.OVERDUE
        sample_plan.status = PlanStatus.OVERDUE
        mock_gateway.retrieve_intent = AsyncMock(return_value=_intent(IntentStatus.SUCCEEDED))

        # Act
        result = await reconcile_use_case.execute("inst_1", as_of=date(2024, 3, 20))

        # Assert
        assert result.value.outcome == "paid"
        assert processing_installment.status == InstallmentStatus.PAID
        assert sample_plan.status == PlanStatus.ACTIVE

    async def test_overdue_installment_with_failed_intent_stays_overdue(
        self, reconcile_use_case, mock_gateway, processing_installment
    ):
        # Arrange
        processing_installment.status = InstallmentStatus.OVERDUE
        mock_gateway.retrieve_intent = AsyncMock(return_value=_intent(IntentStatus.CANCELED))

        # Act
        result = await reconcile_use_case.execute("inst_1", as_of=date(2024, 3, 20))

        # Assert
        assert result.value.outcome == "skipped"
        assert processing_installment.status == InstallmentStatus.OVERDUE
        assert processing_installment.stripe_payment_intent_id is None
        assert processing_installment.failure_count == 0

    async def test_lookup_failure_rolls_back(
        self, reconcile_use_case, mock_gateway, mock_uow, processing_installment
    ):
        # Arrange
        mock_gateway.retrieve_intent = AsyncMock(side_effect=PaymentGatewayError("Stripe unavailable"))

        # Act
        result = await reconcile_use_case.execute("inst_1", as_of=date(2024, 3, 2))

        # Assert
        assert result.error.code == "INTENT_LOOKUP_FAILED"
        assert result.error.reason == "Stripe unavailable"
        assert processing_installment.status == InstallmentStatus.PROCESSING
        mock_uow.rollback.assert_called_once()

    async def test_scheduled_installment_skipped(self, reconcile_use_case, mock_gateway, sample_installment):
        # Act
        result = await reconcile_use_case.execute("inst_1")

        # Assert
        assert result.value.outcome == "skipped"
        mock_gateway.retrieve_intent.assert_not_called()
