"""Unit tests for persisted timestamps

Tests cover:
- utc_now is timezone-aware
- Model timestamp defaults carry UTC tzinfo
- Timestamp columns are declared timezone-aware
"""

from datetime import timedelta

from src.domain.base import utc_now
from src.domain.installment import InstallmentPlan, ScheduledInstallment
from src.domain.payment import Payment


class TestTimestamps:
    def test_utc_now_is_aware(self):
        now = utc_now()

        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_model_defaults_are_aware(self):
        """
        Given: A freshly built installment plan and payment
        When: Their created_at defaults are read
        Then: Both carry UTC tzinfo
        """
        # Arrange / Act
        plan = InstallmentPlan(rental_id="rental_1", customer_id="cust_1")
        payment = Payment(customer_id="cust_1")

        # Assert
        assert plan.created_at.utcoffset() == timedelta(0)
        assert payment.created_at.utcoffset() == timedelta(0)

    def test_timestamp_columns_are_timezone_aware(self):
        columns = ScheduledInstallment.__table__.columns

        assert columns["paid_at"].type.timezone is True
        assert columns["last_attempted_at"].type.timezone is True
