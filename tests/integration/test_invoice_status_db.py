"""Integration tests for GetInvoiceStatus against a real database

Tests cover:
- Applications from uncaptured pre-authorisations do not count as paid
- Captured applications settle the invoice
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from sqlmodel.ext.asyncio.session import AsyncSession
from src.domain import (
    Customer,
    Rental,
    Invoice,
    InvoiceStatus,
    LedgerEntry,
    EntryType,
    ChargeCategory,
    Payment,
    PaymentApplication,
    CaptureStatus,
)
from src.app.use_cases.billing.get_invoice_status import GetInvoiceStatus
from src.adapter.repositories import SqlAlchemyInvoiceRepository, SqlAlchemyPaymentApplicationRepository


async def _seed(db_session: AsyncSession, capture_status: CaptureStatus, due_date: date):
    db_session.add(Customer(id="cust_inv", name="Ada Driver"))
    await db_session.flush()
    db_session.add(Rental(id="rental_inv", customer_id="cust_inv"))
    await db_session.flush()
    db_session.add_all([
        Invoice(
            id="inv_1", rental_id="rental_inv", customer_id="cust_inv",
            invoice_number="INV-2024-000500", due_date=due_date,
            rental_fee=Decimal("500.00"), total_amount=Decimal("500.00"),
        ),
        LedgerEntry(
            id="charge_inv", customer_id="cust_inv", rental_id="rental_inv",
            type=EntryType.CHARGE, category=ChargeCategory.RENTAL,
            amount=Decimal("500.00"), remaining_amount=Decimal("0.00"),
        ),
        Payment(
            id="pay_inv", customer_id="cust_inv", rental_id="rental_inv",
            amount=Decimal("500.00"), remaining_amount=Decimal("0.00"),
            capture_status=capture_status,
        ),
    ])
    await db_session.flush()
    db_session.add(PaymentApplication(payment_id="pay_inv", charge_entry_id="charge_inv", amount_applied=Decimal("500.00")))
    await db_session.commit()


def _use_case(db_session: AsyncSession) -> GetInvoiceStatus:
    return GetInvoiceStatus(
        SqlAlchemyInvoiceRepository(db_session),
        SqlAlchemyPaymentApplicationRepository(db_session),
    )


@pytest.mark.asyncio
class TestInvoiceStatusIntegration:
    async def test_pre_authorisation_not_counted_as_paid(self, db_session: AsyncSession):
        """
        Given: A $500 invoice whose only application comes from an uncaptured hold
        When: The invoice status is computed before the due date
        Then: Nothing is paid and the invoice is pending
        """
        # Arrange
        await _seed(db_session, CaptureStatus.REQUIRES_CAPTURE, date.today() + timedelta(days=7))

        # Act
        result = await _use_case(db_session).execute("inv_1")

        # Assert
        assert result.value.paid_amount == Decimal("0.00")
        assert result.value.computed_status == InvoiceStatus.PENDING

    async def test_pre_authorisation_past_due_is_overdue(self, db_session: AsyncSession):
        await _seed(db_session, CaptureStatus.REQUIRES_CAPTURE, date.today() - timedelta(days=1))

        result = await _use_case(db_session).execute("inv_1")

        assert result.value.computed_status == InvoiceStatus.OVERDUE

    async def test_captured_payment_settles_invoice(self, db_session: AsyncSession):
        # Arrange
        await _seed(db_session, CaptureStatus.CAPTURED, date.today() - timedelta(days=1))

        # Act
        result = await _use_case(db_session).execute("inv_1")

        # Assert
        assert result.value.paid_amount == Decimal("500.00")
        assert result.value.balance_due == Decimal("0.00")
        assert result.value.computed_status == InvoiceStatus.PAID
