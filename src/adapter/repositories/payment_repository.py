"""SQLAlchemy implementations of PaymentRepository and PaymentApplicationRepository"""

from decimal import Decimal
from typing import Dict, Optional, List
from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.domain.base import utc_now
from src.app.repositories.payment_repository import (
    PaymentRepository,
    PaymentApplicationRepository,
)
from src.domain.ledger_entry import LedgerEntry
from src.domain.payment import (
    Payment,
    PaymentApplication,
    PaymentStatus,
    CaptureStatus,
)
from src.domain.money import to_money


def _collected():
    """Payments whose funds were actually captured"""
    return or_(
        Payment.capture_status.is_(None),
        Payment.capture_status != CaptureStatus.REQUIRES_CAPTURE,
    )


class SqlAlchemyPaymentRepository(PaymentRepository):
    """
    SQLAlchemy implementation of PaymentRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payment: Payment) -> Payment:
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def get_by_id(self, payment_id: str, for_update: bool = False) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.id == payment_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_latest_with_intent_for_rental(
        self, rental_id: str, for_update: bool = False
    ) -> Optional[Payment]:
        stmt = (
            select(Payment)
            .where(
                Payment.rental_id == rental_id,
                Payment.stripe_payment_intent_id.is_not(None),
            )
            .order_by(Payment.created_at.desc())
            .limit(1)
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, payment: Payment) -> Payment:
        payment.updated_at = utc_now()
        self.session.add(payment)
        await self.session.flush()
        return payment

    async def sum_available_credit(self, customer_id: str, tenant_id: Optional[str] = None) -> Decimal:
        stmt = select(func.coalesce(func.sum(Payment.remaining_amount), 0)).where(
            Payment.customer_id == customer_id,
            _collected(),
            Payment.status.not_in([PaymentStatus.REFUNDED, PaymentStatus.CANCELLED]),
        )
        if tenant_id:
            stmt = stmt.where(Payment.tenant_id == tenant_id)

        result = await self.session.execute(stmt)
        return to_money(result.scalar_one())

    async def list_all(self, tenant_id: Optional[str] = None) -> List[Payment]:
        stmt = select(Payment)
        if tenant_id:
            stmt = stmt.where(Payment.tenant_id == tenant_id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class SqlAlchemyPaymentApplicationRepository(PaymentApplicationRepository):
    """SQLAlchemy implementation of PaymentApplicationRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, application: PaymentApplication) -> PaymentApplication:
        self.session.add(application)
        await self.session.flush()
        await self.session.refresh(application)
        return application

    async def sum_applied_for_payment(self, payment_id: str) -> Decimal:
        stmt = select(func.coalesce(func.sum(PaymentApplication.amount_applied), 0)).where(
            PaymentApplication.payment_id == payment_id
        )
        result = await self.session.execute(stmt)
        return to_money(result.scalar_one())

    async def sum_collected_for_rental(self, rental_id: str) -> Decimal:
        stmt = (
            select(func.coalesce(func.sum(PaymentApplication.amount_applied), 0))
            .join(LedgerEntry, LedgerEntry.id == PaymentApplication.charge_entry_id)
            .join(Payment, Payment.id == PaymentApplication.payment_id)
            .where(LedgerEntry.rental_id == rental_id, _collected())
        )
        result = await self.session.execute(stmt)
        return to_money(result.scalar_one())

    async def get_totals_by_charge(self) -> Dict[str, Decimal]:
        stmt = select(
            PaymentApplication.charge_entry_id,
            func.sum(PaymentApplication.amount_applied),
        ).group_by(PaymentApplication.charge_entry_id)
        result = await self.session.execute(stmt)
        return {charge_id: to_money(total) for charge_id, total in result.all()}

    async def get_totals_by_payment(self) -> Dict[str, Decimal]:
        stmt = select(
            PaymentApplication.payment_id,
            func.sum(PaymentApplication.amount_applied),
        ).group_by(PaymentApplication.payment_id)
        result = await self.session.execute(stmt)
        return {payment_id: to_money(total) for payment_id, total in result.all()}
