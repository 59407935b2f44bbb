"""SQLAlchemy implementation of DashboardRepository

Every query opens its own session from the factory: a single AsyncSession
cannot serve concurrent statements, and the KPI queries run in parallel.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Tuple
from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.dashboard_repository import DashboardRepository
from src.domain.ledger_entry import LedgerEntry, EntryType, ChargeCategory
from src.domain.payment import Payment, PaymentStatus, CaptureStatus
from src.domain.rental import Rental, RentalStatus
from src.domain.vehicle import Vehicle, VehicleStatus
from src.domain.money import to_money


class SqlAlchemyDashboardRepository(DashboardRepository):
    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory

    async def _scalar(self, stmt):
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def _row(self, stmt):
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.one()

    @staticmethod
    def _open_charges(category: str, tenant_id: Optional[str]):
        conditions = [
            LedgerEntry.type == EntryType.CHARGE,
            LedgerEntry.category == category,
            LedgerEntry.remaining_amount > 0,
        ]
        if tenant_id:
            conditions.append(LedgerEntry.tenant_id == tenant_id)
        return conditions

    async def overdue_rental_charges(
        self, tenant_id: Optional[str], today: date
    ) -> Tuple[int, Decimal]:
        stmt = select(
            func.count(LedgerEntry.id),
            func.coalesce(func.sum(LedgerEntry.remaining_amount), 0),
        ).where(
            *self._open_charges(ChargeCategory.RENTAL, tenant_id),
            LedgerEntry.due_date < today,
        )
        count, amount = await self._row(stmt)
        return int(count), to_money(amount)

    async def rental_charges_due_on(
        self, tenant_id: Optional[str], day: date
    ) -> Tuple[int, Decimal]:
        stmt = select(
            func.count(LedgerEntry.id),
            func.coalesce(func.sum(LedgerEntry.remaining_amount), 0),
        ).where(
            *self._open_charges(ChargeCategory.RENTAL, tenant_id),
            LedgerEntry.due_date == day,
        )
        count, amount = await self._row(stmt)
        return int(count), to_money(amount)

    async def active_rentals(self, tenant_id: Optional[str]) -> int:
        stmt = select(func.count(Rental.id)).where(Rental.status == RentalStatus.ACTIVE)
        if tenant_id:
            stmt = stmt.where(Rental.tenant_id == tenant_id)
        return int(await self._scalar(stmt))

    async def open_fines(
        self, tenant_id: Optional[str], today: date, due_soon_until: date
    ) -> Tuple[int, Decimal, int]:
        conditions = self._open_charges(ChargeCategory.FINES, tenant_id)
        totals = select(
            func.count(LedgerEntry.id),
            func.coalesce(func.sum(LedgerEntry.remaining_amount), 0),
        ).where(*conditions)
        due_soon = select(func.count(LedgerEntry.id)).where(
            *conditions,
            LedgerEntry.due_date >= today,
            LedgerEntry.due_date <= due_soon_until,
        )
        count, amount = await self._row(totals)
        due_soon_count = await self._scalar(due_soon)
        return int(count), to_money(amount), int(due_soon_count)

    async def collected_revenue(
        self, tenant_id: Optional[str], start: date, end: date
    ) -> Decimal:
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.payment_date >= start,
            Payment.payment_date <= end,
            or_(
                Payment.capture_status.is_(None),
                Payment.capture_status == CaptureStatus.CAPTURED,
            ),
            Payment.status.not_in(
                [PaymentStatus.PENDING, PaymentStatus.REFUNDED, PaymentStatus.CANCELLED]
            ),
        )
        if tenant_id:
            stmt = stmt.where(Payment.tenant_id == tenant_id)
        return to_money(await self._scalar(stmt))

    async def fleet_counts(self, tenant_id: Optional[str]) -> Tuple[int, int, int]:
        stmt = (
            select(Vehicle.status, func.count(Vehicle.id))
            .where(Vehicle.is_disposed.is_(False))
            .group_by(Vehicle.status)
        )
        if tenant_id:
            stmt = stmt.where(Vehicle.tenant_id == tenant_id)

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            by_status = {status: int(count) for status, count in result.all()}

        total = sum(by_status.values())
        return (
            total,
            by_status.get(VehicleStatus.RENTED, 0),
            by_status.get(VehicleStatus.AVAILABLE, 0),
        )
