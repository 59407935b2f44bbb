"""SQLAlchemy implementation of LedgerRepository

Charges are locked with SELECT FOR UPDATE while a payment is being
allocated across them.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, List, Sequence
from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.ledger_repository import LedgerRepository
from src.domain.ledger_entry import LedgerEntry, EntryType, ChargeCategory
from src.domain.money import to_money


class SqlAlchemyLedgerRepository(LedgerRepository):
    """
    SQLAlchemy implementation of LedgerRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Aggregates computed in SQL and quantised to cents
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_id(self, entry_id: str, for_update: bool = False) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntry).where(LedgerEntry.id == entry_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_payment_id(self, payment_id: str) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntry).where(
            LedgerEntry.payment_id == payment_id,
            LedgerEntry.type == EntryType.PAYMENT,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_open_charges(
        self,
        customer_id: str,
        categories: Sequence[str],
        rental_id: Optional[str] = None,
        for_update: bool = False,
    ) -> List[LedgerEntry]:
        stmt = select(LedgerEntry).where(
            LedgerEntry.customer_id == customer_id,
            LedgerEntry.type == EntryType.CHARGE,
            LedgerEntry.category.in_(list(categories)),
            LedgerEntry.remaining_amount > 0,
        )

        if rental_id:
            stmt = stmt.where(LedgerEntry.rental_id == rental_id)

        stmt = stmt.order_by(
            LedgerEntry.due_date.asc().nulls_last(),
            LedgerEntry.entry_date.asc(),
            LedgerEntry.id.asc(),
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, entry: LedgerEntry) -> LedgerEntry:
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def sum_outstanding(
        self, customer_id: str, as_of: date, tenant_id: Optional[str] = None
    ) -> Decimal:
        stmt = select(func.coalesce(func.sum(LedgerEntry.remaining_amount), 0)).where(
            LedgerEntry.customer_id == customer_id,
            LedgerEntry.type == EntryType.CHARGE,
            # Future-dated rental installments are not yet owed
            or_(
                LedgerEntry.category != ChargeCategory.RENTAL,
                LedgerEntry.due_date.is_(None),
                LedgerEntry.due_date <= as_of,
            ),
        )
        if tenant_id:
            stmt = stmt.where(LedgerEntry.tenant_id == tenant_id)

        result = await self.session.execute(stmt)
        return to_money(result.scalar_one())

    async def sum_charges(self, customer_id: str, tenant_id: Optional[str] = None) -> Decimal:
        stmt = select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(
            LedgerEntry.customer_id == customer_id,
            LedgerEntry.type == EntryType.CHARGE,
        )
        if tenant_id:
            stmt = stmt.where(LedgerEntry.tenant_id == tenant_id)

        result = await self.session.execute(stmt)
        return to_money(result.scalar_one())

    async def sum_payment_entries(self, customer_id: str, tenant_id: Optional[str] = None) -> Decimal:
        stmt = select(func.coalesce(func.sum(func.abs(LedgerEntry.amount)), 0)).where(
            LedgerEntry.customer_id == customer_id,
            LedgerEntry.type == EntryType.PAYMENT,
        )
        if tenant_id:
            stmt = stmt.where(LedgerEntry.tenant_id == tenant_id)

        result = await self.session.execute(stmt)
        return to_money(result.scalar_one())

    async def list_charges(self, tenant_id: Optional[str] = None) -> List[LedgerEntry]:
        stmt = select(LedgerEntry).where(LedgerEntry.type == EntryType.CHARGE)
        if tenant_id:
            stmt = stmt.where(LedgerEntry.tenant_id == tenant_id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())
