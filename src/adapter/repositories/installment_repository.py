"""SQLAlchemy implementation of InstallmentRepository"""

from datetime import date
from typing import Optional, List
from sqlalchemy import and_, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.domain.base import utc_now
from src.app.repositories.installment_repository import InstallmentRepository
from src.domain.installment import (
    InstallmentConfig,
    InstallmentPlan,
    ScheduledInstallment,
    InstallmentStatus,
    PlanStatus,
)


class SqlAlchemyInstallmentRepository(InstallmentRepository):
    """
    SQLAlchemy implementation of InstallmentRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE on plans and installments
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_config(self, tenant_id: Optional[str]) -> Optional[InstallmentConfig]:
        stmt = select(InstallmentConfig).where(InstallmentConfig.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_plan(self, plan: InstallmentPlan) -> InstallmentPlan:
        self.session.add(plan)
        await self.session.flush()
        await self.session.refresh(plan)
        return plan

    async def get_plan(self, plan_id: str, for_update: bool = False) -> Optional[InstallmentPlan]:
        stmt = select(InstallmentPlan).where(InstallmentPlan.id == plan_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_plan(self, plan: InstallmentPlan) -> InstallmentPlan:
        plan.updated_at = utc_now()
        self.session.add(plan)
        await self.session.flush()
        return plan

    async def create_installment(self, installment: ScheduledInstallment) -> ScheduledInstallment:
        self.session.add(installment)
        await self.session.flush()
        await self.session.refresh(installment)
        return installment

    async def get_installment(
        self, installment_id: str, for_update: bool = False
    ) -> Optional[ScheduledInstallment]:
        stmt = select(ScheduledInstallment).where(ScheduledInstallment.id == installment_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_installment(self, installment: ScheduledInstallment) -> ScheduledInstallment:
        self.session.add(installment)
        await self.session.flush()
        return installment

    async def list_installments(self, plan_id: str) -> List[ScheduledInstallment]:
        stmt = (
            select(ScheduledInstallment)
            .where(ScheduledInstallment.installment_plan_id == plan_id)
            .order_by(ScheduledInstallment.installment_number.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_processable(self, as_of: date, limit: int = 100) -> List[ScheduledInstallment]:
        stmt = (
            select(ScheduledInstallment)
            .join(InstallmentPlan, InstallmentPlan.id == ScheduledInstallment.installment_plan_id)
            .where(
                InstallmentPlan.status.in_([PlanStatus.ACTIVE, PlanStatus.OVERDUE]),
                or_(
                    and_(
                        ScheduledInstallment.status == InstallmentStatus.SCHEDULED,
                        ScheduledInstallment.due_date <= as_of,
                    ),
                    and_(
                        ScheduledInstallment.status == InstallmentStatus.FAILED,
                        ScheduledInstallment.next_retry_date.is_not(None),
                        ScheduledInstallment.next_retry_date <= as_of,
                    ),
                ),
            )
            .order_by(ScheduledInstallment.due_date.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_plan_for_rental(self, rental_id: str) -> Optional[InstallmentPlan]:
        stmt = (
            select(InstallmentPlan)
            .where(
                InstallmentPlan.rental_id == rental_id,
                InstallmentPlan.status != PlanStatus.CANCELLED,
            )
            .order_by(InstallmentPlan.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_unpaid_due_before(self, as_of: date, limit: int = 500) -> List[ScheduledInstallment]:
        stmt = (
            select(ScheduledInstallment)
            .where(
                ScheduledInstallment.status.in_(
                    [
                        InstallmentStatus.SCHEDULED,
                        InstallmentStatus.FAILED,
                        InstallmentStatus.PROCESSING,
                    ]
                ),
                ScheduledInstallment.due_date < as_of,
            )
            .order_by(ScheduledInstallment.due_date.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_unsettled_charges(self, limit: int = 100) -> List[ScheduledInstallment]:
        stmt = (
            select(ScheduledInstallment)
            .where(
                or_(
                    ScheduledInstallment.status == InstallmentStatus.PROCESSING,
                    and_(
                        ScheduledInstallment.status == InstallmentStatus.OVERDUE,
                        ScheduledInstallment.stripe_payment_intent_id.is_not(None),
                        ScheduledInstallment.payment_id.is_(None),
                    ),
                )
            )
            .order_by(ScheduledInstallment.due_date.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
