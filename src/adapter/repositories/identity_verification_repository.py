from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.identity_verification_repository import IdentityVerificationRepository
from src.domain.identity_verification import IdentityVerification


class SqlAlchemyIdentityVerificationRepository(IdentityVerificationRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, verification_id: str) -> Optional[IdentityVerification]:
        stmt = select(IdentityVerification).where(IdentityVerification.id == verification_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, verification: IdentityVerification) -> IdentityVerification:
        self.session.add(verification)
        await self.session.flush()
        return verification
