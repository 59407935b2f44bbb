"""SQLAlchemy implementation of InvoiceRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Features:
    - Async database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        stmt = select(Invoice).where(Invoice.id == invoice_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
