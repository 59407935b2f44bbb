"""SQLAlchemy implementations of the customer repositories"""

from typing import Optional
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.customer_repository import (
    CustomerRepository,
    CustomerUserRepository,
    CustomerDocumentRepository,
)
from src.domain.customer import (
    Customer,
    CustomerUser,
    CustomerNotification,
    CustomerDocument,
)


class SqlAlchemyCustomerRepository(CustomerRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        result = await self.session.execute(select(Customer).where(Customer.id == customer_id))
        return result.scalar_one_or_none()

    async def create(self, customer: Customer) -> Customer:
        self.session.add(customer)
        await self.session.flush()
        await self.session.refresh(customer)
        return customer


class SqlAlchemyCustomerUserRepository(CustomerUserRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[CustomerUser]:
        stmt = select(CustomerUser).where(func.lower(CustomerUser.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create(self, user: CustomerUser) -> CustomerUser:
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def add_notification(self, notification: CustomerNotification) -> CustomerNotification:
        self.session.add(notification)
        await self.session.flush()
        return notification


class SqlAlchemyCustomerDocumentRepository(CustomerDocumentRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: CustomerDocument) -> CustomerDocument:
        self.session.add(document)
        await self.session.flush()
        await self.session.refresh(document)
        return document

    async def get_by_id(self, document_id: str) -> Optional[CustomerDocument]:
        result = await self.session.execute(
            select(CustomerDocument).where(CustomerDocument.id == document_id)
        )
        return result.scalar_one_or_none()
