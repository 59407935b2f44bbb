"""Customer Repository Interfaces

Customers, portal logins and customer documents.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.customer import (
    Customer,
    CustomerUser,
    CustomerNotification,
    CustomerDocument,
)


class CustomerRepository(ABC):
    @abstractmethod
    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    async def create(self, customer: Customer) -> Customer:
        pass


class CustomerUserRepository(ABC):
    """Repository interface for portal logins"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[CustomerUser]:
        """
        Retrieve a login by email (case-insensitive)

        Args:
            email: Email address

        Returns:
            CustomerUser if registered, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, user: CustomerUser) -> CustomerUser:
        pass

    @abstractmethod
    async def add_notification(self, notification: CustomerNotification) -> CustomerNotification:
        """Store an in-portal notification for a login"""
        pass


class CustomerDocumentRepository(ABC):
    @abstractmethod
    async def create(self, document: CustomerDocument) -> CustomerDocument:
        pass

    @abstractmethod
    async def get_by_id(self, document_id: str) -> Optional[CustomerDocument]:
        pass
