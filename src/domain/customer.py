"""Customer Domain Entities

Customers, their portal logins, notifications and stored documents.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Index
from src.domain.base import BaseModel, Timestamp, generate_uuid, utc_now


class Customer(BaseModel, table=True):
    """Customer renting vehicles from a tenant"""

    __tablename__ = "customers"
    __table_args__ = (
        Index("ix_customers_tenant_id", "tenant_id"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: Optional[str] = Field(default=None)
    name: str
    email: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    type: str = Field(default="Individual")
    status: str = Field(default="Active")
    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)


class CustomerUser(BaseModel, table=True):
    """
    CustomerUser - Portal login linked to a customer record

    Domain Rules:
    - email is unique across the platform (case-insensitive, stored lower-cased)
    - password_hash is a bcrypt hash, never the raw password
    """

    __tablename__ = "customer_users"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    email: str = Field(unique=True, index=True)
    password_hash: str
    customer_id: str = Field(foreign_key="customers.id", index=True)
    tenant_id: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)


class CustomerNotification(BaseModel, table=True):
    __tablename__ = "customer_notifications"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    customer_user_id: str = Field(foreign_key="customer_users.id", index=True)
    tenant_id: Optional[str] = Field(default=None)
    title: str
    message: str
    type: str = Field(default="info")
    is_read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)


class CustomerDocument(BaseModel, table=True):
    """Document stored against a customer (e.g. signed rental agreement)"""

    __tablename__ = "customer_documents"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    customer_id: str = Field(foreign_key="customers.id", index=True)
    tenant_id: Optional[str] = Field(default=None)
    rental_id: Optional[str] = Field(default=None)
    document_type: str = Field(default="Other")
    document_name: str
    file_url: str
    file_name: str
    mime_type: str = Field(default="application/pdf")
    verified: bool = Field(default=False)
    status: str = Field(default="Active")
    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)
