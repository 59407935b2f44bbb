"""Identity Verification Domain Entity"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field
from src.domain.base import BaseModel, Timestamp, generate_uuid, utc_now


class IdentityVerification(BaseModel, table=True):
    """
    IdentityVerification - Provider session for a customer's ID check

    Media URLs are filled in once the session's images are copied into
    document storage.
    """

    __tablename__ = "identity_verifications"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: Optional[str] = Field(default=None)
    customer_id: Optional[str] = Field(default=None, foreign_key="customers.id")
    session_id: str = Field(index=True)
    status: str = Field(default="pending")
    document_front_url: Optional[str] = Field(default=None)
    document_back_url: Optional[str] = Field(default=None)
    face_image_url: Optional[str] = Field(default=None)
    media_fetched_at: Optional[datetime] = Field(default=None, sa_type=Timestamp)
    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)
