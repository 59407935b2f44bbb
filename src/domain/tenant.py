"""Tenant Domain Entity

A rental company operating on the platform.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field
from src.domain.base import BaseModel, Timestamp, generate_uuid, utc_now


class Tenant(BaseModel, table=True):
    """
    Tenant - Rental company account

    Domain Rules:
    - Processor calls are routed through the tenant's connected account only
      once its onboarding is complete; otherwise the platform account is used
    """

    __tablename__ = "tenants"

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    name: str = Field(description="Company display name")

    currency_code: str = Field(default="USD", max_length=3)

    stripe_account_id: Optional[str] = Field(
        default=None,
        description="Connected processor account id"
    )

    stripe_onboarding_complete: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)

    @property
    def connected_account_id(self) -> Optional[str]:
        """Connected account to act on behalf of, if usable"""
        if self.stripe_account_id and self.stripe_onboarding_complete:
            return self.stripe_account_id
        return None
