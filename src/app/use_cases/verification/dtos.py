"""Data Transfer Objects for Identity Verification"""

from typing import Dict
from pydantic import BaseModel, Field


class FetchVerificationMediaResponseDTO(BaseModel):
    ok: bool = True
    verification_id: str
    message: str
    urls: Dict[str, str] = Field(
        default_factory=dict,
        description="Stored image URLs keyed by verification field"
    )
