"""E-Signature Provider Interface

Defines the contract with the signing provider used to check envelope
status and fetch the signed agreement.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ESignError(Exception):
    """Provider call failed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ESignAuthError(ESignError):
    """Token or account lookup failed"""


class EnvelopeStatusInfo(BaseModel):
    envelope_id: str
    status: str
    status_changed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ESignProvider(ABC):
    """Abstract signing provider"""

    @abstractmethod
    async def get_envelope_status(self, envelope_id: str) -> EnvelopeStatusInfo:
        """
        Fetch the provider's current status for an envelope

        Args:
            envelope_id: Provider envelope/document id

        Returns:
            EnvelopeStatusInfo with the raw provider status string

        Raises:
            ESignAuthError: authentication with the provider failed
            ESignError: any other provider failure
        """
        pass

    @abstractmethod
    async def download_signed_document(self, envelope_id: str) -> bytes:
        """
        Download the finalized signed PDF

        Raises:
            ESignError: download failed
        """
        pass
