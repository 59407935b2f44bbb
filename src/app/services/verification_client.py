"""Identity Verification Client Interface"""

from abc import ABC, abstractmethod
from typing import List
from pydantic import BaseModel


class VerificationProviderError(Exception):
    pass


class VerificationMedia(BaseModel):
    """One image attached to a verification session"""
    id: str
    context: str
    url: str


class DownloadedMedia(BaseModel):
    content: bytes
    content_type: str = "image/jpeg"


class VerificationMediaClient(ABC):
    @abstractmethod
    async def list_media(self, session_id: str) -> List[VerificationMedia]:
        """
        List images captured during a verification session

        Raises:
            VerificationProviderError: listing failed
        """
        pass

    @abstractmethod
    async def download_media(self, media: VerificationMedia) -> DownloadedMedia:
        """
        Download one image

        Raises:
            VerificationProviderError: download failed
        """
        pass
