"""Identity verification use cases"""
from .fetch_verification_media import FetchVerificationMedia, MEDIA_FIELDS
from .dtos import FetchVerificationMediaResponseDTO

__all__ = [
    "FetchVerificationMedia",
    "MEDIA_FIELDS",
    "FetchVerificationMediaResponseDTO",
]
