"""FetchVerificationMedia Use Case

Copies a verification session's ID images from the provider into document
storage.
"""

import logging
from typing import Dict
from src.domain.base import utc_now
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.document_storage import DocumentStorage
from src.app.services.verification_client import (
    VerificationMediaClient,
    VerificationMedia,
    VerificationProviderError,
)
from src.app.repositories.identity_verification_repository import IdentityVerificationRepository
from .dtos import FetchVerificationMediaResponseDTO

logger = logging.getLogger(__name__)

# image context -> verification field
MEDIA_FIELDS = {
    "document-front": "document_front_url",
    "document-back": "document_back_url",
    "face": "face_image_url",
}


class FetchVerificationMedia:
    """
    Use Case: Store identity verification images

    Business Rules:
    1. Only document-front, document-back and face images are kept
    2. A failure to list the session's media fails the request
    3. A single image that cannot be downloaded or stored is skipped
    4. The record is only updated when at least one image was stored
    """

    def __init__(
        self,
        uow: UnitOfWork,
        verification_repo: IdentityVerificationRepository,
        client: VerificationMediaClient,
        storage: DocumentStorage,
    ):
        self.uow = uow
        self.verification_repo = verification_repo
        self.client = client
        self.storage = storage

    async def execute(self, verification_id: str) -> Result[FetchVerificationMediaResponseDTO]:
        verification = await self.verification_repo.get_by_id(verification_id)
        if not verification:
            return Return.err(
                Error(
                    code="VERIFICATION_NOT_FOUND",
                    message=f"Verification {verification_id} not found",
                )
            )

        session_id = verification.session_id

        try:
            media = await self.client.list_media(session_id)
        except VerificationProviderError as e:
            logger.error(f"Failed to list media for verification session {session_id}: {e}")
            return Return.err(
                Error(
                    code="VERIFICATION_PROVIDER_ERROR",
                    message="Failed to fetch media",
                    reason=str(e),
                )
            )

        logger.info(f"Found {len(media)} images for verification session {session_id}")

        urls: Dict[str, str] = {}
        for item in media:
            field = MEDIA_FIELDS.get(item.context)
            if not field or field in urls:
                continue
            url = await self._store(session_id, item)
            if url:
                urls[field] = url

        if urls:
            try:
                for field, url in urls.items():
                    setattr(verification, field, url)
                verification.media_fetched_at = utc_now()
                await self.verification_repo.update(verification)
                await self.uow.commit()
            except Exception as e:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="VERIFICATION_UPDATE_FAILED",
                        message="Failed to record verification media",
                        reason=str(e),
                    )
                )

        return Return.ok(
            FetchVerificationMediaResponseDTO(
                verification_id=verification_id,
                message=f"Fetched {len(urls)} images",
                urls=urls,
            )
        )

    async def _store(self, session_id: str, item: VerificationMedia):
        try:
            downloaded = await self.client.download_media(item)
            extension = "png" if "png" in downloaded.content_type else "jpg"
            return await self.storage.save(
                f"veriff/{session_id}/{item.context}.{extension}",
                downloaded.content,
                content_type=downloaded.content_type,
            )
        except Exception as e:
            logger.error(f"Skipping {item.context} image of session {session_id}: {e}")
            return None
