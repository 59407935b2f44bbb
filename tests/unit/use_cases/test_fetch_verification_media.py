"""Unit tests for FetchVerificationMedia use case

Tests cover:
- Front, back and face images stored and recorded
- Unrelated image contexts ignored
- A single failed download skipped
- Listing failure fails the request
- Nothing stored leaves the record untouched
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.services.verification_client import (
    DownloadedMedia,
    VerificationMedia,
    VerificationProviderError,
)
from src.app.use_cases.verification.fetch_verification_media import FetchVerificationMedia
from src.domain.identity_verification import IdentityVerification


def _media(context):
    return VerificationMedia(id=f"m_{context}", context=context, url=f"https://veriff.test/media/{context}")


@pytest.fixture
def sample_verification():
    return IdentityVerification(id="ver_1", tenant_id="tenant_1", customer_id="cust_1", session_id="sess_123")


@pytest.fixture
def mock_verification_repo(sample_verification):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=sample_verification)
    repo.update = AsyncMock()
    return repo


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.list_media = AsyncMock(return_value=[
        _media("document-front"), _media("document-back"), _media("face"), _media("face-pre"),
    ])
    client.download_media = AsyncMock(return_value=DownloadedMedia(content=b"\xff\xd8jpeg", content_type="image/jpeg"))
    return client


@pytest.fixture
def mock_storage():
    storage = MagicMock()
    storage.save = AsyncMock(side_effect=lambda path, content, content_type=None: f"/documents/{path}")
    return storage


@pytest.fixture
def fetch_use_case(mock_uow, mock_verification_repo, mock_client, mock_storage):
    """FetchVerificationMedia use case instance with mocked dependencies"""
    return FetchVerificationMedia(mock_uow, mock_verification_repo, mock_client, mock_storage)


@pytest.mark.asyncio
class TestFetchVerificationMedia:
    async def test_stores_identity_images(
        self, fetch_use_case, mock_storage, mock_uow, sample_verification
    ):
        """
        Given: Session with front, back, face and an unrelated image
        When: Media is fetched
        Then: Three images are stored and their URLs recorded
        """
        # Act
        result = await fetch_use_case.execute("ver_1")

        # Assert
        assert result.is_ok()
        assert result.value.message == "Fetched 3 images"
        assert sample_verification.document_front_url == "/documents/veriff/sess_123/document-front.jpg"
        assert sample_verification.document_back_url == "/documents/veriff/sess_123/document-back.jpg"
        assert sample_verification.face_image_url == "/documents/veriff/sess_123/face.jpg"
        assert sample_verification.media_fetched_at is not None
        assert mock_storage.save.call_count == 3
        mock_uow.commit.assert_called_once()

    async def test_png_extension(self, fetch_use_case, mock_client, mock_storage):
        # Arrange
        mock_client.list_media = AsyncMock(return_value=[_media("face")])
        mock_client.download_media = AsyncMock(return_value=DownloadedMedia(content=b"png", content_type="image/png"))

        # Act
        await fetch_use_case.execute("ver_1")

        # Assert
        mock_storage.save.assert_called_once_with("veriff/sess_123/face.png", b"png", content_type="image/png")

    async def test_failed_download_skipped(self, fetch_use_case, mock_client, sample_verification):
        # Arrange
        mock_client.download_media = AsyncMock(side_effect=[
            VerificationProviderError("404"),
            DownloadedMedia(content=b"back"),
            DownloadedMedia(content=b"face"),
        ])

        # Act
        result = await fetch_use_case.execute("ver_1")

        # Assert
        assert result.is_ok()
        assert set(result.value.urls) == {"document_back_url", "face_image_url"}
        assert sample_verification.document_front_url is None

    async def test_listing_failure(self, fetch_use_case, mock_client, mock_verification_repo):
        # Arrange
        mock_client.list_media = AsyncMock(side_effect=VerificationProviderError("401 Unauthorized"))

        # Act
        result = await fetch_use_case.execute("ver_1")

        # Assert
        assert result.error.code == "VERIFICATION_PROVIDER_ERROR"
        mock_verification_repo.update.assert_not_called()

    async def test_no_images_leaves_record_untouched(
        self, fetch_use_case, mock_client, mock_verification_repo, mock_uow
    ):
        # Arrange
        mock_client.list_media = AsyncMock(return_value=[])

        # Act
        result = await fetch_use_case.execute("ver_1")

        # Assert
        assert result.value.message == "Fetched 0 images"
        mock_verification_repo.update.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_verification_not_found(self, fetch_use_case, mock_verification_repo, mock_client):
        # Arrange
        mock_verification_repo.get_by_id = AsyncMock(return_value=None)

        # Act
        result = await fetch_use_case.execute("missing")

        # Assert
        assert result.error.code == "VERIFICATION_NOT_FOUND"
        mock_client.list_media.assert_not_called()
