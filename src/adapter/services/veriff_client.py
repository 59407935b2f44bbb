"""Veriff Media Client

Requests are signed with ``X-HMAC-SIGNATURE``: HMAC-SHA256 of the session id
(listing) or media id (download) keyed with the shared secret.
"""

import hashlib
import hmac
import logging
from typing import List, Optional

import httpx

from src.app.services.verification_client import (
    VerificationMediaClient,
    VerificationMedia,
    DownloadedMedia,
    VerificationProviderError,
)

logger = logging.getLogger(__name__)


def sign_payload(payload: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


class VeriffClient(VerificationMediaClient):
    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = "https://stationapi.veriff.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _headers(self, signed_value: str) -> dict:
        return {
            "X-AUTH-CLIENT": self.api_key,
            "X-HMAC-SIGNATURE": sign_payload(signed_value, self.api_secret),
        }

    async def list_media(self, session_id: str) -> List[VerificationMedia]:
        if not self.api_key or not self.api_secret:
            raise VerificationProviderError("Veriff API credentials not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}/v1/sessions/{session_id}/media",
                    headers={**self._headers(session_id), "Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            raise VerificationProviderError(f"Veriff media request failed: {e}") from e

        if response.status_code != 200:
            raise VerificationProviderError(f"Failed to fetch media: {response.status_code}")

        try:
            images = response.json().get("images") or []
        except ValueError as e:
            raise VerificationProviderError("Veriff media response was not JSON") from e

        media = []
        for image in images:
            url = image.get("url")
            context = image.get("context")
            if not url or not context:
                continue
            media_id = url.rstrip("/").split("/")[-1]
            media.append(VerificationMedia(id=media_id, context=context, url=url))
        return media

    async def download_media(self, media: VerificationMedia) -> DownloadedMedia:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(media.url, headers=self._headers(media.id))
        except httpx.HTTPError as e:
            raise VerificationProviderError(f"Veriff download of {media.id} failed: {e}") from e

        if response.status_code != 200:
            raise VerificationProviderError(
                f"Failed to download {media.context}: {response.status_code}"
            )

        logger.info(f"Downloaded {media.context} image {media.id}: {len(response.content)} bytes")
        return DownloadedMedia(
            content=response.content,
            content_type=response.headers.get("content-type", "image/jpeg"),
        )
