"""BoldSign E-Signature Provider

API-key authenticated REST calls against BoldSign's document endpoints.
"""

import logging
from typing import Optional

import httpx

from src.app.services.esign_provider import (
    ESignProvider,
    ESignError,
    ESignAuthError,
    EnvelopeStatusInfo,
)

logger = logging.getLogger(__name__)


class BoldSignProvider(ESignProvider):
    """BoldSign implementation of ESignProvider; envelope ids are BoldSign document ids"""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.boldsign.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _get(self, path: str, document_id: str) -> httpx.Response:
        if not self.api_key:
            raise ESignAuthError("BoldSign API key missing")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}{path}",
                    params={"documentId": document_id},
                    headers={"X-API-KEY": self.api_key},
                )
        except httpx.HTTPError as e:
            raise ESignError(f"BoldSign request failed: {e}") from e

        if response.status_code in (401, 403):
            raise ESignAuthError(
                f"BoldSign rejected the API key: {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code != 200:
            logger.error(f"BoldSign {path} failed for {document_id}: {response.status_code} {response.text}")
            raise ESignError(
                f"BoldSign request failed: {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def get_envelope_status(self, envelope_id: str) -> EnvelopeStatusInfo:
        response = await self._get("/v1/document/properties", envelope_id)
        try:
            status = response.json().get("status")
        except ValueError as e:
            raise ESignError("BoldSign properties response was not JSON") from e
        if not isinstance(status, str) or not status:
            raise ESignError("BoldSign properties response had no status")
        return EnvelopeStatusInfo(envelope_id=envelope_id, status=status)

    async def download_signed_document(self, envelope_id: str) -> bytes:
        response = await self._get("/v1/document/download", envelope_id)
        logger.info(f"Downloaded signed BoldSign document {envelope_id} ({len(response.content)} bytes)")
        return response.content
