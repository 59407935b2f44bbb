"""DocuSign E-Signature Provider

JWT grant flow: an RS256 assertion signed with the integration's private key
is exchanged for an access token, the user's default account is looked up,
then the eSignature REST API is called on that account's base URI.
"""

import logging
import time
from datetime import datetime
from typing import Optional, Tuple

import httpx
import jwt

from src.app.services.esign_provider import (
    ESignProvider,
    ESignError,
    ESignAuthError,
    EnvelopeStatusInfo,
)

logger = logging.getLogger(__name__)

TOKEN_LIFETIME_SECONDS = 3600
JWT_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"


def auth_server_for(base_url: str) -> str:
    return "account-d.docusign.com" if "demo" in base_url else "account.docusign.com"


def build_jwt_assertion(
    integration_key: str,
    user_id: str,
    private_key: str,
    auth_server: str,
    now: Optional[int] = None,
) -> str:
    """Signed RS256 assertion for the DocuSign JWT grant"""
    issued_at = int(time.time()) if now is None else now
    claims = {
        "iss": integration_key,
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + TOKEN_LIFETIME_SECONDS,
        "aud": auth_server,
        "scope": "signature impersonation",
    }
    # Keys stored in env files often carry literal "\n" sequences
    key = private_key.replace("\\n", "\n")
    return jwt.encode(claims, key, algorithm="RS256", headers={"typ": "JWT"})


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable DocuSign timestamp: {value!r}")
        return None


class DocuSignProvider(ESignProvider):
    """DocuSign implementation of ESignProvider"""

    def __init__(
        self,
        integration_key: str,
        user_id: str,
        private_key: str,
        base_url: str = "https://demo.docusign.net/restapi",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.integration_key = integration_key
        self.user_id = user_id
        self.private_key = private_key
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    @property
    def auth_server(self) -> str:
        return auth_server_for(self.base_url)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _authenticate(self, client: httpx.AsyncClient) -> Tuple[str, str, str]:
        """
        Returns:
            (access token, account id, account REST base URL)

        Raises:
            ESignAuthError: token exchange or account lookup failed
        """
        if not (self.integration_key and self.user_id and self.private_key):
            raise ESignAuthError("DocuSign not configured")

        try:
            assertion = build_jwt_assertion(
                self.integration_key, self.user_id, self.private_key, self.auth_server
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise ESignAuthError(f"Could not sign DocuSign assertion: {e}") from e

        try:
            token_response = await client.post(
                f"https://{self.auth_server}/oauth/token",
                data={"grant_type": JWT_GRANT_TYPE, "assertion": assertion},
            )
            if token_response.status_code != 200:
                raise ESignAuthError(
                    f"DocuSign token request failed: {token_response.status_code}",
                    status_code=token_response.status_code,
                )
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise ESignAuthError("DocuSign token response had no access_token")

            info_response = await client.get(
                f"https://{self.auth_server}/oauth/userinfo",
                headers={"Authorization": f"Bearer {access_token}"},
            )
            if info_response.status_code != 200:
                raise ESignAuthError(
                    f"DocuSign account lookup failed: {info_response.status_code}",
                    status_code=info_response.status_code,
                )
            accounts = info_response.json().get("accounts") or []
        except httpx.HTTPError as e:
            raise ESignAuthError(f"DocuSign auth request failed: {e}") from e
        except ValueError as e:
            raise ESignAuthError(f"DocuSign auth response was not JSON: {e}") from e

        account = next((a for a in accounts if a.get("is_default")), accounts[0] if accounts else None)
        if not account or not account.get("account_id") or not account.get("base_uri"):
            raise ESignAuthError("Failed to get DocuSign account")

        return access_token, account["account_id"], f"{account['base_uri']}/restapi"

    async def get_envelope_status(self, envelope_id: str) -> EnvelopeStatusInfo:
        async with self._client() as client:
            token, account_id, api_base = await self._authenticate(client)
            try:
                response = await client.get(
                    f"{api_base}/v2.1/accounts/{account_id}/envelopes/{envelope_id}",
                    headers={"Authorization": f"Bearer {token}"},
                )
            except httpx.HTTPError as e:
                raise ESignError(f"DocuSign envelope request failed: {e}") from e

            if response.status_code != 200:
                logger.error(f"DocuSign API error for envelope {envelope_id}: {response.text}")
                raise ESignError(
                    f"Failed to get envelope status: {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                data = response.json()
            except ValueError as e:
                raise ESignError("DocuSign envelope response was not JSON") from e

            status = data.get("status")
            if not isinstance(status, str) or not status:
                raise ESignError("DocuSign envelope response had no status")

            return EnvelopeStatusInfo(
                envelope_id=envelope_id,
                status=status,
                status_changed_at=_parse_datetime(data.get("statusChangedDateTime")),
                completed_at=_parse_datetime(data.get("completedDateTime")),
            )

    async def download_signed_document(self, envelope_id: str) -> bytes:
        async with self._client() as client:
            token, account_id, api_base = await self._authenticate(client)
            try:
                response = await client.get(
                    f"{api_base}/v2.1/accounts/{account_id}/envelopes/{envelope_id}/documents/combined",
                    headers={"Authorization": f"Bearer {token}"},
                )
            except httpx.HTTPError as e:
                raise ESignError(f"DocuSign document request failed: {e}") from e

            if response.status_code != 200:
                raise ESignError(
                    f"Failed to get document from DocuSign: {response.status_code}",
                    status_code=response.status_code,
                )
            return response.content
