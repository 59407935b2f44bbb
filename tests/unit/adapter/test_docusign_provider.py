"""Unit tests for the DocuSign provider

Tests cover:
- JWT assertion claims and RS256 signature
- Auth server selection for demo vs production
- Token exchange, account lookup and envelope status over a mock transport
- Auth and API failures raised as ESignAuthError / ESignError
"""

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from src.adapter.services.docusign_provider import (
    DocuSignProvider,
    auth_server_for,
    build_jwt_assertion,
)
from src.app.services.esign_provider import ESignAuthError, ESignError


@pytest.fixture(scope="module")
def rsa_keys():
    """(private PEM, public key) pair for signing assertions"""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    return private_pem, key.public_key()


def _handler(envelope_status=200, token_status=200, accounts=None):
    if accounts is None:
        accounts = [
            {"account_id": "acc_other", "base_uri": "https://other.docusign.net", "is_default": False},
            {"account_id": "acc_1", "base_uri": "https://demo.docusign.net", "is_default": True},
        ]

    def handle(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/oauth/token":
            return httpx.Response(token_status, json={"access_token": "tok_123"})
        if path == "/oauth/userinfo":
            assert request.headers["Authorization"] == "Bearer tok_123"
            return httpx.Response(200, json={"accounts": accounts})
        if path == "/restapi/v2.1/accounts/acc_1/envelopes/env_123":
            return httpx.Response(
                envelope_status,
                json={
                    "status": "completed",
                    "statusChangedDateTime": "2024-03-01T10:15:00.000Z",
                    "completedDateTime": "2024-03-01T10:15:00Z",
                },
            )
        if path == "/restapi/v2.1/accounts/acc_1/envelopes/env_123/documents/combined":
            return httpx.Response(200, content=b"%PDF-combined")
        return httpx.Response(404)

    return handle


def _provider(rsa_keys, handler):
    return DocuSignProvider(
        integration_key="ik_123",
        user_id="user_123",
        private_key=rsa_keys[0],
        base_url="https://demo.docusign.net/restapi",
        transport=httpx.MockTransport(handler),
    )


class TestJwtAssertion:
    def test_claims_and_signature(self, rsa_keys):
        private_pem, public_key = rsa_keys

        token = build_jwt_assertion("ik_123", "user_123", private_pem, "account-d.docusign.com", now=1700000000)

        claims = jwt.decode(token, public_key, algorithms=["RS256"], audience="account-d.docusign.com",
                            options={"verify_exp": False})
        assert claims["iss"] == "ik_123"
        assert claims["sub"] == "user_123"
        assert claims["iat"] == 1700000000
        assert claims["exp"] == 1700003600
        assert claims["scope"] == "signature impersonation"
        assert jwt.get_unverified_header(token)["alg"] == "RS256"

    def test_escaped_newlines_in_key(self, rsa_keys):
        private_pem, public_key = rsa_keys
        escaped = private_pem.replace("\n", "\\n")

        token = build_jwt_assertion("ik_123", "user_123", escaped, "account.docusign.com")

        assert jwt.decode(token, public_key, algorithms=["RS256"], audience="account.docusign.com")["sub"] == "user_123"

    def test_auth_server_for(self):
        assert auth_server_for("https://demo.docusign.net/restapi") == "account-d.docusign.com"
        assert auth_server_for("https://na3.docusign.net/restapi") == "account.docusign.com"


@pytest.mark.asyncio
class TestDocuSignProvider:
    async def test_envelope_status_uses_default_account(self, rsa_keys):
        # Arrange
        provider = _provider(rsa_keys, _handler())

        # Act
        info = await provider.get_envelope_status("env_123")

        # Assert
        assert info.status == "completed"
        assert info.completed_at is not None
        assert info.completed_at.year == 2024

    async def test_download_signed_document(self, rsa_keys):
        # Arrange
        provider = _provider(rsa_keys, _handler())

        # Act
        content = await provider.download_signed_document("env_123")

        # Assert
        assert content == b"%PDF-combined"

    async def test_token_rejected(self, rsa_keys):
        # Arrange
        provider = _provider(rsa_keys, _handler(token_status=400))

        # Act / Assert
        with pytest.raises(ESignAuthError) as exc_info:
            await provider.get_envelope_status("env_123")
        assert exc_info.value.status_code == 400

    async def test_no_accounts(self, rsa_keys):
        # Arrange
        provider = _provider(rsa_keys, _handler(accounts=[]))

        # Act / Assert
        with pytest.raises(ESignAuthError, match="Failed to get DocuSign account"):
            await provider.get_envelope_status("env_123")

    async def test_envelope_api_error(self, rsa_keys):
        # Arrange
        provider = _provider(rsa_keys, _handler(envelope_status=404))

        # Act / Assert
        with pytest.raises(ESignError) as exc_info:
            await provider.get_envelope_status("env_123")
        assert not isinstance(exc_info.value, ESignAuthError)
        assert exc_info.value.status_code == 404

    async def test_unconfigured(self):
        # Arrange
        provider = DocuSignProvider(integration_key="", user_id="", private_key="")

        # Act / Assert
        with pytest.raises(ESignAuthError, match="not configured"):
            await provider.get_envelope_status("env_123")

    async def test_invalid_private_key(self):
        # Arrange
        provider = DocuSignProvider(
            integration_key="ik", user_id="u", private_key="not a key",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )

        # Act / Assert
        with pytest.raises(ESignAuthError, match="Could not sign"):
            await provider.get_envelope_status("env_123")
