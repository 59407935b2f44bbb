"""Bearer token authentication

Tokens are HS256 JWTs carrying ``sub``, ``role`` and ``tenant_id``.

Usage:
    @router.post("/cancel-rental-refund")
    async def cancel(principal: Principal = Depends(require_operator)):
        ...
"""

import logging
from typing import Callable, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError

logger = logging.getLogger(__name__)

OPERATOR_ROLES = ("admin", "manager", "staff")

bearer_scheme = HTTPBearer(auto_error=False)


class Principal(BaseModel):
    sub: str
    role: str
    tenant_id: Optional[str] = None


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Principal:
    """
    Raises:
        ClientError: 401 when the token is malformed, expired or unsigned
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        raise ClientError(Error(code="UNAUTHORIZED", message="Token expired"))
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise ClientError(Error(code="UNAUTHORIZED", message="Invalid token"))

    if not payload.get("sub") or not payload.get("role"):
        raise ClientError(Error(code="UNAUTHORIZED", message="Token is missing sub or role"))

    return Principal(sub=payload["sub"], role=payload["role"], tenant_id=payload.get("tenant_id"))


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    if ApplicationConfig.AUTH_DISABLED:
        return Principal(sub="local-dev", role="admin")

    if not credentials or not credentials.credentials:
        raise ClientError(Error(code="UNAUTHORIZED", message="Authentication required"))

    return decode_token(
        credentials.credentials,
        ApplicationConfig.JWT_SECRET,
        ApplicationConfig.JWT_ALGORITHM,
    )


def require_roles(*roles: str) -> Callable:
    """Dependency that admits only principals holding one of ``roles``"""

    async def verify(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise ClientError(
                Error(code="FORBIDDEN", message=f"Requires role: {', '.join(roles)}")
            )
        return principal

    return verify


require_operator = require_roles(*OPERATOR_ROLES)
