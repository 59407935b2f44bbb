"""API Error Handling

ClientError carries a use case Error out of a route; the app factory renders
it as ``{"error": {"code", "message"}}``.
"""

from typing import Optional

from fastapi import status

from libs.result import Error

PROVIDER_ERRORS = {"ESIGN_PROVIDER_ERROR", "VERIFICATION_PROVIDER_ERROR"}

CONFLICT_ERRORS = {
    "ALLOCATION_CONFLICT",
    "RENTAL_ALREADY_CANCELLED",
    "PLAN_ALREADY_EXISTS",
    "INSTALLMENT_NOT_RETRYABLE",
    "INSTALLMENT_NOT_PROCESSABLE",
}

BAD_REQUEST_ERRORS = {
    "VALIDATION_ERROR",
    "EMAIL_ALREADY_REGISTERED",
    "WEAK_PASSWORD",
    "NOT_ELIGIBLE",
    "PAYMENT_NOT_CAPTURED",
    "PAYMENT_NOT_APPLICABLE",
}

BAD_REQUEST_PREFIXES = ("INVALID_", "MISSING_", "REFUND_AMOUNT_")


def error_status(code: str) -> int:
    """HTTP status for a use case error code"""
    if code.endswith("_NOT_FOUND"):
        return status.HTTP_404_NOT_FOUND
    if code in BAD_REQUEST_ERRORS or code.startswith(BAD_REQUEST_PREFIXES):
        return status.HTTP_400_BAD_REQUEST
    if code in ("ESIGN_AUTH_FAILED", "UNAUTHORIZED"):
        return status.HTTP_401_UNAUTHORIZED
    if code == "FORBIDDEN":
        return status.HTTP_403_FORBIDDEN
    if code in CONFLICT_ERRORS:
        return status.HTTP_409_CONFLICT
    if code in PROVIDER_ERRORS:
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


class ClientError(Exception):
    def __init__(self, error: Error, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or error_status(error.code)

    def to_dict(self) -> dict:
        return {"error": {"code": self.error.code, "message": self.error.message}}
