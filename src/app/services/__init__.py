from .unit_of_work import UnitOfWork
from .notification_service import NotificationService, CancellationNotice
from .payment_gateway import (
    PaymentGateway,
    PaymentGatewayError,
    PaymentIntentInfo,
    RefundInfo,
    IntentStatus,
)
from .esign_provider import ESignProvider, ESignError, ESignAuthError, EnvelopeStatusInfo
from .document_storage import DocumentStorage, DocumentStorageError
from .verification_client import (
    VerificationMediaClient,
    VerificationMedia,
    DownloadedMedia,
    VerificationProviderError,
)
from .cache import Cache
from .password_hasher import PasswordHasher
from .pdf_service import PdfService

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "CancellationNotice",
    "PaymentGateway",
    "PaymentGatewayError",
    "PaymentIntentInfo",
    "RefundInfo",
    "IntentStatus",
    "ESignProvider",
    "ESignError",
    "ESignAuthError",
    "EnvelopeStatusInfo",
    "DocumentStorage",
    "DocumentStorageError",
    "VerificationMediaClient",
    "VerificationMedia",
    "DownloadedMedia",
    "VerificationProviderError",
    "Cache",
    "PasswordHasher",
    "PdfService",
]
