from .unit_of_work import SqlAlchemyUnitOfWork
from .notification_service import (
    LoggingNotificationService,
    WebhookNotificationService,
    CompositeNotificationService,
    create_notification_service,
)
from .pdf_service import ReportLabPdfService
from .stripe_payment_gateway import StripePaymentGateway
from .docusign_provider import DocuSignProvider
from .boldsign_provider import BoldSignProvider
from .veriff_client import VeriffClient
from .local_document_storage import LocalDocumentStorage
from .s3_document_storage import S3DocumentStorage
from .ttl_cache import InMemoryTTLCache
from .bcrypt_hasher import BcryptPasswordHasher

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingNotificationService",
    "WebhookNotificationService",
    "CompositeNotificationService",
    "create_notification_service",
    "ReportLabPdfService",
    "StripePaymentGateway",
    "DocuSignProvider",
    "BoldSignProvider",
    "VeriffClient",
    "LocalDocumentStorage",
    "S3DocumentStorage",
    "InMemoryTTLCache",
    "BcryptPasswordHasher",
]
