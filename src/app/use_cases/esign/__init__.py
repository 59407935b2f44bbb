"""E-signature use cases"""
from .agreement_lifecycle import AgreementLifecycle
from .handle_signature_webhook import HandleSignatureWebhook
from .check_envelope_status import CheckEnvelopeStatus
from .get_signed_document import GetSignedDocument
from .status_mapping import map_boldsign_event, map_docusign_status
from .dtos import (
    BoldSignWebhookDTO,
    WebhookResultDTO,
    CheckEnvelopeStatusCommandDTO,
    EnvelopeStatusDTO,
    SignedDocumentCommandDTO,
    SignedDocumentDTO,
)

__all__ = [
    "AgreementLifecycle",
    "HandleSignatureWebhook",
    "CheckEnvelopeStatus",
    "GetSignedDocument",
    "map_boldsign_event",
    "map_docusign_status",
    "BoldSignWebhookDTO",
    "WebhookResultDTO",
    "CheckEnvelopeStatusCommandDTO",
    "EnvelopeStatusDTO",
    "SignedDocumentCommandDTO",
    "SignedDocumentDTO",
]
