"""Data Transfer Objects for E-Signature Use Cases

Provider payloads and the portal's request bodies use camelCase keys.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from src.domain.rental import DocumentStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BoldSignEventDTO(_CamelModel):
    event_type: str = Field(..., min_length=1)
    event_utc_timestamp: Optional[datetime] = None


class BoldSignDocumentDTO(_CamelModel):
    document_id: str = Field(..., min_length=1)
    message_title: Optional[str] = None
    status: Optional[str] = None


class BoldSignWebhookDTO(_CamelModel):
    """
    Webhook body posted by BoldSign

    Only the fields acted upon are validated; the rest of the payload is
    ignored.
    """

    event: BoldSignEventDTO
    document: BoldSignDocumentDTO


class WebhookResultDTO(_CamelModel):
    ok: bool = True
    rental_id: str
    document_status: DocumentStatus
    rental_activated: bool = False
    signed_document_id: Optional[str] = None


class CheckEnvelopeStatusCommandDTO(_CamelModel):
    """
    Command DTO for an envelope status check

    The envelope defaults to the rental's when only rentalId is given.
    """

    rental_id: Optional[str] = None
    envelope_id: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "rentalId": "5c1b2f7a-8d0e-4e8f-a1f4-77a3c1d9e001",
                "envelopeId": "a2b3c4d5-0000-1111-2222-333344445555",
            }
        },
    )


class EnvelopeStatusDTO(_CamelModel):
    ok: bool = True
    status: DocumentStatus
    docusign_status: str
    status_changed_date_time: Optional[datetime] = None
    completed_date_time: Optional[datetime] = None
    rental_updated: bool = False


class SignedDocumentCommandDTO(_CamelModel):
    rental_id: Optional[str] = None
    envelope_id: Optional[str] = None


class SignedDocumentDTO(_CamelModel):
    ok: bool = True
    source: str = Field(..., description="stored or docusign")
    status: Optional[str] = None
    document_url: Optional[str] = None
    document_base64: Optional[str] = None
    content_type: str = "application/pdf"
