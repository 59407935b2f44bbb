"""HandleSignatureWebhook Use Case

Applies BoldSign document events to the rental that owns the document.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.esign_provider import ESignProvider
from src.app.repositories.rental_repository import RentalRepository
from .agreement_lifecycle import AgreementLifecycle
from .dtos import BoldSignWebhookDTO, WebhookResultDTO
from .status_mapping import map_boldsign_event

logger = logging.getLogger(__name__)


class HandleSignatureWebhook:
    """
    Use Case: Process a signing provider webhook

    Business Rules:
    1. The rental is found by the provider document id
    2. The event type is mapped to a DocumentStatus (unknown values are
       recorded as UNKNOWN)
    3. Completion activates the rental and archives the signed PDF
    """

    def __init__(
        self,
        rental_repo: RentalRepository,
        lifecycle: AgreementLifecycle,
        provider: ESignProvider,
    ):
        self.rental_repo = rental_repo
        self.lifecycle = lifecycle
        self.provider = provider

    async def execute(self, payload: BoldSignWebhookDTO) -> Result[WebhookResultDTO]:
        document_id = payload.document.document_id
        event_type = payload.event.event_type

        try:
            rental = await self.rental_repo.get_by_envelope_id(document_id, for_update=True)
            if not rental:
                logger.warning(f"No rental for signing document {document_id} ({event_type})")
                return Return.err(
                    Error(
                        code="RENTAL_NOT_FOUND",
                        message=f"No rental linked to document {document_id}",
                    )
                )

            rental_id = rental.id
            new_status = map_boldsign_event(event_type)
            logger.info(f"Signing event {event_type} for rental {rental_id} -> {new_status.value}")

            signed_document_id = rental.signed_document_id
            activated, document = await self.lifecycle.transition(
                rental, new_status, self.provider, document_id
            )

            return Return.ok(
                WebhookResultDTO(
                    rental_id=rental_id,
                    document_status=new_status,
                    rental_activated=activated,
                    signed_document_id=document.id if document else signed_document_id,
                )
            )

        except Exception as e:
            await self.lifecycle.uow.rollback()
            return Return.err(
                Error(
                    code="WEBHOOK_PROCESSING_FAILED",
                    message="Failed to process signing webhook",
                    reason=str(e),
                )
            )
