"""CheckEnvelopeStatus Use Case

Pulls the current envelope status from DocuSign and records it on the rental.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.esign_provider import ESignProvider, ESignError, ESignAuthError
from src.app.repositories.rental_repository import RentalRepository
from src.domain.rental import Rental
from .agreement_lifecycle import AgreementLifecycle
from .dtos import CheckEnvelopeStatusCommandDTO, EnvelopeStatusDTO
from .status_mapping import map_docusign_status

logger = logging.getLogger(__name__)


class CheckEnvelopeStatus:
    """
    Use Case: Refresh a rental's document status from the provider

    Business Rules:
    1. The provider is queried before anything is written; an auth or
       provider failure leaves the database untouched
    2. Without a rentalId the status is only reported
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

    async def execute(self, command: CheckEnvelopeStatusCommandDTO) -> Result[EnvelopeStatusDTO]:
        rental: Optional[Rental] = None
        envelope_id = command.envelope_id

        if command.rental_id:
            rental = await self.rental_repo.get_by_id(command.rental_id)
            if not rental:
                return Return.err(
                    Error(code="RENTAL_NOT_FOUND", message=f"Rental {command.rental_id} not found")
                )
            envelope_id = envelope_id or rental.docusign_envelope_id

        if not envelope_id:
            return Return.err(
                Error(code="MISSING_ENVELOPE_ID", message="No envelope ID provided")
            )

        # Provider first: nothing is written unless this succeeds
        try:
            info = await self.provider.get_envelope_status(envelope_id)
        except ESignAuthError as e:
            logger.error(f"DocuSign authentication failed: {e.message}")
            return Return.err(
                Error(code="ESIGN_AUTH_FAILED", message="DocuSign auth failed", reason=e.message)
            )
        except ESignError as e:
            logger.error(f"DocuSign status lookup for {envelope_id} failed: {e.message}")
            return Return.err(
                Error(
                    code="ESIGN_PROVIDER_ERROR",
                    message="Failed to get envelope status",
                    reason=e.message,
                )
            )

        new_status = map_docusign_status(info.status)
        result = EnvelopeStatusDTO(
            status=new_status,
            docusign_status=info.status,
            status_changed_date_time=info.status_changed_at,
            completed_date_time=info.completed_at,
        )

        if not rental:
            return Return.ok(result)

        try:
            rental = await self.rental_repo.get_by_id(rental.id, for_update=True)
            await self.lifecycle.transition(rental, new_status, self.provider, envelope_id)
            result.rental_updated = True
            logger.info(f"Rental {command.rental_id} document status -> {new_status.value}")
            return Return.ok(result)

        except Exception as e:
            await self.lifecycle.uow.rollback()
            return Return.err(
                Error(
                    code="ENVELOPE_STATUS_UPDATE_FAILED",
                    message="Failed to record envelope status",
                    reason=str(e),
                )
            )
