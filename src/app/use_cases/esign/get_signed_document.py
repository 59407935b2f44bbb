"""GetSignedDocument Use Case

Serves the signed rental agreement, from the document store when archived,
otherwise straight from DocuSign.
"""

import base64
import logging
from libs.result import Result, Return, Error
from src.app.services.esign_provider import ESignProvider, ESignError, ESignAuthError
from src.app.repositories.customer_repository import CustomerDocumentRepository
from src.app.repositories.rental_repository import RentalRepository
from src.domain.rental import DocumentStatus
from .agreement_lifecycle import AgreementLifecycle
from .dtos import SignedDocumentCommandDTO, SignedDocumentDTO
from .status_mapping import map_docusign_status

logger = logging.getLogger(__name__)


class GetSignedDocument:
    """
    Use Case: Fetch a rental's signed agreement

    Business Rules:
    1. An archived document is returned by URL without calling the provider
    2. Otherwise the combined PDF is downloaded and returned base64-encoded
    3. A completed envelope downloaded for a known rental is archived too
    """

    def __init__(
        self,
        rental_repo: RentalRepository,
        document_repo: CustomerDocumentRepository,
        lifecycle: AgreementLifecycle,
        provider: ESignProvider,
    ):
        self.rental_repo = rental_repo
        self.document_repo = document_repo
        self.lifecycle = lifecycle
        self.provider = provider

    async def execute(self, command: SignedDocumentCommandDTO) -> Result[SignedDocumentDTO]:
        if not command.rental_id and not command.envelope_id:
            return Return.err(
                Error(code="MISSING_ENVELOPE_ID", message="rentalId or envelopeId required")
            )

        rental = None
        envelope_id = command.envelope_id

        if command.rental_id:
            rental = await self.rental_repo.get_by_id(command.rental_id)
            if not rental:
                return Return.err(
                    Error(code="RENTAL_NOT_FOUND", message=f"Rental {command.rental_id} not found")
                )

            if rental.signed_document_id:
                document = await self.document_repo.get_by_id(rental.signed_document_id)
                if document and document.file_url:
                    return Return.ok(
                        SignedDocumentDTO(
                            source="stored",
                            status=DocumentStatus.COMPLETED.value,
                            document_url=document.file_url,
                        )
                    )

            envelope_id = envelope_id or rental.docusign_envelope_id
            if not envelope_id:
                return Return.err(
                    Error(
                        code="ENVELOPE_NOT_FOUND",
                        message="No DocuSign envelope for this rental",
                    )
                )

        try:
            info = await self.provider.get_envelope_status(envelope_id)
            content = await self.provider.download_signed_document(envelope_id)
        except ESignAuthError as e:
            logger.error(f"DocuSign authentication failed: {e.message}")
            return Return.err(
                Error(code="ESIGN_AUTH_FAILED", message="DocuSign auth failed", reason=e.message)
            )
        except ESignError as e:
            logger.error(f"DocuSign document download for {envelope_id} failed: {e.message}")
            return Return.err(
                Error(
                    code="ESIGN_PROVIDER_ERROR",
                    message="Failed to get document from DocuSign",
                    reason=e.message,
                )
            )

        if rental and map_docusign_status(info.status) == DocumentStatus.COMPLETED:
            await self.lifecycle.archive_signed_document(rental, self.provider, envelope_id, content=content)

        return Return.ok(
            SignedDocumentDTO(
                source="docusign",
                status=info.status,
                document_base64=base64.b64encode(content).decode("ascii"),
            )
        )
