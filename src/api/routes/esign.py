"""E-Signature API Routes

DocuSign status polling and signed-document retrieval, plus the BoldSign
webhook receiver.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from libs.result import Error
from src.api.dependencies.auth import Principal, require_operator
from src.app.services.document_storage import DocumentStorage
from src.app.services.esign_provider import ESignProvider
from src.app.use_cases.esign.agreement_lifecycle import AgreementLifecycle
from src.app.use_cases.esign.check_envelope_status import CheckEnvelopeStatus
from src.app.use_cases.esign.get_signed_document import GetSignedDocument
from src.app.use_cases.esign.handle_signature_webhook import HandleSignatureWebhook
from src.app.use_cases.esign.dtos import (
    BoldSignWebhookDTO,
    CheckEnvelopeStatusCommandDTO,
    EnvelopeStatusDTO,
    SignedDocumentCommandDTO,
    SignedDocumentDTO,
    WebhookResultDTO,
)
from src.adapter.repositories import (
    SqlAlchemyRentalRepository,
    SqlAlchemyVehicleRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyCustomerDocumentRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import (
    get_session,
    get_docusign_provider,
    get_boldsign_provider,
    get_document_storage,
)
from src.api.error import ClientError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["E-Signature"])


def _lifecycle(session: AsyncSession, storage: DocumentStorage) -> AgreementLifecycle:
    return AgreementLifecycle(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRentalRepository(session),
        SqlAlchemyVehicleRepository(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyCustomerDocumentRepository(session),
        storage,
    )


@router.post(
    "/docusign/status",
    response_model=EnvelopeStatusDTO,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    responses={
        401: {
            "description": "DocuSign authentication failed",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "ESIGN_AUTH_FAILED",
                            "message": "DocuSign token request failed: 400"
                        }
                    }
                }
            }
        },
        502: {
            "description": "DocuSign API error",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "ESIGN_PROVIDER_ERROR",
                            "message": "Failed to get envelope status: 404"
                        }
                    }
                }
            }
        }
    }
)
async def check_envelope_status(
    command: CheckEnvelopeStatusCommandDTO,
    session: AsyncSession = Depends(get_session),
    provider: ESignProvider = Depends(get_docusign_provider),
    storage: DocumentStorage = Depends(get_document_storage),
    principal: Principal = Depends(require_operator),
):
    """
    Refresh a rental's agreement status from DocuSign.

    When the envelope has completed, the rental is activated, its vehicle
    marked rented and the signed agreement archived.

    **Example request:**
    ```json
    {"rentalId": "5c1b2f7a-8d0e-4e8f-a1f4-77a3c1d9e001"}
    ```

    **Returns:**
    - 200: Current status (`rentalUpdated` tells whether it was written)
    - 400: No envelope id given or stored
    - 401: DocuSign authentication failed
    - 404: Rental not found
    - 502: DocuSign API error
    """
    use_case = CheckEnvelopeStatus(
        SqlAlchemyRentalRepository(session),
        _lifecycle(session, storage),
        provider,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/docusign/view",
    response_model=SignedDocumentDTO,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
)
async def get_signed_document(
    command: SignedDocumentCommandDTO,
    session: AsyncSession = Depends(get_session),
    provider: ESignProvider = Depends(get_docusign_provider),
    storage: DocumentStorage = Depends(get_document_storage),
    principal: Principal = Depends(require_operator),
):
    """
    Fetch a signed rental agreement.

    An archived copy is returned by URL. Otherwise the document is pulled
    from DocuSign, archived when the envelope is complete, and returned as
    base64.

    **Returns:**
    - 200: Document URL or content
    - 400: No rental or envelope id given
    - 404: Rental or envelope not found
    - 502: DocuSign API error
    """
    use_case = GetSignedDocument(
        SqlAlchemyRentalRepository(session),
        SqlAlchemyCustomerDocumentRepository(session),
        _lifecycle(session, storage),
        provider,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/boldsign/webhook",
    response_model=WebhookResultDTO,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Unreadable payload or unknown document",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_WEBHOOK_PAYLOAD",
                            "message": "No document ID in payload"
                        }
                    }
                }
            }
        }
    }
)
async def boldsign_webhook(
    request: Request,
    session: AsyncSession = Depends(get_session),
    provider: ESignProvider = Depends(get_boldsign_provider),
    storage: DocumentStorage = Depends(get_document_storage),
):
    """
    Receive a BoldSign document event.

    The rental is found by its document id. The event is mapped to a
    document status; a completed document activates the rental and is
    archived.

    **Returns:**
    - 200: Event applied
    - 400: Payload is not valid JSON, lacks a document id, or matches no rental
    """
    raw_body = await request.body()
    try:
        payload = BoldSignWebhookDTO.model_validate(json.loads(raw_body))
    except (ValueError, ValidationError) as e:
        logger.error(f"Rejected BoldSign webhook body starting {raw_body[:200]!r}: {e}")
        raise ClientError(
            Error(code="INVALID_WEBHOOK_PAYLOAD", message="No document ID in payload"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    use_case = HandleSignatureWebhook(
        SqlAlchemyRentalRepository(session),
        _lifecycle(session, storage),
        provider,
    )
    result = await use_case.execute(payload)

    if result.is_err():
        if result.error.code == "RENTAL_NOT_FOUND":
            raise ClientError(result.error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ClientError(result.error)

    return result.value
