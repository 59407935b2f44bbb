"""Identity Verification API Routes"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.dependencies.auth import Principal, require_operator
from src.app.services.document_storage import DocumentStorage
from src.app.services.verification_client import VerificationMediaClient
from src.app.use_cases.verification.dtos import FetchVerificationMediaResponseDTO
from src.app.use_cases.verification.fetch_verification_media import FetchVerificationMedia
from src.adapter.repositories import SqlAlchemyIdentityVerificationRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_verification_client, get_document_storage
from src.api.error import ClientError

router = APIRouter(prefix="/verification", tags=["Verification"])


@router.post(
    "/{verification_id}/media",
    response_model=FetchVerificationMediaResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        502: {
            "description": "Verification provider error",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "VERIFICATION_PROVIDER_ERROR",
                            "message": "Failed to fetch media: 404"
                        }
                    }
                }
            }
        }
    }
)
async def fetch_verification_media(
    verification_id: str,
    session: AsyncSession = Depends(get_session),
    client: VerificationMediaClient = Depends(get_verification_client),
    storage: DocumentStorage = Depends(get_document_storage),
    principal: Principal = Depends(require_operator),
):
    """
    Copy identity document and selfie images into document storage.

    Images that fail to download are skipped; the record keeps whatever
    was stored.

    **Returns:**
    - 200: Stored URLs keyed by field
    - 404: Verification record not found
    - 502: Provider media listing failed
    """
    uow = SqlAlchemyUnitOfWork(session)
    use_case = FetchVerificationMedia(
        uow,
        SqlAlchemyIdentityVerificationRepository(session),
        client,
        storage,
    )
    result = await use_case.execute(verification_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
