"""Rental API Routes

Cancellation with refund or pre-authorisation release.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.dependencies.auth import Principal, require_operator
from src.app.services.notification_service import NotificationService
from src.app.services.payment_gateway import PaymentGateway
from src.app.use_cases.rentals.dtos import CancelRentalCommandDTO, CancelRentalResponseDTO
from src.app.use_cases.rentals.cancel_rental import CancelRental
from src.adapter.repositories import (
    SqlAlchemyRentalRepository,
    SqlAlchemyVehicleRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyTenantRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_payment_gateway, get_notification_service
from src.api.error import ClientError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Rentals"])


@router.post(
    "/cancel-rental-refund",
    response_model=CancelRentalResponseDTO,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Invalid cancellation request",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "REFUND_AMOUNT_EXCEEDS_PAYMENT",
                            "message": "Refund amount 500.00 exceeds payment amount 300.00"
                        }
                    }
                }
            }
        },
        404: {
            "description": "Rental or payment not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "RENTAL_NOT_FOUND",
                            "message": "Rental 5c1b2f7a-8d0e-4e8f-a1f4-77a3c1d9e001 not found"
                        }
                    }
                }
            }
        },
        409: {
            "description": "Rental already cancelled",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "RENTAL_ALREADY_CANCELLED",
                            "message": "Rental is already cancelled"
                        }
                    }
                }
            }
        }
    }
)
async def cancel_rental_refund(
    command: CancelRentalCommandDTO,
    session: AsyncSession = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notification_service: NotificationService = Depends(get_notification_service),
    principal: Principal = Depends(require_operator),
):
    """
    Cancel a rental and settle its payment.

    An uncaptured pre-authorisation is released. A captured payment is
    refunded in full or in part, as requested. The rental is cancelled and
    the vehicle returned to inventory even when the processor call fails;
    the outcome is reported in `refund`.

    **Example request:**
    ```json
    {
      "rentalId": "5c1b2f7a-8d0e-4e8f-a1f4-77a3c1d9e001",
      "refundType": "partial",
      "refundAmount": 120.00,
      "reason": "Customer changed travel plans",
      "cancelledBy": "admin-42"
    }
    ```

    **Example response:**
    ```json
    {
      "success": true,
      "message": "Rental cancelled successfully",
      "refund": {"type": "partial", "refundId": "re_123", "amount": "120.00", "status": "succeeded"},
      "notificationData": {"customerName": "Jane Doe", "bookingRef": "RNT-5C1B2F7A", "refundType": "partial", "refundAmount": "120.00"}
    }
    ```

    **Returns:**
    - 200: Rental cancelled
    - 400: Missing reason or invalid refund amount
    - 404: Rental or payment not found
    - 409: Rental already cancelled
    """
    if not command.tenant_id and principal.tenant_id:
        command = command.model_copy(update={"tenant_id": principal.tenant_id})

    uow = SqlAlchemyUnitOfWork(session)
    use_case = CancelRental(
        uow,
        SqlAlchemyRentalRepository(session),
        SqlAlchemyVehicleRepository(session),
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyTenantRepository(session),
        gateway,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    try:
        await notification_service.send_cancellation_notice(result.value.notification_data)
    except Exception as e:
        logger.warning(f"Cancellation notice for rental {command.rental_id} not sent: {e}")

    return result.value
