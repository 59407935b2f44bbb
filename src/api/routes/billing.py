"""Billing API Routes

FastAPI routes for customer balances and payment allocation.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.dependencies.auth import Principal, require_operator
from src.api.schemas.billing_request import ApplyPaymentRequestSchema
from src.app.use_cases.billing.dtos import (
    ApplyPaymentCommandDTO,
    ApplyPaymentResponseDTO,
    CustomerBalanceDTO,
    OutstandingBalanceDTO,
)
from src.app.use_cases.billing.apply_payment import ApplyPayment
from src.app.use_cases.billing.get_customer_balance import GetCustomerBalance, GetOutstandingBalance
from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyLedgerRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyPaymentApplicationRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/billing", tags=["Billing"])

CUSTOMER_NOT_FOUND_RESPONSE = {
    404: {
        "description": "Customer not found",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "CUSTOMER_NOT_FOUND",
                        "message": "Customer 5c1b2f7a-8d0e-4e8f-a1f4-77a3c1d9e001 not found"
                    }
                }
            }
        }
    }
}


@router.get(
    "/customers/{customer_id}/balance",
    response_model=CustomerBalanceDTO,
    status_code=status.HTTP_200_OK,
    responses=CUSTOMER_NOT_FOUND_RESPONSE,
)
async def get_customer_balance(
    customer_id: str,
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    """
    Get a customer's balance with status.

    Net balance is outstanding debt minus unallocated credit from collected
    payments. Pre-authorisation holds are never counted as credit.

    **Path parameters:**
    - `customer_id` (required): Customer identifier

    **Example response:**
    ```json
    {
      "customer_id": "5c1b2f7a-8d0e-4e8f-a1f4-77a3c1d9e001",
      "balance": "120.00",
      "status": "In Debt",
      "total_charges": "520.00",
      "total_payments": "400.00",
      "outstanding_debt": "120.00",
      "available_credit": "0.00"
    }
    ```

    **Returns:**
    - 200: Balance computed
    - 404: Customer not found
    """
    use_case = GetCustomerBalance(
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerRepository(session),
        SqlAlchemyPaymentRepository(session),
    )
    result = await use_case.execute(customer_id, tenant_id=principal.tenant_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/customers/{customer_id}/outstanding",
    response_model=OutstandingBalanceDTO,
    status_code=status.HTTP_200_OK,
    responses=CUSTOMER_NOT_FOUND_RESPONSE,
)
async def get_outstanding_balance(
    customer_id: str,
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    """
    Get the amount a customer currently owes.

    Sums remaining amounts on charges that are due; rental charges dated in
    the future (upcoming installments) are excluded.

    **Returns:**
    - 200: Outstanding balance
    - 404: Customer not found
    """
    use_case = GetOutstandingBalance(
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerRepository(session),
    )
    result = await use_case.execute(customer_id, tenant_id=principal.tenant_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/payments/{payment_id}/apply",
    response_model=ApplyPaymentResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: {
            "description": "Payment not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PAYMENT_NOT_FOUND",
                            "message": "Payment 0b6f8c1e-2f0e-4a8e-9d55-3a5f4f0d8a11 not found"
                        }
                    }
                }
            }
        },
        400: {
            "description": "Payment cannot be allocated",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PAYMENT_NOT_CAPTURED",
                            "message": "Pre-authorisation holds cannot be allocated until captured"
                        }
                    }
                }
            }
        },
        409: {
            "description": "Concurrent allocation detected",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "ALLOCATION_CONFLICT",
                            "message": "Charge remaining amount changed during allocation"
                        }
                    }
                }
            }
        }
    }
)
async def apply_payment(
    payment_id: str,
    request: Optional[ApplyPaymentRequestSchema] = None,
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    """
    Allocate a payment to the customer's outstanding charges.

    Charges are settled oldest first within each category, categories in
    order InitialFee, Extension, Rental, Fines, Other (or the order given in
    `target_categories`). Re-applying a payment never allocates the same
    money twice.

    **Example request:**
    ```json
    {
      "target_categories": ["Rental", "Fines"]
    }
    ```

    **Returns:**
    - 200: Payment allocated; status is Applied, Partial or Credit
    - 400: Payment is a pre-authorisation or otherwise not allocatable
    - 404: Payment not found
    - 409: Concurrent allocation detected, nothing was written
    """
    uow = SqlAlchemyUnitOfWork(session)

    command = ApplyPaymentCommandDTO(
        payment_id=payment_id,
        target_categories=request.target_categories if request else None,
    )

    use_case = ApplyPayment(
        uow,
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyLedgerRepository(session),
        SqlAlchemyPaymentApplicationRepository(session),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
