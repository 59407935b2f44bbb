"""Installment API Routes

Installment options for a booking, plan creation and operator retries.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.dependencies.auth import Principal, require_operator
from src.app.use_cases.installments.dtos import (
    GetInstallmentOptionsCommandDTO,
    InstallmentOptionsDTO,
    CreateInstallmentPlanCommandDTO,
    InstallmentPlanDTO,
    ScheduledInstallmentDTO,
)
from src.app.use_cases.installments.get_installment_options import GetInstallmentOptions
from src.app.use_cases.installments.create_installment_plan import CreateInstallmentPlan
from src.app.use_cases.installments.retry_installment import RetryInstallment
from src.adapter.repositories import (
    SqlAlchemyInstallmentRepository,
    SqlAlchemyLedgerRepository,
    SqlAlchemyRentalRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/installments", tags=["Installments"])


@router.post(
    "/options",
    response_model=InstallmentOptionsDTO,
    status_code=status.HTTP_200_OK,
)
async def get_installment_options(
    command: GetInstallmentOptionsCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    """
    List payment options for a booking.

    Paying in full is always offered. Weekly and monthly options appear when
    the tenant has installments enabled, the rental meets the cadence's
    minimum length, and the cadence yields at least two installments.

    **Example request:**
    ```json
    {
      "tenant_id": "7d9f3c2a-1b4e-4c8a-9f00-5e6d7c8b9a01",
      "rental_days": 35,
      "breakdown": {"rental_fee": "1200.00", "tax_amount": "240.00", "security_deposit": "500.00"}
    }
    ```

    **Returns:**
    - 200: Options computed
    - 400: Invalid request parameters
    """
    use_case = GetInstallmentOptions(SqlAlchemyInstallmentRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/plans",
    response_model=InstallmentPlanDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Rental not eligible for the cadence",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "NOT_ELIGIBLE",
                            "message": "A 5-day rental is not eligible for weekly installments"
                        }
                    }
                }
            }
        },
        409: {
            "description": "Plan already exists",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PLAN_ALREADY_EXISTS",
                            "message": "Rental 5c1b2f7a-8d0e-4e8f-a1f4-77a3c1d9e001 already has an installment plan"
                        }
                    }
                }
            }
        }
    }
)
async def create_installment_plan(
    command: CreateInstallmentPlanCommandDTO,
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    """
    Create an installment plan for a rental.

    Upfront items are posted as an InitialFee charge. Each installment gets
    a Rental charge dated on its due date, so upcoming installments are not
    counted as owed until they fall due.

    **Returns:**
    - 201: Plan created with its schedule
    - 400: Rental not eligible, or missing dates
    - 404: Rental not found
    - 409: Rental already has a plan
    """
    uow = SqlAlchemyUnitOfWork(session)
    use_case = CreateInstallmentPlan(
        uow,
        SqlAlchemyRentalRepository(session),
        SqlAlchemyInstallmentRepository(session),
        SqlAlchemyLedgerRepository(session),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/{installment_id}/retry",
    response_model=ScheduledInstallmentDTO,
    status_code=status.HTTP_200_OK,
    responses={
        409: {
            "description": "Installment cannot be retried",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INSTALLMENT_NOT_RETRYABLE",
                            "message": "Installment is paid and cannot be retried"
                        }
                    }
                }
            }
        }
    }
)
async def retry_installment(
    installment_id: str,
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    """
    Put a failed or overdue installment back on the schedule.

    The retry budget is reset; the next processor run charges it again.

    **Returns:**
    - 200: Installment rescheduled
    - 404: Installment not found
    - 409: Installment is not failed or overdue
    """
    uow = SqlAlchemyUnitOfWork(session)
    use_case = RetryInstallment(uow, SqlAlchemyInstallmentRepository(session))
    result = await use_case.execute(installment_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
