"""Customer API Routes"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.app.services.password_hasher import PasswordHasher
from src.app.use_cases.customers.dtos import CustomerSignupCommandDTO, CustomerSignupResponseDTO
from src.app.use_cases.customers.customer_signup import CustomerSignup
from src.adapter.repositories import SqlAlchemyCustomerRepository, SqlAlchemyCustomerUserRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_password_hasher
from src.api.error import ClientError

router = APIRouter(tags=["Customers"])


@router.post(
    "/customer-signup",
    response_model=CustomerSignupResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Signup rejected",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "EMAIL_ALREADY_REGISTERED",
                            "message": "An account with this email already exists. Please log in instead."
                        }
                    }
                }
            }
        }
    }
)
async def customer_signup(
    command: CustomerSignupCommandDTO,
    session: AsyncSession = Depends(get_session),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
):
    """
    Create a customer portal account.

    Links to an existing customer record when `customer_id` is given,
    otherwise creates one. A welcome notification is queued in the same
    transaction.

    **Returns:**
    - 200: Account created
    - 400: Invalid email, weak password, duplicate email or unknown customer
    """
    uow = SqlAlchemyUnitOfWork(session)
    use_case = CustomerSignup(
        uow,
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyCustomerUserRepository(session),
        password_hasher,
        company_name=ApplicationConfig.COMPANY_NAME,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
