"""CustomerSignup Use Case

Creates a customer portal login, linking or creating the customer record.
"""

import logging
import re
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.password_hasher import PasswordHasher
from src.app.repositories.customer_repository import (
    CustomerRepository,
    CustomerUserRepository,
)
from src.domain.customer import Customer, CustomerUser, CustomerNotification
from .dtos import CustomerSignupCommandDTO, CustomerSignupResponseDTO

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72


class CustomerSignup:
    """
    Use Case: Customer self-service signup

    Business Rules:
    1. Email must look like an address; it is stored lower-cased
    2. Password: at least 8 characters and at most 72 bytes (bcrypt limit)
    3. One login per email
    4. An explicit customer_id must exist (and belong to the tenant when one
       is given); otherwise a new Individual customer is created
    5. Login, customer and welcome notification are written in one transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        user_repo: CustomerUserRepository,
        password_hasher: PasswordHasher,
        company_name: str = "Drive247",
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.user_repo = user_repo
        self.password_hasher = password_hasher
        self.company_name = company_name

    async def execute(self, command: CustomerSignupCommandDTO) -> Result[CustomerSignupResponseDTO]:
        # Step 1: Validate input
        email = (command.email or "").strip().lower()
        if not email or not command.password:
            return Return.err(
                Error(code="MISSING_CREDENTIALS", message="Email and password are required")
            )

        if not EMAIL_PATTERN.match(email):
            return Return.err(Error(code="INVALID_EMAIL", message="Email address is not valid"))

        weak = self._password_problem(command.password)
        if weak:
            return Return.err(Error(code="WEAK_PASSWORD", message=weak))

        try:
            # Step 2: Uniqueness
            if await self.user_repo.get_by_email(email):
                return Return.err(
                    Error(
                        code="EMAIL_ALREADY_REGISTERED",
                        message="An account with this email already exists. Please log in instead.",
                    )
                )

            # Step 3: Customer record
            if command.customer_id:
                customer = await self.customer_repo.get_by_id(command.customer_id)
                if not customer or (
                    command.tenant_id and customer.tenant_id and customer.tenant_id != command.tenant_id
                ):
                    return Return.err(
                        Error(code="INVALID_CUSTOMER", message="Customer record not found")
                    )
                logger.info(f"Linking signup {email} to existing customer {customer.id}")
            else:
                customer = await self.customer_repo.create(
                    Customer(
                        tenant_id=command.tenant_id,
                        name=command.customer_name or email.split("@")[0],
                        email=email,
                        phone=command.customer_phone,
                        type="Individual",
                        status="Active",
                    )
                )

            # Step 4: Login and welcome notice
            user = await self.user_repo.create(
                CustomerUser(
                    email=email,
                    password_hash=self.password_hasher.hash(command.password),
                    customer_id=customer.id,
                    tenant_id=command.tenant_id,
                )
            )
            await self.user_repo.add_notification(
                CustomerNotification(
                    customer_user_id=user.id,
                    tenant_id=command.tenant_id,
                    title=f"Welcome to {self.company_name}!",
                    message="Your account has been created successfully. "
                            "You can now view your bookings and manage your profile.",
                    type="welcome",
                )
            )

            await self.uow.commit()

            logger.info(f"Customer signup completed: user={user.id} customer={customer.id}")

            return Return.ok(
                CustomerSignupResponseDTO(
                    user_id=user.id,
                    customer_user_id=user.id,
                    customer_id=customer.id,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SIGNUP_FAILED",
                    message="Failed to create account",
                    reason=str(e),
                )
            )

    @staticmethod
    def _password_problem(password: str) -> Optional[str]:
        if len(password) < MIN_PASSWORD_LENGTH:
            return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
        return None
