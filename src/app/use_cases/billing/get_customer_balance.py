"""Customer Balance Use Cases

Read-only aggregations of a customer's ledger.
"""

from datetime import date
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_repository import LedgerRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.app.use_cases.billing.dtos import OutstandingBalanceDTO, CustomerBalanceDTO
from src.app.use_cases.billing.ledger_rules import classify_balance


class GetOutstandingBalance:
    """
    Get Outstanding Balance Use Case

    Sums remaining_amount over the customer's charges that are currently
    due. Rental charges dated in the future (upcoming installments) are
    not yet owed and are excluded.
    """

    def __init__(self, customer_repo: CustomerRepository, ledger_repo: LedgerRepository):
        self.customer_repo = customer_repo
        self.ledger_repo = ledger_repo

    async def execute(
        self,
        customer_id: str,
        tenant_id: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> Result[OutstandingBalanceDTO]:
        """
        Execute outstanding balance computation

        Args:
            customer_id: Customer identifier
            tenant_id: Optional tenant scope
            as_of: Business date (default: today)

        Returns:
            Result[OutstandingBalanceDTO]

        Errors:
            CUSTOMER_NOT_FOUND: Unknown customer
        """
        customer = await self.customer_repo.get_by_id(customer_id)
        if not customer:
            return Return.err(
                Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {customer_id} not found")
            )

        today = as_of or date.today()
        outstanding = await self.ledger_repo.sum_outstanding(customer_id, today, tenant_id)

        return Return.ok(
            OutstandingBalanceDTO(customer_id=customer_id, outstanding=outstanding, as_of=today)
        )


class GetCustomerBalance:
    """
    Get Customer Balance Use Case

    net = outstanding debt - available credit, classified as Settled
    (|net| < 0.01), In Debt or In Credit.
    """

    def __init__(
        self,
        customer_repo: CustomerRepository,
        ledger_repo: LedgerRepository,
        payment_repo: PaymentRepository,
    ):
        self.customer_repo = customer_repo
        self.ledger_repo = ledger_repo
        self.payment_repo = payment_repo

    async def execute(
        self,
        customer_id: str,
        tenant_id: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> Result[CustomerBalanceDTO]:
        customer = await self.customer_repo.get_by_id(customer_id)
        if not customer:
            return Return.err(
                Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {customer_id} not found")
            )

        today = as_of or date.today()

        total_charges = await self.ledger_repo.sum_charges(customer_id, tenant_id)
        total_payments = await self.ledger_repo.sum_payment_entries(customer_id, tenant_id)
        outstanding_debt = await self.ledger_repo.sum_outstanding(customer_id, today, tenant_id)
        available_credit = await self.payment_repo.sum_available_credit(customer_id, tenant_id)

        balance, status = classify_balance(outstanding_debt - available_credit)

        return Return.ok(
            CustomerBalanceDTO(
                customer_id=customer_id,
                balance=balance,
                status=status,
                total_charges=total_charges,
                total_payments=total_payments,
                outstanding_debt=outstanding_debt,
                available_credit=available_credit,
            )
        )
