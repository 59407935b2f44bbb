"""ReconcileAllocations Use Case

Checks that every charge and payment agrees with its allocation records.
"""

import logging
import time
from typing import Optional
from src.domain.base import utc_now
from libs.result import Result, Return, Error
from src.app.repositories.ledger_repository import LedgerRepository
from src.app.repositories.payment_repository import (
    PaymentRepository,
    PaymentApplicationRepository,
)
from src.domain.money import ZERO, to_money
from .dtos import AllocationDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileAllocations:
    """
    Use Case: Reconcile charges and payments against allocations

    Business Rules:
    1. For every charge: sum(amount_applied) == amount - remaining_amount
       and 0 <= remaining_amount <= amount
    2. For every collected payment: sum(amount_applied) == amount - remaining_amount
    3. Does NOT modify any data (read-only reconciliation)

    Flow:
    1. Load allocation totals per charge and per payment
    2. Compare each charge, then each payment
    3. Return reconciliation result with all discrepancies
    """

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        payment_repo: PaymentRepository,
        application_repo: PaymentApplicationRepository,
    ):
        self.ledger_repo = ledger_repo
        self.payment_repo = payment_repo
        self.application_repo = application_repo

    async def execute(self, tenant_id: Optional[str] = None) -> Result[ReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = utc_now()

        try:
            logger.info("Starting allocation reconciliation")

            # Step 1: Totals
            by_charge = await self.application_repo.get_totals_by_charge()
            by_payment = await self.application_repo.get_totals_by_payment()

            discrepancies: list[AllocationDiscrepancyDTO] = []

            # Step 2a: Charges
            charges = await self.ledger_repo.list_charges(tenant_id)
            for charge in charges:
                amount = to_money(charge.amount)
                remaining = to_money(charge.remaining_amount)
                expected = amount - remaining
                recorded = by_charge.get(charge.id, ZERO)

                detail = None
                if remaining < ZERO or remaining > amount:
                    detail = f"remaining_amount {remaining} outside [0, {amount}]"
                elif expected != recorded:
                    detail = "allocation records disagree with remaining_amount"

                if detail:
                    discrepancies.append(
                        AllocationDiscrepancyDTO(
                            entity_type="charge",
                            entity_id=charge.id,
                            expected_applied=expected,
                            recorded_applied=recorded,
                            discrepancy=expected - recorded,
                            detail=detail,
                        )
                    )

            # Step 2b: Payments with allocations
            payments = await self.payment_repo.list_all(tenant_id)
            payments_checked = 0
            for payment in payments:
                recorded = by_payment.get(payment.id)
                if recorded is None:
                    continue

                payments_checked += 1
                expected = to_money(payment.amount) - to_money(payment.remaining_amount)
                if expected != recorded:
                    discrepancies.append(
                        AllocationDiscrepancyDTO(
                            entity_type="payment",
                            entity_id=payment.id,
                            expected_applied=expected,
                            recorded_applied=recorded,
                            discrepancy=expected - recorded,
                            detail="allocation records disagree with remaining_amount",
                        )
                    )

            # Step 3: Build response
            execution_time_ms = int((time.time() - start_time) * 1000)

            for d in discrepancies:
                logger.warning(
                    f"Discrepancy on {d.entity_type} {d.entity_id}: "
                    f"expected_applied={d.expected_applied}, recorded_applied={d.recorded_applied}"
                )

            logger.info(
                f"Reconciliation complete. {len(charges)} charges, {payments_checked} payments, "
                f"{len(discrepancies)} discrepancies in {execution_time_ms}ms"
            )

            return Return.ok(
                ReconciliationResultDTO(
                    charges_checked=len(charges),
                    payments_checked=payments_checked,
                    discrepancies_found=len(discrepancies),
                    discrepancies=discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Allocation reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile payment allocations",
                    reason=str(e),
                )
            )
