"""Allocation Reconciliation Background Worker

Periodically checks that charge and payment remaining amounts agree with the
recorded payment allocations.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.domain.base import utc_now
from src.adapter.repositories import (
    SqlAlchemyLedgerRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyPaymentApplicationRepository,
)
from src.app.use_cases.billing import ReconcileAllocations, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class AllocationReconcilerWorker:
    """
    Background worker for allocation reconciliation

    Features:
    - Compares remaining amounts against allocation sums
    - Logs discrepancies for investigation; never corrects them
    - Can run once or continuously
    - Configurable interval (default: daily)

    Usage:
        # Run once
        worker = AllocationReconcilerWorker()
        result = await worker.run_once()

        # Run continuously
        worker = AllocationReconcilerWorker()
        await worker.run_forever(interval_seconds=86400)  # Daily
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("AllocationReconcilerWorker initialized")

    async def run_once(self, tenant_id: Optional[str] = None) -> ReconciliationResultDTO:
        """
        Run reconciliation once

        Args:
            tenant_id: Restrict to one tenant (default: all)

        Returns:
            ReconciliationResultDTO with reconciliation results
        """
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Allocation reconciliation is disabled, skipping")
            return ReconciliationResultDTO(
                charges_checked=0,
                payments_checked=0,
                discrepancies_found=0,
                discrepancies=[],
                reconciliation_time=utc_now(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = ReconcileAllocations(
                ledger_repo=SqlAlchemyLedgerRepository(session),
                payment_repo=SqlAlchemyPaymentRepository(session),
                application_repo=SqlAlchemyPaymentApplicationRepository(session),
            )

            result = await use_case.execute(tenant_id)

            if result.is_err():
                logger.error(f"Reconciliation failed: {result.error.message}")
                raise RuntimeError(f"Reconciliation failed: {result.error.message}")

            response = result.value

            if response.discrepancies_found > 0:
                logger.error(
                    f"ALERT: {response.discrepancies_found} allocation discrepancies found!"
                )
                for d in response.discrepancies:
                    logger.error(
                        f"  - {d.entity_type} {d.entity_id}: "
                        f"expected={d.expected_applied}, recorded={d.recorded_applied}, "
                        f"diff={d.discrepancy}"
                    )

            return response

    async def run_forever(self, interval_seconds: Optional[int] = None):
        """
        Run reconciliation continuously at specified interval

        Args:
            interval_seconds: Seconds between runs (default: RECONCILIATION_INTERVAL_SECONDS)
        """
        interval = interval_seconds or ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS
        logger.info(f"Starting continuous allocation reconciliation with {interval}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Reconciliation cycle complete. "
                    f"Checked {result.charges_checked} charges and {result.payments_checked} payments, "
                    f"found {result.discrepancies_found} discrepancies "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("AllocationReconcilerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.allocation_reconciler --once

        # Run continuously (default: daily)
        python -m src.worker.allocation_reconciler

        # Run once for one tenant
        python -m src.worker.allocation_reconciler --once --tenant <tenant_id>
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Allocation Reconciliation Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument("--tenant", default=None, help="Only reconcile this tenant")
    parser.add_argument(
        "--interval", type=int, default=None,
        help="Interval between runs in seconds (default: 86400 = 24 hours)"
    )
    args = parser.parse_args()

    worker = AllocationReconcilerWorker()

    try:
        if args.once:
            result = await worker.run_once(tenant_id=args.tenant)
            print("Reconciliation complete:")
            print(f"  Charges checked: {result.charges_checked}")
            print(f"  Payments checked: {result.payments_checked}")
            print(f"  Discrepancies found: {result.discrepancies_found}")
            print(f"  Execution time: {result.execution_time_ms}ms")
            for d in result.discrepancies:
                print(
                    f"  - {d.entity_type} {d.entity_id}: "
                    f"expected={d.expected_applied}, recorded={d.recorded_applied}"
                )
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
