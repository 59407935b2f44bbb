"""Installment Processing Background Worker

Settles charges left in PROCESSING, sweeps unpaid installments past their
grace period into OVERDUE, then charges every installment that is due (or
due for a retry) off-session.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
import time
from datetime import date
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Result, Return, Error
from src.adapter.repositories import (
    SqlAlchemyInstallmentRepository,
    SqlAlchemyTenantRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyPaymentApplicationRepository,
    SqlAlchemyLedgerRepository,
)
from src.adapter.services import (
    SqlAlchemyUnitOfWork,
    StripePaymentGateway,
    create_notification_service,
)
from src.app.services.notification_service import NotificationService
from src.app.services.payment_gateway import PaymentGateway
from src.app.use_cases.installments import (
    ProcessInstallment,
    ReconcileInstallmentCharge,
    MarkOverdueInstallments,
    InstallmentRunResultDTO,
    ProcessInstallmentResultDTO,
)

logger = logging.getLogger(__name__)


class InstallmentProcessorWorker:
    """
    Background worker for installment charging

    Features:
    - Resolves charges left in PROCESSING against the processor first
    - Marks installments past grace as OVERDUE
    - Charges each due installment in its own session and transaction
    - A failure on one installment never stops the run
    - Can run once or continuously

    Usage:
        # Run once for today
        worker = InstallmentProcessorWorker()
        result = await worker.run_once()

        # Run continuously
        worker = InstallmentProcessorWorker()
        await worker.run_forever(interval_seconds=3600)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        gateway: Optional[PaymentGateway] = None,
        notification_service: Optional[NotificationService] = None,
        batch_size: int = 100,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            gateway: Payment gateway (defaults to Stripe)
            notification_service: Notification sink (defaults to config webhook)
            batch_size: Max installments charged per run
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.gateway = gateway or StripePaymentGateway(api_key=ApplicationConfig.STRIPE_SECRET_KEY)
        self.notification_service = notification_service or create_notification_service(
            ApplicationConfig.NOTIFICATION_WEBHOOK_URL
        )
        self.batch_size = batch_size

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("InstallmentProcessorWorker initialized")

    async def _mark_overdue(self, today: date) -> int:
        async with self.async_session_factory() as session:
            use_case = MarkOverdueInstallments(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyInstallmentRepository(session),
            )
            result = await use_case.execute(as_of=today)

        if result.is_err():
            logger.error(f"Overdue sweep failed: {result.error.message} ({result.error.reason})")
            return 0
        return result.value.marked_overdue

    def _use_case_kwargs(self, session) -> dict:
        return dict(
            uow=SqlAlchemyUnitOfWork(session),
            installment_repo=SqlAlchemyInstallmentRepository(session),
            tenant_repo=SqlAlchemyTenantRepository(session),
            payment_repo=SqlAlchemyPaymentRepository(session),
            ledger_repo=SqlAlchemyLedgerRepository(session),
            application_repo=SqlAlchemyPaymentApplicationRepository(session),
            gateway=self.gateway,
            notification_service=self.notification_service,
            currency=ApplicationConfig.DEFAULT_CURRENCY,
        )

    async def _process_one(self, installment_id: str, today: date) -> Result[ProcessInstallmentResultDTO]:
        outcome = None
        async with self.async_session_factory() as session:
            use_case = ProcessInstallment(**self._use_case_kwargs(session))
            outcome = await use_case.execute(installment_id, as_of=today)

        if outcome is None:
            return Return.err(
                Error(code="PROCESS_INSTALLMENT_FAILED", message="Charge attempt ended without a result")
            )
        return outcome

    async def _reconcile_one(self, installment_id: str, today: date) -> Result[ProcessInstallmentResultDTO]:
        outcome = None
        async with self.async_session_factory() as session:
            use_case = ReconcileInstallmentCharge(**self._use_case_kwargs(session))
            outcome = await use_case.execute(installment_id, as_of=today)

        if outcome is None:
            return Return.err(
                Error(code="RECONCILE_INSTALLMENT_FAILED", message="Reconciliation ended without a result")
            )
        return outcome

    async def _reconcile_unsettled(self, today: date, result: InstallmentRunResultDTO) -> None:
        async with self.async_session_factory() as session:
            unsettled = await SqlAlchemyInstallmentRepository(session).list_unsettled_charges(
                limit=self.batch_size
            )
            installment_ids = [installment.id for installment in unsettled]

        if installment_ids:
            logger.info(f"Reconciling {len(installment_ids)} unsettled installment charges")

        for installment_id in installment_ids:
            try:
                outcome = await self._reconcile_one(installment_id, today)
            except Exception as e:
                logger.error(f"Unexpected error reconciling installment {installment_id}: {e}")
                result.errors += 1
                continue

            if outcome.is_err():
                logger.error(
                    f"Installment {installment_id} not reconciled: "
                    f"{outcome.error.code} {outcome.error.message}"
                )
                result.errors += 1
                continue

            if outcome.value.outcome in ("paid", "failed"):
                result.reconciled += 1
            elif outcome.value.outcome == "released":
                result.released += 1

    async def run_once(self, as_of: Optional[date] = None) -> InstallmentRunResultDTO:
        """
        Run one processing pass

        Args:
            as_of: Business date (defaults to today)

        Returns:
            InstallmentRunResultDTO with counts per outcome
        """
        start_time = time.time()
        today = as_of or date.today()

        if not ApplicationConfig.INSTALLMENT_PROCESSING_ENABLED:
            logger.info("Installment processing is disabled, skipping")
            return InstallmentRunResultDTO(run_date=today)

        result = InstallmentRunResultDTO(run_date=today)
        await self._reconcile_unsettled(today, result)
        result.marked_overdue = await self._mark_overdue(today)

        async with self.async_session_factory() as session:
            due = await SqlAlchemyInstallmentRepository(session).list_processable(
                today, limit=self.batch_size
            )
            installment_ids = [installment.id for installment in due]

        logger.info(f"Found {len(installment_ids)} installments to charge for {today}")

        for installment_id in installment_ids:
            try:
                outcome = await self._process_one(installment_id, today)
            except Exception as e:
                logger.error(f"Unexpected error processing installment {installment_id}: {e}")
                result.errors += 1
                continue

            if outcome.is_err():
                logger.error(
                    f"Installment {installment_id} not processed: "
                    f"{outcome.error.code} {outcome.error.message}"
                )
                result.errors += 1
                continue

            result.processed += 1
            if outcome.value.outcome == "paid":
                result.paid += 1
            elif outcome.value.outcome == "failed":
                result.failed += 1
            elif outcome.value.outcome == "processing":
                result.pending += 1
            else:
                result.skipped += 1

        result.execution_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            f"Installment run complete: {result.paid} paid, {result.failed} failed, "
            f"{result.pending} pending, {result.errors} errors, "
            f"{result.reconciled} reconciled, {result.released} released, "
            f"{result.marked_overdue} marked overdue, {result.execution_time_ms}ms"
        )

        return result

    async def run_forever(self, interval_seconds: Optional[int] = None):
        """
        Run processing continuously at the configured interval

        Args:
            interval_seconds: Seconds between runs (default: INSTALLMENT_PROCESSING_INTERVAL_SECONDS)
        """
        interval = interval_seconds or ApplicationConfig.INSTALLMENT_PROCESSING_INTERVAL_SECONDS
        logger.info(f"Starting continuous installment processing with {interval}s interval")

        while True:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Installment processing cycle failed: {e}")

            await asyncio.sleep(interval)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("InstallmentProcessorWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once for today
        python -m src.worker.installment_processor --once

        # Run once for a given business date
        python -m src.worker.installment_processor --once --date 2024-03-01

        # Run continuously
        python -m src.worker.installment_processor --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Installment Processing Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument("--date", type=date.fromisoformat, help="Business date (YYYY-MM-DD)")
    parser.add_argument(
        "--interval", type=int, default=None,
        help="Interval between runs in seconds"
    )
    args = parser.parse_args()

    worker = InstallmentProcessorWorker()

    try:
        if args.once:
            result = await worker.run_once(as_of=args.date)
            print("Installment run complete:")
            print(f"  Marked overdue: {result.marked_overdue}")
            print(f"  Paid: {result.paid}")
            print(f"  Failed: {result.failed}")
            print(f"  Pending at processor: {result.pending}")
            print(f"  Reconciled: {result.reconciled}")
            print(f"  Released claims: {result.released}")
            print(f"  Errors: {result.errors}")
            print(f"  Execution time: {result.execution_time_ms}ms")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
