"""Unit tests for AllocationReconcilerWorker

Tests cover:
- Worker initialization with configuration
- run_once execution with reconciliation
- Reconciliation disabled scenario
- Failures raised to the caller
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from libs.result import Error, Return
from src.app.use_cases.billing.dtos import AllocationDiscrepancyDTO, ReconciliationResultDTO
from src.worker.allocation_reconciler import AllocationReconcilerWorker


@pytest.fixture
def mock_session_factory():
    """sessionmaker() result yielding a mock async session"""
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=session)


@pytest.fixture
def sample_discrepancy_result():
    """Reconciliation result with one drifted charge"""
    return ReconciliationResultDTO(
        charges_checked=12,
        payments_checked=5,
        discrepancies_found=1,
        discrepancies=[
            AllocationDiscrepancyDTO(
                entity_type="charge",
                entity_id="charge_1",
                expected_applied=Decimal("300.00"),
                recorded_applied=Decimal("250.00"),
                discrepancy=Decimal("50.00"),
            )
        ],
        reconciliation_time=datetime.now(timezone.utc),
        execution_time_ms=40,
    )


class TestAllocationReconcilerWorkerInit:
    @patch("src.worker.allocation_reconciler.ApplicationConfig")
    @patch("src.worker.allocation_reconciler.create_async_engine")
    def test_initializes_with_default_config(self, mock_create_engine, mock_app_config):
        # Arrange
        mock_app_config.DB_URI = "postgresql+asyncpg://default@localhost/db"
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = AllocationReconcilerWorker()

        # Assert
        assert worker.db_uri == "postgresql+asyncpg://default@localhost/db"
        mock_create_engine.assert_called_once()

    @patch("src.worker.allocation_reconciler.ApplicationConfig")
    @patch("src.worker.allocation_reconciler.create_async_engine")
    def test_initializes_with_custom_db_uri(self, mock_create_engine, mock_app_config):
        mock_create_engine.return_value = MagicMock()

        worker = AllocationReconcilerWorker(db_uri="sqlite+aiosqlite:///custom.db")

        assert worker.db_uri == "sqlite+aiosqlite:///custom.db"


@pytest.mark.asyncio
class TestAllocationReconcilerWorkerRunOnce:
    @patch("src.worker.allocation_reconciler.ApplicationConfig")
    @patch("src.worker.allocation_reconciler.ReconcileAllocations")
    @patch("src.worker.allocation_reconciler.SqlAlchemyLedgerRepository")
    @patch("src.worker.allocation_reconciler.SqlAlchemyPaymentRepository")
    @patch("src.worker.allocation_reconciler.SqlAlchemyPaymentApplicationRepository")
    @patch("src.worker.allocation_reconciler.create_async_engine")
    @patch("src.worker.allocation_reconciler.sessionmaker")
    async def test_run_once_returns_discrepancies(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_application_repo_class,
        mock_payment_repo_class,
        mock_ledger_repo_class,
        mock_use_case_class,
        mock_app_config,
        mock_session_factory,
        sample_discrepancy_result,
    ):
        """
        Given: Reconciliation is enabled and a charge has drifted
        When: run_once is called for one tenant
        Then: The use case result is returned unchanged
        """
        # Arrange
        mock_app_config.RECONCILIATION_ENABLED = True
        mock_sessionmaker.return_value = mock_session_factory
        mock_create_engine.return_value = MagicMock()
        mock_use_case_class.return_value.execute = AsyncMock(return_value=Return.ok(sample_discrepancy_result))

        # Act
        result = await AllocationReconcilerWorker().run_once(tenant_id="tenant_1")

        # Assert
        assert result.discrepancies_found == 1
        assert result.discrepancies[0].entity_id == "charge_1"
        mock_use_case_class.return_value.execute.assert_called_once_with("tenant_1")

    @patch("src.worker.allocation_reconciler.ApplicationConfig")
    @patch("src.worker.allocation_reconciler.ReconcileAllocations")
    @patch("src.worker.allocation_reconciler.create_async_engine")
    async def test_run_once_skips_when_disabled(self, mock_create_engine, mock_use_case_class, mock_app_config):
        # Arrange
        mock_app_config.RECONCILIATION_ENABLED = False
        mock_create_engine.return_value = MagicMock()

        # Act
        result = await AllocationReconcilerWorker().run_once()

        # Assert
        assert result.charges_checked == 0
        assert result.discrepancies == []
        mock_use_case_class.assert_not_called()

    @patch("src.worker.allocation_reconciler.ApplicationConfig")
    @patch("src.worker.allocation_reconciler.ReconcileAllocations")
    @patch("src.worker.allocation_reconciler.create_async_engine")
    @patch("src.worker.allocation_reconciler.sessionmaker")
    async def test_run_once_raises_on_failure(
        self, mock_sessionmaker, mock_create_engine, mock_use_case_class, mock_app_config, mock_session_factory
    ):
        # Arrange
        mock_app_config.RECONCILIATION_ENABLED = True
        mock_sessionmaker.return_value = mock_session_factory
        mock_create_engine.return_value = MagicMock()
        mock_use_case_class.return_value.execute = AsyncMock(
            return_value=Return.err(Error(code="RECONCILIATION_FAILED", message="query timeout"))
        )

        # Act / Assert
        with pytest.raises(RuntimeError, match="query timeout"):
            await AllocationReconcilerWorker().run_once()
