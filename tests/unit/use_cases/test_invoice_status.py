"""Unit tests for invoice status and PDF use cases

Tests cover:
- Paid amount comes from collected allocations on the invoice's rental
- Computed status (paid, partial, overdue, pending)
- PDF rendering returns base64 and maps renderer failures
"""

import base64
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.billing.get_invoice_status import GetInvoiceStatus, GenerateInvoicePdf
from src.domain.invoice import Invoice, InvoiceStatus


@pytest.fixture
def sample_invoice():
    """Invoice of 1,200.00 for rental_1 due 2024-03-01"""
    return Invoice(
        id="inv_1",
        tenant_id="tenant_1",
        rental_id="rental_1",
        customer_id="cust_1",
        invoice_number="INV-2024-000123",
        invoice_date=date(2024, 2, 15),
        due_date=date(2024, 3, 1),
        rental_fee=Decimal("1000.00"),
        tax_amount=Decimal("200.00"),
        total_amount=Decimal("1200.00"),
    )


@pytest.fixture
def mock_invoice_repo(sample_invoice):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=sample_invoice)
    return repo


@pytest.fixture
def mock_application_repo():
    repo = MagicMock()
    repo.sum_collected_for_rental = AsyncMock(return_value=Decimal("0.00"))
    return repo


@pytest.mark.asyncio
class TestGetInvoiceStatus:
    async def test_partial_payment(self, mock_invoice_repo, mock_application_repo):
        """
        Given: 400.00 collected against the rental
        When: Invoice status is computed
        Then: partial with 800.00 balance due
        """
        # Arrange
        mock_application_repo.sum_collected_for_rental = AsyncMock(return_value=Decimal("400.00"))
        use_case = GetInvoiceStatus(mock_invoice_repo, mock_application_repo)

        # Act
        result = await use_case.execute("inv_1", as_of=date(2024, 3, 10))

        # Assert
        assert result.is_ok()
        status = result.value
        assert status.paid_amount == Decimal("400.00")
        assert status.balance_due == Decimal("800.00")
        assert status.computed_status == InvoiceStatus.PARTIAL
        mock_application_repo.sum_collected_for_rental.assert_called_once_with("rental_1")

    async def test_paid_in_full(self, mock_invoice_repo, mock_application_repo):
        # Arrange
        mock_application_repo.sum_collected_for_rental = AsyncMock(return_value=Decimal("1200.00"))
        use_case = GetInvoiceStatus(mock_invoice_repo, mock_application_repo)

        # Act
        result = await use_case.execute("inv_1", as_of=date(2024, 3, 10))

        # Assert
        assert result.value.computed_status == InvoiceStatus.PAID
        assert result.value.balance_due == Decimal("0.00")

    async def test_unpaid_past_due_is_overdue(self, mock_invoice_repo, mock_application_repo):
        # Arrange
        use_case = GetInvoiceStatus(mock_invoice_repo, mock_application_repo)

        # Act
        result = await use_case.execute("inv_1", as_of=date(2024, 3, 10))

        # Assert
        assert result.value.computed_status == InvoiceStatus.OVERDUE

    async def test_unpaid_before_due_is_pending(self, mock_invoice_repo, mock_application_repo):
        # Arrange
        use_case = GetInvoiceStatus(mock_invoice_repo, mock_application_repo)

        # Act
        result = await use_case.execute("inv_1", as_of=date(2024, 2, 20))

        # Assert
        assert result.value.computed_status == InvoiceStatus.PENDING

    async def test_invoice_without_rental_has_nothing_paid(
        self, mock_invoice_repo, mock_application_repo, sample_invoice
    ):
        # Arrange
        sample_invoice.rental_id = None
        use_case = GetInvoiceStatus(mock_invoice_repo, mock_application_repo)

        # Act
        result = await use_case.execute("inv_1", as_of=date(2024, 2, 20))

        # Assert
        assert result.value.paid_amount == Decimal("0.00")
        mock_application_repo.sum_collected_for_rental.assert_not_called()

    async def test_invoice_not_found(self, mock_invoice_repo, mock_application_repo):
        # Arrange
        mock_invoice_repo.get_by_id = AsyncMock(return_value=None)
        use_case = GetInvoiceStatus(mock_invoice_repo, mock_application_repo)

        # Act
        result = await use_case.execute("missing")

        # Assert
        assert result.error.code == "INVOICE_NOT_FOUND"


@pytest.mark.asyncio
class TestGenerateInvoicePdf:
    async def test_returns_base64_pdf(self, mock_invoice_repo, mock_application_repo):
        """
        Given: A renderer producing PDF bytes
        When: The invoice PDF is generated
        Then: Bytes are returned base64-encoded with the invoice number
        """
        # Arrange
        pdf_service = MagicMock()
        pdf_service.generate_rental_invoice.return_value = b"%PDF-1.4 test"
        use_case = GenerateInvoicePdf(
            mock_invoice_repo, mock_application_repo, pdf_service,
            company_name="Acme Rentals", company_address="1 Fleet Street",
        )

        # Act
        result = await use_case.execute("inv_1")

        # Assert
        assert result.is_ok()
        assert result.value.invoice_number == "INV-2024-000123"
        assert base64.b64decode(result.value.pdf_base64) == b"%PDF-1.4 test"
        kwargs = pdf_service.generate_rental_invoice.call_args.kwargs
        assert kwargs["company_name"] == "Acme Rentals"
        assert kwargs["paid_amount"] == Decimal("0.00")

    async def test_renderer_failure(self, mock_invoice_repo, mock_application_repo):
        # Arrange
        pdf_service = MagicMock()
        pdf_service.generate_rental_invoice.side_effect = RuntimeError("font missing")
        use_case = GenerateInvoicePdf(
            mock_invoice_repo, mock_application_repo, pdf_service,
            company_name="Acme Rentals", company_address="",
        )

        # Act
        result = await use_case.execute("inv_1")

        # Assert
        assert result.error.code == "PDF_GENERATION_FAILED"
        assert result.error.reason == "font missing"
