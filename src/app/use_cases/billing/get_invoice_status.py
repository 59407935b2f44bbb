"""Invoice Status Use Cases

Derives how much of an invoice has actually been collected, and renders the
invoice as PDF.
"""

import base64
import logging
from datetime import date
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentApplicationRepository
from src.app.services.pdf_service import PdfService
from src.domain.invoice import Invoice
from src.domain.money import ZERO, to_money
from .dtos import InvoiceStatusDTO, InvoicePdfDTO
from .ledger_rules import compute_invoice_status

logger = logging.getLogger(__name__)


async def _status_for(
    invoice: Invoice,
    application_repo: PaymentApplicationRepository,
    today: date,
) -> InvoiceStatusDTO:
    paid = ZERO
    if invoice.rental_id:
        paid = await application_repo.sum_collected_for_rental(invoice.rental_id)

    total = to_money(invoice.total_amount)
    return InvoiceStatusDTO(
        invoice_id=invoice.id,
        invoice_number=invoice.invoice_number,
        total_amount=total,
        paid_amount=paid,
        balance_due=max(total - paid, ZERO),
        computed_status=compute_invoice_status(total, paid, invoice.due_date, today),
        due_date=invoice.due_date,
    )


class GetInvoiceStatus:
    """
    Use Case: Compute paid amount and status of an invoice

    Business Rules:
    1. Paid amount sums allocations made to the invoice's rental charges
    2. Allocations from payments still awaiting capture are NOT paid
    3. paid >= total -> paid; paid > 0 -> partial;
       unpaid and past due -> overdue; otherwise pending
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        application_repo: PaymentApplicationRepository,
    ):
        self.invoice_repo = invoice_repo
        self.application_repo = application_repo

    async def execute(self, invoice_id: str, as_of: Optional[date] = None) -> Result[InvoiceStatusDTO]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            return Return.err(
                Error(code="INVOICE_NOT_FOUND", message=f"Invoice {invoice_id} not found")
            )

        status = await _status_for(invoice, self.application_repo, as_of or date.today())
        return Return.ok(status)


class GenerateInvoicePdf:
    """
    Use Case: Render a rental invoice as PDF

    Flow:
    1. Load invoice
    2. Compute paid amount and status
    3. Render PDF, return base64
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        application_repo: PaymentApplicationRepository,
        pdf_service: PdfService,
        company_name: str,
        company_address: str,
    ):
        self.invoice_repo = invoice_repo
        self.application_repo = application_repo
        self.pdf_service = pdf_service
        self.company_name = company_name
        self.company_address = company_address

    async def execute(self, invoice_id: str) -> Result[InvoicePdfDTO]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            return Return.err(
                Error(code="INVOICE_NOT_FOUND", message=f"Invoice {invoice_id} not found")
            )

        try:
            status = await _status_for(invoice, self.application_repo, date.today())
            pdf_bytes = self.pdf_service.generate_rental_invoice(
                invoice=invoice,
                paid_amount=status.paid_amount,
                status=status.computed_status,
                company_name=self.company_name,
                company_address=self.company_address,
            )
        except Exception as e:
            logger.error(f"Failed to render invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code="PDF_GENERATION_FAILED",
                    message="Failed to generate invoice PDF",
                    reason=str(e),
                )
            )

        return Return.ok(
            InvoicePdfDTO(
                invoice_id=invoice.id,
                invoice_number=invoice.invoice_number,
                pdf_base64=base64.b64encode(pdf_bytes).decode("utf-8"),
            )
        )
