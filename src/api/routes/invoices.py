"""Invoice API Routes

FastAPI routes for invoice payment status and PDF rendering.
"""

import base64

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.dependencies.auth import Principal, require_operator
from src.app.services.pdf_service import PdfService
from src.app.use_cases.billing.dtos import InvoiceStatusDTO
from src.app.use_cases.billing.get_invoice_status import GetInvoiceStatus, GenerateInvoicePdf
from src.adapter.repositories import (
    SqlAlchemyInvoiceRepository,
    SqlAlchemyPaymentApplicationRepository,
)
from src.depends import get_session, get_pdf_service
from src.api.error import ClientError

router = APIRouter(prefix="/billing/invoices", tags=["Invoices"])

INVOICE_NOT_FOUND_RESPONSE = {
    "description": "Invoice not found",
    "content": {
        "application/json": {
            "example": {
                "error": {
                    "code": "INVOICE_NOT_FOUND",
                    "message": "Invoice 8e2d7c4b-1a3f-4b6e-9c0d-2f1e3a4b5c6d not found"
                }
            }
        }
    }
}


@router.get(
    "/{invoice_id}/status",
    response_model=InvoiceStatusDTO,
    status_code=status.HTTP_200_OK,
    responses={404: INVOICE_NOT_FOUND_RESPONSE},
)
async def get_invoice_status(
    invoice_id: str,
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    """
    Get the paid amount and derived status of an invoice.

    Paid amount counts only money allocated from collected payments; a
    pre-authorisation hold does not make an invoice paid.

    **Example response:**
    ```json
    {
      "invoice_id": "8e2d7c4b-1a3f-4b6e-9c0d-2f1e3a4b5c6d",
      "invoice_number": "INV-2024-0042",
      "total_amount": "450.00",
      "paid_amount": "200.00",
      "balance_due": "250.00",
      "computed_status": "partial",
      "due_date": "2024-03-01"
    }
    ```

    **Returns:**
    - 200: Status computed
    - 404: Invoice not found
    """
    use_case = GetInvoiceStatus(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentApplicationRepository(session),
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        if result.error.code == "INVOICE_NOT_FOUND":
            raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)
        raise ClientError(result.error)

    return result.value


@router.get(
    "/{invoice_id}/pdf",
    responses={
        200: {
            "content": {"application/pdf": {}},
            "description": "PDF document"
        },
        404: INVOICE_NOT_FOUND_RESPONSE,
    }
)
async def download_invoice_pdf(
    invoice_id: str,
    session: AsyncSession = Depends(get_session),
    pdf_service: PdfService = Depends(get_pdf_service),
    principal: Principal = Depends(require_operator),
):
    """
    Download a rental invoice as PDF.

    The document shows the price breakdown, paid amount, balance due and
    the computed status.

    **Returns:**
    - 200: PDF file (application/pdf)
    - 404: Invoice not found
    """
    use_case = GenerateInvoicePdf(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentApplicationRepository(session),
        pdf_service,
        company_name=ApplicationConfig.COMPANY_NAME,
        company_address=ApplicationConfig.COMPANY_ADDRESS,
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    pdf_bytes = base64.b64decode(result.value.pdf_base64)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{result.value.invoice_number}.pdf"'
        },
    )
