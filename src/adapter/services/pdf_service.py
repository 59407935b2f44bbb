"""ReportLab PDF Generation Service Implementation

Renders rental invoices with ReportLab.
"""

from io import BytesIO
from decimal import Decimal

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)

from src.app.services.pdf_service import PdfService
from src.domain.invoice import Invoice, InvoiceStatus

STATUS_COLORS = {
    InvoiceStatus.PAID: "#27AE60",
    InvoiceStatus.PARTIAL: "#F39C12",
    InvoiceStatus.PENDING: "#7F8C8D",
    InvoiceStatus.OVERDUE: "#E74C3C",
}


class ReportLabPdfService(PdfService):
    """
    ReportLab implementation of PdfService

    One page: company header, invoice details, the price breakdown, and a
    totals block with paid and balance due.
    """

    def generate_rental_invoice(
        self,
        invoice: Invoice,
        paid_amount: Decimal,
        status: InvoiceStatus,
        company_name: str = "Drive247",
        company_address: str = "",
    ) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=20 * mm,
            leftMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=f"Invoice {invoice.invoice_number}",
        )

        styles = getSampleStyleSheet()
        elements = []
        currency = invoice.currency

        title_style = ParagraphStyle(
            "TitleStyle",
            parent=styles["Heading1"],
            fontSize=24,
            spaceAfter=10,
            textColor=colors.HexColor("#2C3E50"),
        )
        status_style = ParagraphStyle(
            "StatusStyle",
            parent=styles["Heading2"],
            fontSize=14,
            textColor=colors.HexColor(STATUS_COLORS.get(status, "#7F8C8D")),
            spaceAfter=20,
        )
        header_style = ParagraphStyle(
            "HeaderStyle",
            parent=styles["Normal"],
            fontSize=10,
            textColor=colors.HexColor("#7F8C8D"),
        )

        elements.append(Paragraph(company_name, title_style))
        if company_address:
            elements.append(Paragraph(company_address, header_style))
        elements.append(Spacer(1, 10 * mm))
        elements.append(Paragraph(f"INVOICE - {status.value.upper()}", status_style))

        details = [
            ["Invoice Number:", invoice.invoice_number],
            ["Invoice Date:", invoice.invoice_date.strftime("%Y-%m-%d")],
        ]
        if invoice.due_date:
            details.append(["Due Date:", invoice.due_date.strftime("%Y-%m-%d")])
        if invoice.rental_id:
            details.append(["Booking:", f"RNT-{invoice.rental_id[:8].upper()}"])
        details.append(["Currency:", currency])

        details_table = Table(details, colWidths=[40 * mm, 100 * mm])
        details_table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("TEXTCOLOR", (0, 0), (0, -1), colors.HexColor("#7F8C8D")),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        elements.append(details_table)
        elements.append(Spacer(1, 10 * mm))

        lines = [["Description", "Amount"]]
        for label, amount in invoice.breakdown():
            lines.append([label, f"{currency} {amount:,.2f}"])
        if len(lines) == 1:
            lines.append(["Rental charges", f"{currency} {invoice.total_amount:,.2f}"])

        line_table = Table(lines, colWidths=[120 * mm, 50 * mm])
        line_table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2C3E50")),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, 0), 10),
                    ("FONTSIZE", (0, 1), (-1, -1), 9),
                    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#BDC3C7")),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                    ("TOPPADDING", (0, 0), (-1, -1), 6),
                    (
                        "ROWBACKGROUNDS",
                        (0, 1),
                        (-1, -1),
                        [colors.white, colors.HexColor("#F8F9F9")],
                    ),
                ]
            )
        )
        elements.append(line_table)
        elements.append(Spacer(1, 5 * mm))

        balance = max(invoice.total_amount - paid_amount, Decimal("0"))
        totals = [
            ["Total:", f"{currency} {invoice.total_amount:,.2f}"],
            ["Paid:", f"{currency} {paid_amount:,.2f}"],
            ["Balance Due:", f"{currency} {balance:,.2f}"],
        ]
        totals_table = Table(totals, colWidths=[120 * mm, 50 * mm])
        totals_table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 11),
                    ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                    ("LINEABOVE", (0, 0), (-1, 0), 1.5, colors.HexColor("#2C3E50")),
                    ("TOPPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        elements.append(totals_table)

        doc.build(elements)
        pdf_bytes = buffer.getvalue()
        buffer.close()

        return pdf_bytes
