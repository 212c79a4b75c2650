"""
PDF invoice generator.
Builds the invoice attached to intake emails and served at /invoices/<id>/pdf.
"""
import io
import logging
from xml.sax.saxutils import escape

from django.conf import settings
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Spacer,
    HRFlowable,
    Table,
    TableStyle,
)

from apps.orders.models import Order
from apps.orders.services.payment_plan import format_currency, format_percent

logger = logging.getLogger(__name__)

BRAND_COLOR = colors.HexColor("#0B3A91")
MUTED_COLOR = colors.HexColor("#777777")
BORDER_COLOR = colors.HexColor("#DDDDDD")


class InvoicePDFGenerator:
    """Generate PDF invoices for escrow orders"""

    @staticmethod
    def filename(order: Order) -> str:
        return f"{order.order_id}.pdf"

    @staticmethod
    def plan_label(order: Order) -> str:
        if order.payment_plan != Order.PLAN_DOWN:
            return "Full payment"
        if order.deposit_value is None:
            return "Down payment"
        if order.deposit_type == Order.DEPOSIT_PERCENT:
            return f"Down payment ({format_percent(order.deposit_value)})"
        return f"Down payment ({format_currency(order.deposit_value)})"

    @staticmethod
    def amount(value) -> str:
        """Currency text, or "-" when the amount is unknown."""
        return "-" if value is None else format_currency(value)

    @classmethod
    def package_label(cls, order: Order) -> str:
        if not order.package_name and order.package_price is None:
            return "-"
        if order.package_price is None:
            return order.package_name
        return f"{order.package_name or '-'} ({format_currency(order.package_price)})"

    @classmethod
    def generate(cls, order: Order) -> bytes:
        """
        Render the invoice for an order.

        Args:
            order: Order to invoice

        Returns:
            bytes: PDF content
        """
        brand = getattr(settings, 'ESCROW_BRAND_NAME', 'SecureEscrow')
        buffer = io.BytesIO()

        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=0.7 * inch,
            leftMargin=0.7 * inch,
            topMargin=0.7 * inch,
            bottomMargin=0.7 * inch,
            title=f"Invoice {order.order_id}",
        )

        styles = getSampleStyleSheet()

        brand_style = ParagraphStyle(
            "Brand",
            parent=styles["Heading1"],
            fontSize=20,
            textColor=BRAND_COLOR,
            spaceAfter=6,
        )
        heading_style = ParagraphStyle(
            "InvoiceHeading",
            parent=styles["Heading2"],
            fontSize=13,
            spaceBefore=14,
            spaceAfter=6,
        )
        body_style = ParagraphStyle(
            "InvoiceBody",
            parent=styles["Normal"],
            fontSize=10,
            leading=14,
        )
        footer_style = ParagraphStyle(
            "InvoiceFooter",
            parent=styles["Normal"],
            fontSize=9,
            textColor=MUTED_COLOR,
            alignment=TA_CENTER,
        )

        content = [
            Paragraph(escape(brand), brand_style),
            Paragraph("INVOICE", heading_style),
        ]

        meta_rows = [
            ["Invoice #:", order.order_id],
            ["Date:", order.created_at.strftime("%m/%d/%Y") if order.created_at else ""],
            ["Client:", order.full_name],
            ["Email:", order.email],
            ["Phone:", order.phone],
            ["Status:", order.get_status_display()],
        ]
        content.append(cls._table(meta_rows))

        content.append(Spacer(1, 10))
        content.append(HRFlowable(width="100%", color=BORDER_COLOR))

        content.append(Paragraph("Summary", heading_style))
        summary_rows = [
            ["Role:", order.get_role_display()],
            ["Platform:", order.source or "-"],
            ["Package:", cls.package_label(order)],
            ["Payment plan:", cls.plan_label(order)],
            ["Payment method:", order.payment_method or "-"],
        ]
        if order.notes:
            summary_rows.append(["Notes:", Paragraph(escape(order.notes), body_style)])
        content.append(cls._table(summary_rows))

        content.append(Paragraph("Item / Service", heading_style))
        content.append(Paragraph(escape(order.item_details.strip() or "-"), body_style))
        if order.delivery_notes:
            content.append(Spacer(1, 6))
            content.append(Paragraph(f"<b>Delivery:</b> {escape(order.delivery_notes)}", body_style))

        content.append(Paragraph("Totals", heading_style))
        totals_rows = [["Subtotal:", cls.amount(order.total_price)]]
        if order.calculated_deposit:
            totals_rows.append(["Down payment due now:", format_currency(order.calculated_deposit)])
        totals_rows.append(["Balance:", cls.amount(order.balance_due)])
        totals = cls._table(totals_rows)
        totals.setStyle(TableStyle([("BOX", (0, 0), (-1, -1), 1, BORDER_COLOR)]))
        content.append(totals)
        content.append(Spacer(1, 6))
        content.append(Paragraph(escape(order.plan_summary), body_style))

        content.append(Spacer(1, 30))
        content.append(
            Paragraph(
                f"Thank you for using {escape(brand)}. Funds are held securely until both sides confirm.",
                footer_style,
            )
        )

        doc.build(content)
        pdf = buffer.getvalue()
        buffer.close()

        logger.debug(f"Rendered invoice PDF for order {order.order_id} ({len(pdf)} bytes)")
        return pdf

    @staticmethod
    def _table(rows):
        table = Table(rows, colWidths=[1.8 * inch, 4.6 * inch])
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("FONTNAME", (1, 0), (1, -1), "Helvetica"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("TEXTCOLOR", (0, 0), (0, -1), colors.HexColor("#333333")),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        return table
