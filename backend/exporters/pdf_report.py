"""
PDF export of the daily report, built with reportlab platypus.

Layout: centred header, a four-column summary grid, a striped order table
and a "Page i of n" / generation-time footer on every page.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from config.settings import get_settings
from config.logging import get_logger
from exporters.base import ExportFile, PDF_MEDIA_TYPE, report_filename
from schemas.report import DailyReport
from utils.date_utils import format_receipt_datetime, format_report_date, format_time, now_local
from utils.formatting import format_amount

logger = get_logger(__name__)
settings = get_settings()

HEADER_BLUE = colors.Color(37 / 255, 99 / 255, 235 / 255)
STRIPE_GREY = colors.Color(245 / 255, 245 / 255, 245 / 255)

ORDER_TABLE_HEADER = ["#", "Time", "Invoice ID", "Type", "Items", "Payment", "Total"]

_FONT_FALLBACKS = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
)


@dataclass(frozen=True)
class PdfFonts:
    regular: str
    bold: str
    unicode: bool


_fonts: Optional[PdfFonts] = None


def resolve_font_path() -> Optional[str]:
    """Configured font first, then known system locations."""
    candidates = [settings.PDF_FONT_PATH] if settings.PDF_FONT_PATH else []
    candidates.extend(_FONT_FALLBACKS)
    for candidate in candidates:
        if candidate and Path(candidate).is_file():
            return candidate
    return None


def get_fonts() -> PdfFonts:
    """Register a Unicode TTF once; standard Helvetica when none is available."""
    global _fonts
    if _fonts is not None:
        return _fonts

    font_path = resolve_font_path()
    if font_path:
        try:
            pdfmetrics.registerFont(TTFont("ReportSans", font_path))
            bold_path = font_path.replace(".ttf", "-Bold.ttf")
            if bold_path != font_path and Path(bold_path).is_file():
                pdfmetrics.registerFont(TTFont("ReportSans-Bold", bold_path))
                _fonts = PdfFonts("ReportSans", "ReportSans-Bold", True)
            else:
                _fonts = PdfFonts("ReportSans", "ReportSans", True)
            return _fonts
        except Exception as e:
            logger.warning(f"Could not register PDF font {font_path}: {e}")

    logger.warning(
        "No Unicode font found for PDF exports; amounts are prefixed with 'Tk ' instead of "
        f"'{settings.CURRENCY_SYMBOL}'. Set PDF_FONT_PATH to a TTF with the currency glyph."
    )
    _fonts = PdfFonts("Helvetica", "Helvetica-Bold", False)
    return _fonts


def pdf_money(value: Decimal, fonts: PdfFonts, deduction: bool = False) -> str:
    symbol = settings.CURRENCY_SYMBOL if fonts.unicode else "Tk "
    text = f"{symbol}{format_amount(value)}"
    return f"- {text}" if deduction else text


class NumberedCanvas(canvas.Canvas):
    """Defers page output so every page can show the total page count."""

    def __init__(self, *args, generated_label: str = "", font_name: str = "Helvetica", **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self._generated_label = generated_label
        self._footer_font = font_name

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, page_count: int):
        width, _ = self._pagesize
        self.setFont(self._footer_font, 8)
        self.drawRightString(width - 14 * mm, 10 * mm, f"Page {self._pageNumber} of {page_count}")
        self.drawString(14 * mm, 10 * mm, f"Report Generated: {self._generated_label}")


def summary_table_rows(report: DailyReport, fonts: PdfFonts) -> List[List[str]]:
    summary, totals = report.summary, report.totals
    return [
        ["Net Sales", pdf_money(totals.net_sales, fonts),
         "Cash Collection", pdf_money(summary.cash_payments, fonts)],
        ["Gross Sales", pdf_money(totals.gross_sales, fonts),
         "Card Collection", pdf_money(summary.card_payments, fonts)],
        ["Total Discount", pdf_money(summary.total_discount, fonts, deduction=True),
         "Mobile Banking", pdf_money(summary.mobile_payments, fonts)],
        ["Total VAT", pdf_money(summary.total_vat, fonts),
         "Bank Collection", pdf_money(summary.bank_payments, fonts)],
        ["Total SD", pdf_money(summary.total_sd, fonts),
         "Total Guests", str(summary.total_guest_count)],
        ["Complimentary", pdf_money(summary.total_complimentary_amount, fonts),
         "Avg Per Person", pdf_money(totals.avg_per_person, fonts)],
    ]


def order_table_rows(report: DailyReport, fonts: PdfFonts) -> List[List[str]]:
    rows = [list(ORDER_TABLE_HEADER)]
    for index, order in enumerate(report.orders, start=1):
        rows.append([
            str(index),
            format_time(order.date_time),
            order.invoice_serial,
            order.order_type,
            str(order.total_qty),
            order.payment_method or "",
            pdf_money(order.total_amount, fonts),
        ])
    return rows


def _header(report: DailyReport, fonts: PdfFonts) -> list:
    styles = getSampleStyleSheet()
    title = ParagraphStyle(
        "ReportTitle", parent=styles["Title"], fontName=fonts.bold, fontSize=20,
        leading=24, alignment=TA_CENTER, spaceAfter=4
    )
    subtitle = ParagraphStyle(
        "ReportSubtitle", parent=styles["Normal"], fontName=fonts.regular, fontSize=12,
        leading=15, alignment=TA_CENTER
    )
    date_style = ParagraphStyle(
        "ReportDate", parent=subtitle, fontSize=10, leading=13
    )
    return [
        Paragraph(escape(report.company.name or ""), title),
        Paragraph("Daily Sales Summary", subtitle),
        Paragraph(escape(format_report_date(report.report_date)), date_style),
        Spacer(1, 8 * mm),
    ]


def _summary_table(report: DailyReport, fonts: PdfFonts) -> Table:
    table = Table(summary_table_rows(report, fonts), hAlign="CENTER")
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, -1), fonts.regular),
        ('FONTNAME', (0, 0), (0, -1), fonts.bold),
        ('FONTNAME', (2, 0), (2, -1), fonts.bold),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
        ('LEFTPADDING', (0, 0), (-1, -1), 5),
        ('RIGHTPADDING', (0, 0), (-1, -1), 5),
    ]))
    return table


def _order_table(report: DailyReport, fonts: PdfFonts) -> Table:
    table = Table(order_table_rows(report, fonts), repeatRows=1, hAlign="CENTER")
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), HEADER_BLUE),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), fonts.bold),
        ('FONTNAME', (0, 1), (-1, -1), fonts.regular),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, STRIPE_GREY]),
        ('ALIGN', (-1, 0), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    return table


def generate_pdf(report: DailyReport, generated_at: Optional[datetime] = None) -> ExportFile:
    """Build the PDF in memory."""
    fonts = get_fonts()
    generated_label = format_receipt_datetime(generated_at or now_local())

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=15 * mm,
        bottomMargin=20 * mm,
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        title=f"Daily Sales Summary {report.report_date.isoformat()}",
        author=report.company.name or "",
    )

    elements = _header(report, fonts)
    elements.append(_summary_table(report, fonts))
    elements.append(Spacer(1, 10 * mm))
    elements.append(_order_table(report, fonts))

    doc.build(
        elements,
        canvasmaker=lambda *args, **kwargs: NumberedCanvas(
            *args, generated_label=generated_label, font_name=fonts.regular, **kwargs
        ),
    )

    filename = report_filename(report.report_date, "pdf")
    logger.info(f"PDF report created: {filename} ({len(report.orders)} orders)")
    return ExportFile(filename=filename, content=buffer.getvalue(), media_type=PDF_MEDIA_TYPE)
