import math
from datetime import date

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import HTMLResponse

from core.dependencies import (
    PaginationParams, get_print_service, get_report_service, get_session_context
)
from core.security import SessionContext
from exporters.excel_report import generate_excel
from exporters.pdf_report import generate_pdf
from renderers.print_document import render_daily_summary, render_order_receipt
from renderers.summary_grid import render_summary_grid
from schemas.report import (
    DailyReport, ExportFormat, OrderListItem, OrderPage, PrintJobResponse, SummaryGrid
)
from services.print_service import PrintService
from services.report_service import ReportService, find_order
from utils.date_utils import format_time

router = APIRouter()


@router.get("/daily/{report_date}", response_model=DailyReport)
def get_daily_report(
    report_date: date,
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    """Daily report view model: server totals, derived totals and the day's orders"""
    return service.get_daily_report(ctx, report_date)


@router.get("/daily/{report_date}/summary", response_model=SummaryGrid)
def get_daily_summary(
    report_date: date,
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    """On-screen summary grid"""
    return render_summary_grid(service.get_daily_report(ctx, report_date))


@router.get("/daily/{report_date}/orders", response_model=OrderPage)
def get_daily_orders(
    report_date: date,
    pagination: PaginationParams = Depends(),
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    """The day's orders, one page at a time"""
    report = service.get_daily_report(ctx, report_date)
    start = (pagination.page - 1) * pagination.limit
    rows = [
        OrderListItem(
            index=index,
            invoice_serial=order.invoice_serial,
            time=format_time(order.date_time),
            order_type=order.order_type,
            table_or_provider=order.table_or_provider,
            total_qty=order.total_qty,
            payment_method=order.payment_method,
            total_amount=order.total_amount,
        )
        for index, order in enumerate(report.orders, start=1)
    ]
    total = len(rows)
    return OrderPage(
        data=rows[start:start + pagination.limit],
        page=pagination.page,
        limit=pagination.limit,
        total=total,
        total_pages=max(1, math.ceil(total / pagination.limit)),
    )


@router.get("/daily/{report_date}/print", response_class=HTMLResponse)
def preview_daily_summary(
    report_date: date,
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    """72mm daily summary document, for preview"""
    document = render_daily_summary(service.get_daily_report(ctx, report_date))
    return HTMLResponse(content=document.html)


@router.post("/daily/{report_date}/print", response_model=PrintJobResponse)
def print_daily_summary(
    report_date: date,
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service),
    printer: PrintService = Depends(get_print_service)
):
    """Send the daily summary to the receipt printer"""
    document = render_daily_summary(service.get_daily_report(ctx, report_date))
    job = printer.print_document(document)
    return PrintJobResponse(job_id=job.job_id, document=job.document, submitted_at=job.submitted_at)


@router.get("/daily/{report_date}/export")
def export_daily_report(
    report_date: date,
    format: ExportFormat = Query(ExportFormat.XLSX),
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    """Download the report as a spreadsheet or PDF"""
    report = service.get_daily_report(ctx, report_date)
    export = generate_excel(report) if format == ExportFormat.XLSX else generate_pdf(report)
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": export.content_disposition}
    )


@router.get("/daily/{report_date}/orders/{invoice_serial}/receipt", response_class=HTMLResponse)
def preview_order_receipt(
    report_date: date,
    invoice_serial: str,
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service)
):
    """80mm receipt for one invoice, for preview"""
    report = service.get_daily_report(ctx, report_date)
    document = render_order_receipt(find_order(report, invoice_serial), report.company)
    return HTMLResponse(content=document.html)


@router.post("/daily/{report_date}/orders/{invoice_serial}/receipt", response_model=PrintJobResponse)
def print_order_receipt(
    report_date: date,
    invoice_serial: str,
    ctx: SessionContext = Depends(get_session_context),
    service: ReportService = Depends(get_report_service),
    printer: PrintService = Depends(get_print_service)
):
    """Reprint one invoice's receipt"""
    report = service.get_daily_report(ctx, report_date)
    document = render_order_receipt(find_order(report, invoice_serial), report.company)
    job = printer.print_document(document)
    return PrintJobResponse(job_id=job.job_id, document=job.document, submitted_at=job.submitted_at)
