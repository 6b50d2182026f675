from dataclasses import dataclass
from datetime import date

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    media_type: str

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def report_filename(report_date: date, extension: str) -> str:
    """SalesReport_2026-10-19.xlsx"""
    return f"SalesReport_{report_date.isoformat()}.{extension}"
