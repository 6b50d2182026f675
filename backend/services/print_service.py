"""
Print flow: a rendered document is submitted to a print backend.

Failures are raised to the caller as PrintServiceError; a job is never
silently dropped.
"""
import os
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from config.logging import get_logger
from core.exceptions import PrintServiceError
from renderers.print_document import PrintDocument
from utils.date_utils import now_local

logger = get_logger(__name__)


@dataclass(frozen=True)
class PrintJob:
    job_id: str
    document: str
    submitted_at: datetime
    location: str = ""


class PrintBackend(ABC):
    """Where print jobs go."""

    @abstractmethod
    def submit(self, document: PrintDocument) -> PrintJob:
        ...

    def cleanup(self, now: float = None) -> int:
        """Remove expired jobs; nothing to remove by default."""
        return 0


class NullPrintBackend(PrintBackend):
    """Used when printing is disabled; every job is rejected."""

    def submit(self, document: PrintDocument) -> PrintJob:
        raise PrintServiceError("printing is disabled")


class SpoolPrintBackend(PrintBackend):
    """Writes each job as an HTML file into a spool directory picked up by the print agent.

    Spooled files older than ttl_seconds are removed at startup and on each submission.
    """

    def __init__(self, directory: str, ttl_seconds: int = 300):
        self.directory = Path(directory)
        self.ttl_seconds = ttl_seconds

    def _prepare(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create print spool {self.directory}: {e}")
            raise PrintServiceError("print spool is unavailable") from e
        if not os.access(self.directory, os.W_OK):
            raise PrintServiceError("print spool is not writable")

    def cleanup(self, now: float = None) -> int:
        """Remove expired spool files, returning how many were removed."""
        now = now if now is not None else time.time()
        removed = 0
        if not self.directory.is_dir():
            return removed
        for path in self.directory.glob("*.html"):
            try:
                if now - path.stat().st_mtime > self.ttl_seconds:
                    path.unlink()
                    removed += 1
            except FileNotFoundError:
                continue
        if removed:
            logger.debug(f"Removed {removed} expired print jobs from {self.directory}")
        return removed

    def submit(self, document: PrintDocument) -> PrintJob:
        self._prepare()
        self.cleanup()

        job_id = uuid.uuid4().hex
        path = self.directory / f"{job_id}_{document.name}.html"
        try:
            path.write_text(document.html, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to spool print job {job_id}: {e}")
            raise PrintServiceError("could not write print job") from e

        return PrintJob(job_id=job_id, document=document.name, submitted_at=now_local(), location=str(path))


class PrintService:
    """Submits rendered documents to the configured backend."""

    def __init__(self, backend: PrintBackend):
        self.backend = backend

    def print_document(self, document: PrintDocument) -> PrintJob:
        if not document.html:
            raise PrintServiceError("document is empty")
        job = self.backend.submit(document)
        logger.info(f"Print job {job.job_id} submitted for {document.name}")
        return job
