"""Yooz -> ERP invoice import run.

One run:

1. Download new invoice CSVs from SFTP (unless skipped)
2. Ensure today's invoice group exists
3. For each file: parse, group lines by invoice number, import each invoice
4. Unlock the invoice group, whatever happened in step 3

Failure boundaries: a file that does not parse is skipped; an invoice that
fails to import is logged and its siblings carry on. A file with any failed
invoice is moved to ARCHIVE_DIRECTORY for review when one is configured.
"""

import logging
import shutil
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from config import Settings
from domain.errors import InvoiceFileError
from domain.invoices import InvoiceImportWorkflow, group_invoices
from infrastructure.readers import InvoiceCSVReader
from infrastructure.sftp import SFTPClient
from observability.metrics import invoice_files_processed_total, invoices_imported_total
from .export_run import sftp_config_from_settings

logger = logging.getLogger(__name__)

INVOICE_FILE_EXTENSION = ".csv"


def list_invoice_files(directory: Path) -> List[Path]:
    """Non-hidden invoice files in a directory, sorted by name."""
    if not directory.exists():
        return []
    return sorted(
        path for path in directory.iterdir()
        if path.is_file() and not path.name.startswith(".") and path.suffix == INVOICE_FILE_EXTENSION
    )


def archive_file(path: Path, archive_dir: Path) -> Path:
    """Move a file into the archive directory, keeping its name."""
    logger.info(f"Archiving failed file: {path}")
    archive_dir.mkdir(parents=True, exist_ok=True)
    destination = archive_dir / path.name
    shutil.move(str(path), str(destination))
    return destination


def delete_file(path: Path) -> None:
    logger.info(f"Deleting processed file: {path}")
    path.unlink(missing_ok=True)


class ImportRunner:
    """Downloads and imports Yooz invoice files.

    Example:
        with EpicorRestClient.from_settings(settings) as client:
            adapter = EpicorAPInvoiceAdapter(client, settings.EPICOR_COMPANY)
            workflow = InvoiceImportWorkflow(adapter, settings.GL_ACCOUNT_SEPARATOR)
            result = ImportRunner(settings, workflow).run()
    """

    def __init__(
        self,
        settings: Settings,
        workflow: InvoiceImportWorkflow,
        sftp_factory: Optional[Callable[[], SFTPClient]] = None,
        reader: Optional[InvoiceCSVReader] = None,
        today: Callable[[], date] = date.today,
    ):
        self.settings = settings
        self.workflow = workflow
        self.sftp_factory = sftp_factory or (lambda: SFTPClient(sftp_config_from_settings(settings)))
        self.reader = reader or InvoiceCSVReader()
        self._today = today

    def download(self) -> List[Path]:
        """Pull new invoice files into IMPORT_DIRECTORY."""
        settings = self.settings
        with self.sftp_factory() as sftp:
            return sftp.download_files(
                settings.SFTP_PATH_INVOICES,
                settings.IMPORT_DIRECTORY,
                extension=INVOICE_FILE_EXTENSION,
                delete_after=settings.DELETE_SFTP_FILES_AFTER_DOWNLOAD,
            )

    def set_aside(self, path: Path) -> Optional[Path]:
        """Move a failed file to ARCHIVE_DIRECTORY, or leave it in place.

        An archive failure is logged and the file stays in IMPORT_DIRECTORY;
        it never stops the remaining files.

        Returns:
            Archived path, or None when the file was left in place
        """
        archive_dir = self.settings.ARCHIVE_DIRECTORY
        if archive_dir is None:
            logger.warning(f"Keeping {path} for review: no archive directory is set")
            return None
        try:
            return archive_file(path, archive_dir)
        except OSError as e:
            logger.error(f"Failed to archive {path}, keeping it for review. Error: {e}", exc_info=True)
            return None

    def process_file(self, path: Path, group_id: str) -> Dict[str, Any]:
        """Import every invoice in one file.

        Returns:
            Dict with file result:
                - file: file name
                - status: 'success', 'partial' (some invoices failed) or 'error' (file unreadable)
                - imported: invoice numbers imported
                - failed: invoice numbers that failed
        """
        settings = self.settings
        try:
            lines = self.reader.read(path)
        except InvoiceFileError as e:
            logger.error(f"Failed to process {path}. Error: {e}", exc_info=True)
            invoice_files_processed_total.labels(status="error").inc()
            self.set_aside(path)
            return {"file": path.name, "status": "error", "imported": [], "failed": []}

        invoices = group_invoices(lines)
        logger.info(
            f"File contains {len(invoices)} invoices: {', '.join(inv.invoice_num for inv in invoices)}"
        )

        imported: List[str] = []
        failed: List[str] = []
        for invoice in invoices:
            try:
                self.workflow.import_invoice(invoice, group_id)
            except Exception as e:
                logger.error(
                    f"Failed to process invoice '{invoice.invoice_num}'. Error: {e}",
                    exc_info=True,
                    extra={"invoice_num": invoice.invoice_num, "file_name": path.name},
                )
                invoices_imported_total.labels(status="error").inc()
                failed.append(invoice.invoice_num)
            else:
                invoices_imported_total.labels(status="success").inc()
                imported.append(invoice.invoice_num)

        if failed:
            status = "partial"
            self.set_aside(path)
        else:
            status = "success"
            if settings.DELETE_TEMP_FILES_AFTER_PROCESSING:
                delete_file(path)

        invoice_files_processed_total.labels(status=status).inc()
        return {"file": path.name, "status": status, "imported": imported, "failed": failed}

    def run(self, skip_download: Optional[bool] = None) -> Dict[str, Any]:
        """Execute a full import run.

        Args:
            skip_download: Override SKIP_DOWNLOADING_NEW_FILES

        Returns:
            Dict with run result:
                - status: 'success' or 'partial'
                - group_id: invoice group used
                - files: per-file results (see process_file)
        """
        settings = self.settings
        skip_download = settings.SKIP_DOWNLOADING_NEW_FILES if skip_download is None else skip_download
        logger.info(f"Import directory: {settings.IMPORT_DIRECTORY}")

        if skip_download:
            logger.info("Skipping download of Yooz files. (SKIP_DOWNLOADING_NEW_FILES)")
        else:
            logger.info("Downloading Yooz files.")
            self.download()

        files = list_invoice_files(settings.IMPORT_DIRECTORY)
        logger.info(f"Processing {len(files)} files.")

        group_id = settings.invoice_group_id(self._today())
        self.workflow.ensure_group(group_id)

        results = []
        try:
            for path in files:
                results.append(self.process_file(path, group_id))
        finally:
            # Never leave the group locked for ERP users
            self.workflow.unlock_group(group_id)

        ok = all(result["status"] == "success" for result in results)
        logger.info("Finished.")
        return {"status": "success" if ok else "partial", "group_id": group_id, "files": results}
