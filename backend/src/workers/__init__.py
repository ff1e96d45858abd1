"""Run orchestration for the two bridge directions.

- export_run: ERP BAQs -> Yooz flat files -> SFTP
- import_run: SFTP -> Yooz invoice CSVs -> ERP AP invoices
"""

from .export_run import ExportJob, ExportRunner, build_export_jobs, clear_directory
from .import_run import ImportRunner, archive_file, list_invoice_files

__all__ = [
    "ExportJob",
    "ExportRunner",
    "ImportRunner",
    "archive_file",
    "build_export_jobs",
    "clear_directory",
    "list_invoice_files",
]
