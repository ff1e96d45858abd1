"""Observability module for the Yooz bridge.

Provides structured logging with run correlation and Prometheus metrics.
"""

from .logging_config import JSONFormatter, RunIDFilter, configure_logging
from .metrics import (
    erp_call_duration_seconds,
    erp_calls_total,
    export_files_total,
    exported_records_total,
    invoice_files_processed_total,
    invoices_imported_total,
    write_metrics_textfile,
)
from .run_id import generate_run_id, get_run_id, run_id_var, set_run_id

__all__ = [
    # Logging
    "JSONFormatter",
    "RunIDFilter",
    "configure_logging",
    # Metrics
    "erp_call_duration_seconds",
    "erp_calls_total",
    "export_files_total",
    "exported_records_total",
    "invoice_files_processed_total",
    "invoices_imported_total",
    "write_metrics_textfile",
    # Run ID
    "run_id_var",
    "get_run_id",
    "set_run_id",
    "generate_run_id",
]
