"""Prometheus metrics for the Yooz bridge.

Runs are short-lived batch jobs, so metrics are not scraped from a live
endpoint: write_metrics_textfile() dumps them for the node-exporter
textfile collector at the end of a run.
"""

import logging
from pathlib import Path
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, write_to_textfile

logger = logging.getLogger(__name__)

# Export metrics
exported_records_total = Counter(
    "yooz_bridge_exported_records_total",
    "Total records written to export files",
    ["export_type"]  # export_type: chart_of_accounts|vendors|pos|payments
)

export_files_total = Counter(
    "yooz_bridge_export_files_total",
    "Export files by outcome",
    ["export_type", "status"]  # status: written|uploaded|skipped
)

# Import metrics
invoices_imported_total = Counter(
    "yooz_bridge_invoices_imported_total",
    "Logical invoices imported into the ERP",
    ["status"]  # status: success|error
)

invoice_files_processed_total = Counter(
    "yooz_bridge_invoice_files_processed_total",
    "Invoice files processed",
    ["status"]  # status: success|partial|error
)

# ERP call metrics
erp_calls_total = Counter(
    "yooz_bridge_erp_calls_total",
    "Total ERP REST calls",
    ["service", "method", "status"]  # status: success|error
)

erp_call_duration_seconds = Histogram(
    "yooz_bridge_erp_call_duration_seconds",
    "ERP REST call latency in seconds",
    ["service"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)


def write_metrics_textfile(path: Optional[Path], registry: CollectorRegistry = REGISTRY) -> bool:
    """Write current metric values for the textfile collector.

    Args:
        path: Target .prom file; nothing is written when None
        registry: Registry to dump

    Returns:
        bool: True if a file was written
    """
    if path is None:
        return False
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_to_textfile(str(path), registry)
    except OSError as e:
        logger.warning(f"Failed to write metrics textfile {path}: {e}")
        return False
    return True
