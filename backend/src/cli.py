"""Command line entry point for the ERP / Yooz bridge.

Usage:
    yooz-bridge export [--skip-upload]
    yooz-bridge import [--skip-download]
    yooz-bridge encrypt-secret SFTP_PASSWORD

Every run reads its settings from the environment (or .env); see config.py.
Exit code is 0 when the run finished, 1 when it was aborted.
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from config import Settings, get_settings
from domain.invoices import InvoiceImportWorkflow
from infrastructure.encryption import encrypt_secret
from infrastructure.erp import EpicorAPInvoiceAdapter, EpicorRestClient
from observability import configure_logging, generate_run_id, set_run_id, write_metrics_textfile
from workers import ExportRunner, ImportRunner

logger = logging.getLogger(__name__)

SECRET_SETTINGS = ("EPICOR_PASSWORD", "EPICOR_API_KEY", "SFTP_PASSWORD")


def run_export(settings: Settings, args: argparse.Namespace) -> int:
    with EpicorRestClient.from_settings(settings) as client:
        result = ExportRunner(settings, client).run(skip_upload=args.skip_upload or None)
    logger.info(f"Export run finished: wrote {', '.join(result['written']) or 'nothing'}")
    return 0


def run_import(settings: Settings, args: argparse.Namespace) -> int:
    with EpicorRestClient.from_settings(settings) as client:
        adapter = EpicorAPInvoiceAdapter(client, settings.EPICOR_COMPANY)
        workflow = InvoiceImportWorkflow(adapter, gl_separator=settings.GL_ACCOUNT_SEPARATOR)
        result = ImportRunner(settings, workflow).run(skip_download=args.skip_download or None)
    logger.info(f"Import run finished with status {result['status']} for group {result['group_id']}")
    return 0


def run_encrypt_secret(settings: Settings, args: argparse.Namespace) -> int:
    plaintext = getpass.getpass(f"{args.setting}: ")
    print(encrypt_secret(plaintext, settings.SECRET_KEY, context=args.setting))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='yooz-bridge',
        description='Exchange chart of accounts, vendors, POs, payments and invoices between the ERP and Yooz',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        '--log-level',
        help='Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    export_parser = subparsers.add_parser('export', help='Export ERP data to Yooz')
    export_parser.add_argument(
        '--skip-upload',
        action='store_true',
        help='Write files to the staging directory but do not upload them'
    )
    export_parser.set_defaults(handler=run_export)

    import_parser = subparsers.add_parser('import', help='Import Yooz invoices into the ERP')
    import_parser.add_argument(
        '--skip-download',
        action='store_true',
        help='Process files already in the import directory without downloading new ones'
    )
    import_parser.set_defaults(handler=run_import)

    secret_parser = subparsers.add_parser('encrypt-secret', help='Encrypt a secret setting value for .env')
    secret_parser.add_argument(
        'setting',
        choices=SECRET_SETTINGS,
        help='Setting the value is encrypted for'
    )
    secret_parser.set_defaults(handler=run_encrypt_secret)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except Exception as e:
        configure_logging(args.log_level or "INFO", json_format=False)
        logger.critical(f"Invalid configuration. Error: {e}")
        return 1

    configure_logging(args.log_level or settings.LOG_LEVEL, json_format=settings.LOG_JSON)
    set_run_id(generate_run_id())

    try:
        return args.handler(settings, args)
    except Exception as e:
        logger.critical(f"Execution ended. Error: {e}", exc_info=True)
        return 1
    finally:
        write_metrics_textfile(settings.METRICS_TEXTFILE)


if __name__ == '__main__':
    sys.exit(main())
