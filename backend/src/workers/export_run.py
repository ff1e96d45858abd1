"""ERP -> Yooz export run.

One run, in order:

1. Clear the local staging directory
2. Snapshot the execution time
3. Chart of accounts, vendors, purchase orders, payments: run the BAQ, map
   rows, write the staging file
4. Upload each written file to its own SFTP directory (unless skipped)
5. Persist the execution time as the new last-change watermark

Export types are not isolated from each other: the first failure aborts the
remaining types and the watermark is left untouched.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from config import Settings
from domain.exports import (
    PAYMENTS,
    PURCHASE_ORDERS,
    VENDORS,
    BAQQueryPort,
    ExportProfile,
    chart_of_accounts_profile,
    map_rows,
)
from infrastructure.sftp import SFTPClient, SFTPConfig
from infrastructure.state import LastRunStore
from infrastructure.writers import DelimitedFileWriter, Preamble, XmlDocumentWriter
from observability.metrics import export_files_total, exported_records_total

logger = logging.getLogger(__name__)

# Sent as LastChange before the first successful run.
INITIAL_LAST_CHANGE = datetime(1900, 1, 1)

LAST_CHANGE_PARAMETER = "LastChange"


@dataclass(frozen=True)
class ExportJob:
    """One export type: where its rows come from and where its file goes."""
    export_type: str
    baq_id: str
    profile: ExportProfile
    file_name: str
    remote_dir: str
    writer: Union[DelimitedFileWriter, XmlDocumentWriter]
    incremental: bool = True
    skip_when_empty: bool = False


def _preamble(version: str, header: str, profile: ExportProfile) -> Optional[Preamble]:
    if not version:
        return None
    return Preamble(version_line=version, header_line=header or profile.header_line("\t"))


def build_export_jobs(settings: Settings) -> List[ExportJob]:
    """Export types in run order."""
    coa_profile = chart_of_accounts_profile(settings.COA_EXPORT_PROFILE)
    return [
        ExportJob(
            export_type="chart_of_accounts",
            baq_id=settings.BAQ_CHART_OF_ACCOUNTS,
            profile=coa_profile,
            file_name=settings.FILE_NAME_CHART_OF_ACCOUNTS,
            remote_dir=settings.SFTP_PATH_CHART_OF_ACCOUNTS,
            writer=DelimitedFileWriter(preamble=_preamble(
                settings.EXPORT_CHART_OF_ACCOUNTS_VERSION,
                settings.EXPORT_CHART_OF_ACCOUNTS_HEADER,
                coa_profile,
            )),
        ),
        ExportJob(
            export_type="vendors",
            baq_id=settings.BAQ_VENDORS,
            profile=VENDORS,
            file_name=settings.FILE_NAME_VENDORS,
            remote_dir=settings.SFTP_PATH_VENDORS,
            writer=DelimitedFileWriter(preamble=_preamble(
                settings.EXPORT_VENDORS_VERSION,
                settings.EXPORT_VENDORS_HEADER,
                VENDORS,
            )),
            incremental=False,
        ),
        ExportJob(
            export_type="pos",
            baq_id=settings.BAQ_POS,
            profile=PURCHASE_ORDERS,
            file_name=settings.FILE_NAME_POS,
            remote_dir=settings.SFTP_PATH_POS,
            writer=DelimitedFileWriter(),
        ),
        ExportJob(
            export_type="payments",
            baq_id=settings.BAQ_PAYMENTS,
            profile=PAYMENTS,
            file_name=settings.FILE_NAME_PAYMENTS,
            remote_dir=settings.SFTP_PATH_PAYMENTS,
            writer=XmlDocumentWriter(),
            skip_when_empty=True,
        ),
    ]


def sftp_config_from_settings(settings: Settings) -> SFTPConfig:
    return SFTPConfig(
        host=settings.SFTP_HOST,
        port=settings.SFTP_PORT,
        username=settings.SFTP_USER,
        password=settings.secret("SFTP_PASSWORD"),
    )


def clear_directory(directory: Path) -> None:
    """Delete the files directly inside a directory, creating it if absent."""
    logger.info(f"Clearing temp directory: {directory}")
    directory.mkdir(parents=True, exist_ok=True)
    for path in directory.iterdir():
        if path.is_file():
            path.unlink()


class ExportRunner:
    """Runs every export type and uploads the results.

    Example:
        with EpicorRestClient.from_settings(settings) as client:
            result = ExportRunner(settings, client).run()
    """

    def __init__(
        self,
        settings: Settings,
        baq: BAQQueryPort,
        sftp_factory: Optional[Callable[[], SFTPClient]] = None,
        state_store: Optional[LastRunStore] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.baq = baq
        self.sftp_factory = sftp_factory or (lambda: SFTPClient(sftp_config_from_settings(settings)))
        self.state_store = state_store or LastRunStore(settings.STATE_FILE)
        self._clock = clock

    def export(self, job: ExportJob, last_change: datetime) -> Optional[Path]:
        """Run one export type.

        Returns:
            Path of the written file, or None when nothing was written

        Raises:
            ERPApiError: BAQ call failed
            ExportError: Rows do not fit the profile
            OSError: File could not be written
        """
        parameters = {LAST_CHANGE_PARAMETER: last_change.isoformat()} if job.incremental else None
        rows = self.baq.get_baq_results(job.baq_id, parameters)

        if not rows and job.skip_when_empty:
            logger.info(f"No {job.export_type} found. Skipping file generation.")
            export_files_total.labels(export_type=job.export_type, status="skipped").inc()
            return None

        records = map_rows(rows, job.profile)
        path = self.settings.TEMP_DIRECTORY / job.file_name
        count = job.writer.write(records, path)

        exported_records_total.labels(export_type=job.export_type).inc(count)
        export_files_total.labels(export_type=job.export_type, status="written").inc()
        return path

    def upload(self, written: List[ExportJob]) -> List[str]:
        """Upload staged files over one SFTP connection.

        Returns:
            Remote file names, in upload order
        """
        remote_names = []
        with self.sftp_factory() as sftp:
            for job in written:
                local_path = self.settings.TEMP_DIRECTORY / job.file_name
                logger.info(f"Uploading {job.file_name} to sftp path: {job.remote_dir}")
                remote_names.append(sftp.upload_file(local_path, job.remote_dir))
                export_files_total.labels(export_type=job.export_type, status="uploaded").inc()
        return remote_names

    def run(self, skip_upload: Optional[bool] = None) -> Dict[str, Any]:
        """Execute a full export run.

        Args:
            skip_upload: Override SKIP_SFTP_UPLOAD

        Returns:
            Dict with run result:
                - status: 'success'
                - written: export types that produced a file
                - uploaded: remote file names (empty when skipped)
                - last_execution: new watermark, or None if not advanced
        """
        settings = self.settings
        skip_upload = settings.SKIP_SFTP_UPLOAD if skip_upload is None else skip_upload

        clear_directory(settings.TEMP_DIRECTORY)
        logger.info("Starting ERP => Yooz exports.")

        execution_time = self._clock()
        last_change = self.state_store.load() or INITIAL_LAST_CHANGE

        written: List[ExportJob] = []
        for job in build_export_jobs(settings):
            logger.info(f"Exporting {job.export_type} from BAQ {job.baq_id}")
            try:
                path = self.export(job, last_change)
            except Exception:
                logger.error(f"Export of {job.export_type} failed", exc_info=True)
                raise
            if path is not None:
                written.append(job)

        logger.info("Data exported.")

        if skip_upload:
            logger.info("Skipping SFTP upload. (SKIP_SFTP_UPLOAD)")
            return {
                "status": "success",
                "written": [job.export_type for job in written],
                "uploaded": [],
                "last_execution": None,
            }

        logger.info("Beginning SFTP upload.")
        uploaded = self.upload(written)

        self.state_store.save(execution_time)
        logger.info("Finished!")
        return {
            "status": "success",
            "written": [job.export_type for job in written],
            "uploaded": uploaded,
            "last_execution": execution_time,
        }
