"""Shared pytest fixtures.

Provides:
- backend/src on sys.path
- Settings pointing all local directories at tmp_path
- A fake SFTP client factory

Usage:
    def test_export(settings, sftp_factory):
        runner = ExportRunner(settings, baq, sftp_factory=sftp_factory)
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from config import Settings  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment and .env."""
    return Settings(
        _env_file=None,
        EPICOR_SERVER="https://erp.example.com",
        EPICOR_INSTANCE="ERP10",
        EPICOR_USER="yooz",
        EPICOR_PASSWORD="secret",
        EPICOR_COMPANY="ACME",
        SFTP_HOST="sftp.example.com",
        SFTP_USER="acme",
        SFTP_PASSWORD="sftp-secret",
        TEMP_DIRECTORY=tmp_path / "staging",
        IMPORT_DIRECTORY=tmp_path / "incoming",
        ARCHIVE_DIRECTORY=tmp_path / "archive",
        STATE_FILE=tmp_path / "state" / "last_execution.json",
        SECRET_KEY="test-secret-key",
    )


@pytest.fixture
def sftp_client():
    """MagicMock standing in for a connected SFTPClient."""
    client = MagicMock()
    client.__enter__.return_value = client
    client.__exit__.return_value = False
    client.upload_file.side_effect = lambda local_path, remote_dir: f"{local_path.stem}-1{local_path.suffix}"
    return client


@pytest.fixture
def sftp_factory(sftp_client):
    return MagicMock(return_value=sftp_client)
