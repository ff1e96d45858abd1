"""Unit tests for the command line entry point."""

from unittest.mock import MagicMock, patch

import pytest

import cli
from domain.errors import ConfigurationError
from infrastructure.encryption import decrypt_secret


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("cli.configure_logging"):
        yield


@pytest.fixture
def client_cls():
    with patch("cli.EpicorRestClient") as client_cls:
        client = MagicMock()
        client_cls.from_settings.return_value.__enter__.return_value = client
        yield client_cls


class TestMain:

    def test_export(self, settings, client_cls):
        with patch("cli.get_settings", return_value=settings), patch("cli.ExportRunner") as runner_cls:
            runner_cls.return_value.run.return_value = {"written": ["vendors"]}

            assert cli.main(["export", "--skip-upload"]) == 0

        runner_cls.return_value.run.assert_called_once_with(skip_upload=True)

    def test_export_uses_settings_default(self, settings, client_cls):
        with patch("cli.get_settings", return_value=settings), patch("cli.ExportRunner") as runner_cls:
            runner_cls.return_value.run.return_value = {"written": []}

            cli.main(["export"])

        runner_cls.return_value.run.assert_called_once_with(skip_upload=None)

    def test_import(self, settings, client_cls):
        with patch("cli.get_settings", return_value=settings), patch("cli.ImportRunner") as runner_cls:
            runner_cls.return_value.run.return_value = {"status": "success", "group_id": "Y_101926"}

            assert cli.main(["import", "--skip-download"]) == 0

        runner_cls.return_value.run.assert_called_once_with(skip_download=True)

    def test_failed_run_exits_1(self, settings, client_cls):
        with patch("cli.get_settings", return_value=settings), patch("cli.ExportRunner") as runner_cls:
            runner_cls.return_value.run.side_effect = RuntimeError("BAQ failed")

            assert cli.main(["export"]) == 1

    def test_invalid_configuration_exits_1(self):
        with patch("cli.get_settings", side_effect=ConfigurationError("bad")):
            assert cli.main(["export"]) == 1

    def test_encrypt_secret(self, settings, capsys):
        with patch("cli.get_settings", return_value=settings), patch("cli.getpass.getpass", return_value="hunter2"):
            assert cli.main(["encrypt-secret", "SFTP_PASSWORD"]) == 0

        token = capsys.readouterr().out.strip()
        assert decrypt_secret(token, settings.SECRET_KEY, context="SFTP_PASSWORD") == "hunter2"

    def test_unknown_secret_setting(self):
        with pytest.raises(SystemExit):
            cli.main(["encrypt-secret", "SECRET_KEY"])
