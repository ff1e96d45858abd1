"""SFTP Client for Yooz file exchange.

This module provides an SFTP client wrapper that supports:
- Password and key-based authentication
- Uploads under collision-free names, optionally via .tmp + rename
- Download of non-hidden files with a given extension, optionally
  deleting the remote copy after each successful pull

Download-then-delete is not atomic: if the process dies between the two
steps the file is downloaded again on the next run.
"""

import logging
import posixpath
import stat
import time
from dataclasses import dataclass
from io import StringIO
from pathlib import Path
from typing import List, Optional

import paramiko

logger = logging.getLogger(__name__)


class SFTPError(Exception):
    """Base exception for SFTP operations."""
    pass


@dataclass
class SFTPConfig:
    """SFTP connection configuration.

    Attributes:
        host: SFTP server hostname
        port: SFTP server port (default 22)
        username: Username for authentication
        password: Password for authentication (mutually exclusive with ssh_key)
        ssh_key: SSH private key content for authentication (mutually exclusive with password)
        atomic_write: Whether uploads use .tmp + rename
        timeout_seconds: TCP connect timeout
    """
    host: str
    username: str
    port: int = 22
    password: Optional[str] = None
    ssh_key: Optional[str] = None
    atomic_write: bool = True
    timeout_seconds: float = 30.0


def unique_remote_name(filename: str, timestamp_ns: Optional[int] = None) -> str:
    """Append a high-resolution timestamp to a file name.

    ``Vendors.csv`` becomes ``Vendors-1729350000123456789.csv``.

    Args:
        filename: Local file name
        timestamp_ns: Timestamp in nanoseconds (defaults to now)
    """
    stem, suffix = posixpath.splitext(filename)
    if timestamp_ns is None:
        timestamp_ns = time.time_ns()
    return f"{stem}-{timestamp_ns}{suffix}"


class SFTPClient:
    """SFTP client for the Yooz upload and download directories.

    Example:
        config = SFTPConfig(
            host="sftp.example.com",
            username="acme",
            password="secret",
        )

        with SFTPClient(config) as client:
            client.upload_file(Path("staging/Vendors.csv"), "/in/vendors")
    """

    def __init__(self, config: SFTPConfig):
        """Initialize SFTP client with configuration.

        Args:
            config: SFTP configuration
        """
        self.config = config
        self._ssh_client: Optional[paramiko.SSHClient] = None
        self._sftp_client: Optional[paramiko.SFTPClient] = None

    def connect(self) -> None:
        """Establish SFTP connection.

        Raises:
            SFTPError: If connection fails
        """
        try:
            self._ssh_client = paramiko.SSHClient()
            self._ssh_client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

            connect_kwargs = {
                "hostname": self.config.host,
                "port": self.config.port,
                "username": self.config.username,
                "look_for_keys": False,
                "allow_agent": False,
                "timeout": self.config.timeout_seconds,
            }

            if self.config.ssh_key:
                connect_kwargs["pkey"] = paramiko.RSAKey.from_private_key(StringIO(self.config.ssh_key))
            elif self.config.password:
                connect_kwargs["password"] = self.config.password
            else:
                raise SFTPError("Either password or ssh_key must be provided")

            logger.info(f"Connecting to SFTP server {self.config.host}:{self.config.port}")
            self._ssh_client.connect(**connect_kwargs)
            self._sftp_client = self._ssh_client.open_sftp()
            logger.info("SFTP connection established")

        except SFTPError:
            raise
        except paramiko.AuthenticationException as e:
            raise SFTPError(f"Authentication failed: {e}") from e
        except paramiko.SSHException as e:
            raise SFTPError(f"SSH connection failed: {e}") from e
        except OSError as e:
            raise SFTPError(f"Failed to connect to SFTP server: {e}") from e

    def close(self) -> None:
        """Close SFTP connection."""
        if self._sftp_client:
            self._sftp_client.close()
            self._sftp_client = None
        if self._ssh_client:
            self._ssh_client.close()
            self._ssh_client = None
        logger.info("SFTP connection closed")

    def _ensure_connected(self) -> paramiko.SFTPClient:
        """Return the active SFTP session.

        Raises:
            SFTPError: If not connected
        """
        if not self._sftp_client:
            raise SFTPError("Not connected to SFTP server. Call connect() first.")
        return self._sftp_client

    def change_directory(self, remote_dir: str) -> None:
        """Change the remote working directory.

        Raises:
            SFTPError: If the directory does not exist or is not accessible
        """
        sftp = self._ensure_connected()
        try:
            sftp.chdir(remote_dir)
        except IOError as e:
            raise SFTPError(f"Cannot change to remote directory {remote_dir}: {e}") from e

    def upload_file(self, local_path: Path, remote_dir: str, remote_name: Optional[str] = None) -> str:
        """Upload a local file into a remote directory.

        Args:
            local_path: File to upload
            remote_dir: Remote directory to place the file in
            remote_name: Remote file name (default: collision-free name
                derived from the local name)

        Returns:
            Remote file name used

        Raises:
            SFTPError: If the upload fails
        """
        sftp = self._ensure_connected()
        remote_name = remote_name or unique_remote_name(local_path.name)
        self.change_directory(remote_dir)

        logger.info(f"Uploading {local_path.name} to {remote_dir}/{remote_name}")
        try:
            if self.config.atomic_write:
                tmp_name = f"{remote_name}.tmp"
                sftp.put(str(local_path), tmp_name, confirm=True)
                sftp.rename(tmp_name, remote_name)
            else:
                sftp.put(str(local_path), remote_name, confirm=True)
        except (IOError, OSError) as e:
            raise SFTPError(f"Failed to upload {local_path.name}: {e}") from e

        logger.info("Upload complete")
        return remote_name

    def list_files(self, remote_dir: str, extension: Optional[str] = None) -> List[str]:
        """List regular, non-hidden files in a remote directory.

        Args:
            remote_dir: Directory to list
            extension: Optional required suffix, e.g. ".csv" (case-sensitive)

        Returns:
            File names (not full paths), sorted

        Raises:
            SFTPError: If listing fails
        """
        sftp = self._ensure_connected()
        try:
            entries = sftp.listdir_attr(remote_dir)
        except IOError as e:
            raise SFTPError(f"Failed to list directory {remote_dir}: {e}") from e

        names = []
        for entry in entries:
            if entry.filename.startswith("."):
                continue
            if entry.st_mode is not None and not stat.S_ISREG(entry.st_mode):
                continue
            if extension and not entry.filename.endswith(extension):
                continue
            names.append(entry.filename)
        return sorted(names)

    def download_file(self, remote_name: str, local_path: Path) -> Path:
        """Download one file from the current remote directory.

        Raises:
            SFTPError: If the download fails
        """
        sftp = self._ensure_connected()
        local_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            sftp.get(remote_name, str(local_path))
        except (IOError, OSError) as e:
            raise SFTPError(f"Failed to download {remote_name}: {e}") from e
        return local_path

    def delete_file(self, remote_name: str) -> None:
        """Delete a file from the current remote directory.

        Raises:
            SFTPError: If deletion fails
        """
        sftp = self._ensure_connected()
        try:
            sftp.remove(remote_name)
        except IOError as e:
            raise SFTPError(f"Failed to delete file {remote_name}: {e}") from e

    def download_files(
        self,
        remote_dir: str,
        local_dir: Path,
        extension: str = ".csv",
        delete_after: bool = False,
    ) -> List[Path]:
        """Pull every matching file from a remote directory.

        Args:
            remote_dir: Remote directory to pull from
            local_dir: Local directory to place files in
            extension: Required file suffix
            delete_after: Delete each remote file after it downloaded

        Returns:
            Local paths of downloaded files

        Raises:
            SFTPError: On the first failing listing, download or delete
        """
        logger.info(f"Downloading files from SFTP path: {remote_dir}")
        self.change_directory(remote_dir)

        downloaded = []
        for name in self.list_files(remote_dir, extension=extension):
            logger.debug(f"Downloading: {name}")
            downloaded.append(self.download_file(name, local_dir / name))

            if delete_after:
                logger.debug(f"Deleting: {name}")
                self.delete_file(name)

        logger.info(f"Download complete: {len(downloaded)} files")
        return downloaded

    def __enter__(self):
        """Context manager entry - auto-connect."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - auto-close."""
        self.close()
        return False
