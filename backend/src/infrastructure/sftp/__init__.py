"""SFTP infrastructure module - SFTP client for the Yooz file exchange."""

from .client import SFTPClient, SFTPConfig, SFTPError, unique_remote_name

__all__ = ["SFTPClient", "SFTPConfig", "SFTPError", "unique_remote_name"]
