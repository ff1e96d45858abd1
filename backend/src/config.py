"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.

Secrets (ERP password, SFTP password, ERP API key) may be stored encrypted
with an ``enc:`` prefix; they are decrypted on access with SECRET_KEY.
"""

from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.errors import ConfigurationError
from infrastructure.encryption import decrypt_secret, is_encrypted


class Settings(BaseSettings):
    """Bridge settings loaded from environment variables.

    Environment Variables:
        EPICOR_SERVER: ERP application server base URL (https://erp.example.com)
        EPICOR_INSTANCE: ERP application pool instance name
        EPICOR_USER / EPICOR_PASSWORD: ERP REST credentials
        EPICOR_COMPANY: Company context sent with every ERP call
        SFTP_HOST / SFTP_USER / SFTP_PASSWORD: Yooz SFTP credentials
        TEMP_DIRECTORY: Local staging directory for export files (cleared per export run)
        IMPORT_DIRECTORY: Local directory invoice CSVs are downloaded to and read from
        ARCHIVE_DIRECTORY: Where invoice files that failed to import are moved
        SECRET_KEY: Key material for decrypting ``enc:`` secrets
        LOG_LEVEL: Logging level (default INFO)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ERP REST
    EPICOR_SERVER: str = "https://localhost"
    EPICOR_INSTANCE: str = "ERP10"
    EPICOR_USER: str = ""
    EPICOR_PASSWORD: str = ""
    EPICOR_COMPANY: str = ""
    EPICOR_PLANT: str = ""
    EPICOR_API_KEY: Optional[str] = None
    EPICOR_VERIFY_SSL: bool = False
    EPICOR_TIMEOUT_SECONDS: float = 120.0

    # BAQ identifiers
    BAQ_CHART_OF_ACCOUNTS: str = "YOOZ_ChartOfAccounts"
    BAQ_VENDORS: str = "YOOZ_Vendors"
    BAQ_POS: str = "YOOZ_POs"
    BAQ_PAYMENTS: str = "YOOZ_Payments"

    # SFTP
    SFTP_HOST: str = "localhost"
    SFTP_PORT: int = 22
    SFTP_USER: str = ""
    SFTP_PASSWORD: str = ""
    SFTP_PATH_CHART_OF_ACCOUNTS: str = "/in/accounts"
    SFTP_PATH_VENDORS: str = "/in/vendors"
    SFTP_PATH_POS: str = "/in/orders"
    SFTP_PATH_PAYMENTS: str = "/in/payments"
    SFTP_PATH_INVOICES: str = "/out/invoices"

    # Local files
    TEMP_DIRECTORY: Path = Path("./staging")
    IMPORT_DIRECTORY: Path = Path("./incoming")
    ARCHIVE_DIRECTORY: Optional[Path] = None
    STATE_FILE: Path = Path("./state/last_execution.json")
    FILE_NAME_CHART_OF_ACCOUNTS: str = "ChartOfAccounts.csv"
    FILE_NAME_VENDORS: str = "Vendors.csv"
    FILE_NAME_POS: str = "POs.csv"
    FILE_NAME_PAYMENTS: str = "Payments.xml"

    # Yooz preamble lines (blank version disables the preamble, blank header
    # uses the profile column labels)
    EXPORT_CHART_OF_ACCOUNTS_VERSION: str = "#YOOZ_GL_ACCOUNTS_V1"
    EXPORT_CHART_OF_ACCOUNTS_HEADER: str = ""
    EXPORT_VENDORS_VERSION: str = ""
    EXPORT_VENDORS_HEADER: str = ""

    # Export / import behaviour
    COA_EXPORT_PROFILE: str = "coa_calculated"
    INVOICE_GROUP_PREFIX: str = "Y_"
    GL_ACCOUNT_SEPARATOR: str = "|"
    SKIP_SFTP_UPLOAD: bool = False
    SKIP_DOWNLOADING_NEW_FILES: bool = False
    DELETE_SFTP_FILES_AFTER_DOWNLOAD: bool = True
    DELETE_TEMP_FILES_AFTER_PROCESSING: bool = True

    # Application
    SECRET_KEY: str = "dev-secret-key-CHANGE-IN-PRODUCTION"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    METRICS_TEXTFILE: Optional[Path] = None

    @field_validator("COA_EXPORT_PROFILE")
    @classmethod
    def _known_coa_profile(cls, value: str) -> str:
        if value not in ("coa_calculated", "coa_raw"):
            raise ValueError("COA_EXPORT_PROFILE must be 'coa_calculated' or 'coa_raw'")
        return value

    @field_validator("EPICOR_SERVER")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def secret(self, name: str) -> str:
        """Return a secret setting, decrypting ``enc:`` values.

        Args:
            name: Setting name (e.g. "SFTP_PASSWORD")

        Raises:
            ConfigurationError: If the value cannot be decrypted
        """
        value = getattr(self, name) or ""
        if not is_encrypted(value):
            return value
        try:
            return decrypt_secret(value, self.SECRET_KEY, context=name)
        except ValueError as e:
            raise ConfigurationError(f"Cannot decrypt {name}: {e}") from e

    def invoice_group_id(self, run_date: date) -> str:
        """Invoice group for a run, e.g. ``Y_101926``."""
        return f"{self.INVOICE_GROUP_PREFIX}{run_date.strftime('%m%d%y')}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
