"""Last successful export timestamp.

Stored as a small JSON document:

    {"last_execution": "2026-10-19T06:00:00+00:00"}

The export run passes it to the BAQs as ``LastChange`` and only moves it
forward after every export type succeeded.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from domain.errors import ConfigurationError

logger = logging.getLogger(__name__)


class LastRunStore:
    """JSON file store for the last execution watermark."""

    KEY = "last_execution"

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> Optional[datetime]:
        """Previous watermark, or None on first run.

        Raises:
            ConfigurationError: If the state file exists but is corrupt
        """
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            value = data.get(self.KEY)
            return datetime.fromisoformat(value) if value else None
        except (OSError, ValueError, AttributeError, TypeError) as e:
            raise ConfigurationError(f"Corrupt state file {self.path}: {e}") from e

    def save(self, executed_at: datetime) -> None:
        """Persist a new watermark atomically (write temp file, then replace)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps({self.KEY: executed_at.isoformat()}), encoding="utf-8")
        os.replace(tmp_path, self.path)
        logger.info(f"Last execution set to {executed_at.isoformat()}")
