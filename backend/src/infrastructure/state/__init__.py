"""Run state persisted between executions."""

from .last_run import LastRunStore

__all__ = ["LastRunStore"]
