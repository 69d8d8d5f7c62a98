"""
Transport abstraction shared by the device and bucket adapters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ccumd.sync.types import LOG_FILE_PATTERN, Source, SourceKind, SyncOptions, TransferOutcome
from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.sync.base")


class Transport(ABC):
    """
    Fetch strategy for one kind of source.

    ``fetch`` pulls every usage log of the source into ``source.projects_dir``
    and raises TransferError when the source as a whole cannot be synced.
    """

    kind: SourceKind

    def __init__(self, options: SyncOptions | None = None):
        self.options = options or SyncOptions()

    @abstractmethod
    def fetch(self, source: Source) -> TransferOutcome:
        """Synchronize ``source`` into its local directory."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def count_log_files(directory: Path, pattern: str = LOG_FILE_PATTERN) -> int:
    """Count usage log files below ``directory`` (0 if it does not exist)."""
    if not directory.is_dir():
        return 0
    return sum(1 for path in directory.rglob(pattern) if path.is_file())


def remove_quietly(path: Path) -> None:
    """Delete a temporary file; failures are logged and swallowed."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug(f"Could not remove temporary file {path}: {e}")


def close_quietly(resource: Any) -> None:
    """Close a connection during cleanup; failures are logged and swallowed."""
    try:
        resource.close()
    except Exception as e:
        logger.debug(f"Error closing {resource!r}: {e}")
