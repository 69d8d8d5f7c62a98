"""
ccumd exception hierarchy.

All domain-specific exceptions inherit from CcumdError, so a front end can
catch any sync or registry failure with a single base class while still
handling the individual cases when needed.

Hierarchy::

    CcumdError
    ├── ConfigurationError          - app config loading, parsing, validation
    │   └── InvalidConfigError      - malformed bucket config / source id
    ├── SourceError                 - registry operations on devices/buckets
    │   ├── DuplicateSourceError    - device id already registered
    │   └── SourceNotFoundError     - device id not registered
    ├── ConnectivityError           - bucket pre-flight connection test failed
    ├── TransferError               - probe/list/copy/download failed for a source
    ├── SettingsCorruptError        - settings.json unreadable (handled by the store)
    ├── ReportError                 - reporting command could not be started
    └── RetryError                  - retry exhaustion
"""

from __future__ import annotations


class CcumdError(Exception):
    """Base exception for all ccumd errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(CcumdError):
    """Raised when the application config cannot be loaded or is invalid."""


class InvalidConfigError(ConfigurationError):
    """Raised when a bucket config or source id fails validation before persistence."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, details={"field": field})
        self.field = field


# --- Registry ----------------------------------------------------------------


class SourceError(CcumdError):
    """Raised when a registry operation on a device or bucket cannot proceed."""

    def __init__(self, message: str, *, source_id: str) -> None:
        super().__init__(message, details={"source": source_id})
        self.source_id = source_id


class DuplicateSourceError(SourceError):
    """Raised when adding a device that is already registered."""

    def __init__(self, source_id: str) -> None:
        super().__init__(f"Device '{source_id}' already exists", source_id=source_id)


class SourceNotFoundError(SourceError):
    """Raised when referencing a device that is not registered."""

    def __init__(self, source_id: str) -> None:
        super().__init__(f"Device '{source_id}' not found", source_id=source_id)


# --- Remote access -----------------------------------------------------------


class ConnectivityError(CcumdError):
    """Raised when the pre-flight bucket connection test fails.

    Blocks persistence of the bucket config.
    """

    def __init__(self, bucket_name: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Failed to connect to S3 bucket '{bucket_name}'",
            details={"bucket": bucket_name},
        )
        self.bucket_name = bucket_name


class TransferError(CcumdError):
    """Raised when fetching usage logs from one source fails."""

    def __init__(self, source_id: str, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(f"Transfer from '{source_id}' failed: {message}", details={"source": source_id})
        self.source_id = source_id
        if cause is not None:
            self.__cause__ = cause


# --- Settings ----------------------------------------------------------------


class SettingsCorruptError(CcumdError):
    """Raised inside the settings store when settings.json cannot be parsed.

    Never escapes SettingsStore.load(); the store resets to defaults instead.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Settings file {path} is corrupt: {message}", details={"path": path})
        self.path = path


# --- Reporting ---------------------------------------------------------------


class ReportError(CcumdError):
    """Raised when the external reporting command cannot be started."""


# --- Retry -------------------------------------------------------------------


class RetryError(CcumdError):
    """Raised when all retry attempts are exhausted."""
