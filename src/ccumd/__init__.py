"""
ccumd - Claude Code usage across multiple devices.

Syncs Claude Code usage logs from SSH devices and S3-compatible buckets into a
local cache and hands the merged directories to the usage-reporting tool.
"""

__version__ = "0.1.0"

from ccumd.config import Config, Paths, load_config
from ccumd.exceptions import (
    CcumdError,
    ConfigurationError,
    ConnectivityError,
    DuplicateSourceError,
    InvalidConfigError,
    ReportError,
    RetryError,
    SettingsCorruptError,
    SourceError,
    SourceNotFoundError,
    TransferError,
)
from ccumd.registry import SourceRegistry
from ccumd.settings import BucketConfig, Settings, SettingsStore
from ccumd.sync import (
    ObjectStorageTransport,
    RemoteShellTransport,
    SyncOptions,
    SyncOrchestrator,
    SyncResult,
    SyncStatus,
    check_connection,
)
from ccumd.utils.logging import get_logger, setup_logging, setup_logging_from_config

__all__ = [
    "__version__",
    # Settings and registry
    "BucketConfig",
    "Settings",
    "SettingsStore",
    "SourceRegistry",
    # Sync
    "ObjectStorageTransport",
    "RemoteShellTransport",
    "SyncOptions",
    "SyncOrchestrator",
    "SyncResult",
    "SyncStatus",
    "check_connection",
    # Config
    "Config",
    "Paths",
    "load_config",
    # Exceptions
    "CcumdError",
    "ConfigurationError",
    "ConnectivityError",
    "DuplicateSourceError",
    "InvalidConfigError",
    "ReportError",
    "RetryError",
    "SettingsCorruptError",
    "SourceError",
    "SourceNotFoundError",
    "TransferError",
    # Logging
    "get_logger",
    "setup_logging",
    "setup_logging_from_config",
]
