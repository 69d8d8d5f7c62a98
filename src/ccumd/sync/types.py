"""
Type definitions for sources, transports and sync results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ccumd.config.loader import Config
from ccumd.connections.s3 import RemoteObject
from ccumd.retry.policy import RetryPolicy
from ccumd.settings.models import BucketConfig

LOG_FILE_PATTERN = "*.jsonl"


class SourceKind(str, Enum):
    DEVICE = "device"
    BUCKET = "bucket"


class SyncStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"


@dataclass(frozen=True)
class Source:
    """
    One registered source as seen by the orchestrator.

    ``target`` is the device id for devices and the BucketConfig for buckets.
    ``local_dir`` is the directory handed to the reporting tool; usage logs
    land in its ``projects`` subdirectory.
    """

    source_id: str
    kind: SourceKind
    local_dir: Path
    target: str | BucketConfig

    @property
    def projects_dir(self) -> Path:
        return self.local_dir / "projects"


@dataclass(frozen=True)
class RemoteFile:
    """Usage log file found on a device."""

    path: str
    relative_path: str
    size: int


@dataclass(frozen=True)
class TransferOutcome:
    """What a transport reports back for one source."""

    file_count: int
    failed_objects: tuple[str, ...] = ()


@dataclass
class SyncResult:
    """Per-source outcome of one sync run. Not persisted."""

    source_id: str
    kind: SourceKind
    local_path: Path
    status: SyncStatus
    file_count: int = 0
    error: str | None = None
    attempts: int = 1
    failed_objects: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is SyncStatus.OK


@dataclass(frozen=True)
class SyncOptions:
    """Tunables for transports and the orchestrator (``sync`` config section)."""

    max_workers: int = 1
    connect_timeout_s: float = 15.0
    io_timeout_s: float = 60.0
    remote_root: str = ".claude/projects"
    bucket_prefix: str = "claude_projects"
    ssh_config: str | None = "~/.ssh/config"
    strict_host_keys: bool = True
    retry: RetryPolicy = field(default_factory=lambda: RetryPolicy(max_attempts=1))

    @classmethod
    def from_config(cls, config: Config) -> SyncOptions:
        sync: dict[str, Any] = config.sync or {}
        defaults = cls()
        return cls(
            max_workers=int(sync.get("max_workers", defaults.max_workers)),
            connect_timeout_s=float(sync.get("connect_timeout_s", defaults.connect_timeout_s)),
            io_timeout_s=float(sync.get("io_timeout_s", defaults.io_timeout_s)),
            remote_root=str(sync.get("remote_root", defaults.remote_root)),
            bucket_prefix=str(sync.get("bucket_prefix", defaults.bucket_prefix)),
            ssh_config=sync.get("ssh_config", defaults.ssh_config),
            strict_host_keys=bool(sync.get("strict_host_keys", defaults.strict_host_keys)),
            retry=RetryPolicy.from_config(sync.get("retry")),
        )


__all__ = [
    "LOG_FILE_PATTERN",
    "RemoteFile",
    "RemoteObject",
    "Source",
    "SourceKind",
    "SyncOptions",
    "SyncResult",
    "SyncStatus",
    "TransferOutcome",
]
