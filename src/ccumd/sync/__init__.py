"""
Sync subsystem: transports for devices and buckets, and the orchestrator
that runs them and builds the combined path.
"""

from ccumd.sync.base import Transport
from ccumd.sync.bucket import ObjectStorageTransport, check_connection
from ccumd.sync.device import RemoteShellTransport
from ccumd.sync.orchestrator import SyncOrchestrator
from ccumd.sync.types import Source, SourceKind, SyncOptions, SyncResult, SyncStatus, TransferOutcome

__all__ = [
    "ObjectStorageTransport",
    "RemoteShellTransport",
    "Source",
    "SourceKind",
    "SyncOptions",
    "SyncOrchestrator",
    "SyncResult",
    "SyncStatus",
    "TransferOutcome",
    "Transport",
    "check_connection",
]
