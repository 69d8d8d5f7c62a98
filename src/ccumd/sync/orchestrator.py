"""
Sync orchestrator: run every registered source through its transport.

Sources are synced devices first, then buckets, each in registration order.
A failing source is recorded in its SyncResult and never stops the others;
only successful sources contribute to the combined path handed to the
reporting tool.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any

from ccumd.config.paths import Paths
from ccumd.exceptions import TransferError
from ccumd.retry.manager import RetryManager
from ccumd.retry.policy import RetryState
from ccumd.settings.models import BucketConfig, Settings
from ccumd.sync.base import Transport
from ccumd.sync.bucket import ObjectStorageTransport
from ccumd.sync.device import RemoteShellTransport
from ccumd.sync.types import Source, SourceKind, SyncOptions, SyncResult, SyncStatus
from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.sync.orchestrator")

COMBINED_PATH_SEPARATOR = ","


class SyncOrchestrator:
    """
    Drives per-source synchronization for one run.

    The Settings value is read once when the orchestrator is built; registry
    changes made afterwards are picked up by the next run.
    """

    def __init__(
        self,
        settings: Settings,
        paths: Paths,
        options: SyncOptions | None = None,
        transports: Mapping[SourceKind, Transport] | None = None,
        *,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.settings = settings
        self.paths = paths
        self.options = options or SyncOptions()
        self.transports: dict[SourceKind, Transport] = dict(
            transports
            or {
                SourceKind.DEVICE: RemoteShellTransport(self.options),
                SourceKind.BUCKET: ObjectStorageTransport(self.options),
            }
        )
        # Only transfer problems are worth another attempt; bugs fail immediately
        policy = replace(self.options.retry, retryable_exceptions=(TransferError,))
        self._retry = RetryManager(policy, sleep=sleep)

    def device_source(self, device: str) -> Source:
        return Source(
            source_id=device,
            kind=SourceKind.DEVICE,
            local_dir=self.paths.device_dir(device),
            target=device,
        )

    def bucket_source(self, config: BucketConfig) -> Source:
        return Source(
            source_id=config.name,
            kind=SourceKind.BUCKET,
            local_dir=self.paths.bucket_dir(config.name),
            target=config,
        )

    def sources(self) -> list[Source]:
        """All registered sources: devices first, then buckets."""
        return [self.device_source(d) for d in self.settings.devices] + [
            self.bucket_source(b) for b in self.settings.buckets.values()
        ]

    def sync_source(self, source: Source) -> SyncResult:
        """
        Sync one source. Never raises for transfer problems.

        Returns:
            SyncResult with status ok (file count) or failed (error message)
        """
        label = f"{source.kind.value} '{source.source_id}'"
        transport = self.transports[source.kind]
        state = RetryState(name=label)

        logger.info(f"Syncing {label}...")
        try:
            outcome = self._retry.execute(transport.fetch, source, state=state)
        except Exception as e:
            logger.error(f"✗ Failed to sync {label}: {e}")
            return SyncResult(
                source_id=source.source_id,
                kind=source.kind,
                local_path=source.local_dir,
                status=SyncStatus.FAILED,
                error=str(e) or type(e).__name__,
                attempts=state.total_attempts,
            )

        if outcome.failed_objects:
            logger.warning(f"{label}: skipped {len(outcome.failed_objects)} object(s) that failed to sync")
        logger.info(f"✓ Synced {label} ({outcome.file_count} files)")
        return SyncResult(
            source_id=source.source_id,
            kind=source.kind,
            local_path=source.local_dir,
            status=SyncStatus.OK,
            file_count=outcome.file_count,
            attempts=state.total_attempts,
            failed_objects=list(outcome.failed_objects),
        )

    def sync_all(self) -> list[SyncResult]:
        """
        Sync every registered source.

        Runs sequentially unless ``max_workers`` > 1. Results always come back
        in source order, after every source has finished.
        """
        sources = self.sources()
        if not sources:
            logger.debug("No devices or buckets registered")
            return []

        workers = min(self.options.max_workers, len(sources))
        if workers <= 1:
            return [self.sync_source(source) for source in sources]

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ccumd-sync")
        try:
            futures = [executor.submit(self.sync_source, source) for source in sources]
            return [future.result() for future in futures]
        finally:
            # On interrupt, drop sources that have not started yet
            executor.shutdown(wait=True, cancel_futures=True)

    def combined_path(self, results: list[SyncResult]) -> str:
        """
        Join the primary log root and every successful source directory.

        This is the value the reporting tool receives as CLAUDE_CONFIG_DIR.
        """
        paths = [str(self.paths.claude_dir)]
        paths.extend(str(result.local_path) for result in results if result.ok)
        return COMBINED_PATH_SEPARATOR.join(paths)

    def cached_path(self) -> str:
        """Combined path over whatever is already cached locally, without syncing."""
        paths = [str(self.paths.claude_dir)]
        paths.extend(str(source.local_dir) for source in self.sources() if source.projects_dir.is_dir())
        return COMBINED_PATH_SEPARATOR.join(paths)
