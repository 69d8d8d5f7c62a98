"""
Bucket transport: pull usage-log archives from S3-compatible storage.

Each object under the prefix is a tar archive (usually ``.tar.gz``) that
expands into ``projects/...``. Unlike devices, a bad object is logged and
skipped so one corrupt upload does not hide every other archive.
"""

from __future__ import annotations

import re
import tarfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ccumd.connections.s3 import RemoteObject, S3Connection
from ccumd.exceptions import TransferError
from ccumd.settings.models import BucketConfig
from ccumd.sync.base import Transport, close_quietly, count_log_files, remove_quietly
from ccumd.sync.types import Source, SourceKind, SyncOptions, TransferOutcome
from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.sync.bucket")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ObjectStorageTransport(Transport):
    """Skips failed objects; only a failed listing fails the bucket."""

    kind = SourceKind.BUCKET

    def __init__(
        self,
        options: SyncOptions | None = None,
        connection_factory: Callable[[BucketConfig], Any] | None = None,
    ):
        super().__init__(options)
        self._connection_factory = connection_factory or self._default_connection

    def _default_connection(self, config: BucketConfig) -> S3Connection:
        return S3Connection(
            config,
            connect_timeout_s=self.options.connect_timeout_s,
            io_timeout_s=self.options.io_timeout_s,
        )

    def fetch(self, source: Source) -> TransferOutcome:
        config: BucketConfig = source.target  # type: ignore[assignment]
        source.local_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Syncing S3 bucket: {config.bucket} ({config.name})")
        conn = self._connection_factory(config)
        try:
            try:
                objects = list(conn.list_objects(self.options.bucket_prefix))
            except Exception as e:
                raise TransferError(config.name, f"listing failed: {e}", cause=e) from e

            if not objects:
                logger.info(f"No Claude projects found in S3 bucket '{config.name}'")
                source.projects_dir.mkdir(parents=True, exist_ok=True)
                return TransferOutcome(file_count=0)

            if not hasattr(tarfile, "data_filter"):
                # Every archive would fail on its own and the bucket would look empty
                raise TransferError(
                    config.name,
                    "extracting archives needs tarfile filters (Python 3.10.12+, 3.11.4+ or 3.12+)",
                )

            logger.info(f"Found {len(objects)} Claude project archives in S3 bucket '{config.name}'")
            failed: list[str] = []
            for obj in objects:
                try:
                    self._sync_object(conn, obj, source.local_dir)
                except Exception as e:
                    logger.error(f"Failed to sync {obj.key}: {e}")
                    failed.append(obj.key)
        finally:
            close_quietly(conn)

        source.projects_dir.mkdir(parents=True, exist_ok=True)
        file_count = count_log_files(source.projects_dir)
        logger.info(f"Total: {file_count} files synced from S3 bucket '{config.name}'")
        return TransferOutcome(file_count=file_count, failed_objects=tuple(failed))

    def _sync_object(self, conn: Any, obj: RemoteObject, local_dir: Path) -> None:
        # Scoped to the bucket's own directory, so parallel sources never collide
        temp_file = local_dir / f".download-{_temp_name(obj.key)}"
        try:
            conn.download_file(obj.key, temp_file)
            extract_archive(temp_file, local_dir)
        finally:
            remove_quietly(temp_file)
        logger.info(f"✓ Synced {obj.key} ({obj.size / 1024 / 1024:.2f} MB)")

    def test_connection(self, config: BucketConfig) -> bool:
        """
        Cheap reachability check (bucket metadata only, no listing).

        Returns:
            True if the bucket answered, False on any error
        """
        conn = self._connection_factory(config)
        try:
            conn.head_bucket()
            return True
        except Exception as e:
            logger.error(f"Failed to connect to S3: {e}")
            return False
        finally:
            close_quietly(conn)


def check_connection(config: BucketConfig, options: SyncOptions | None = None) -> bool:
    """Pre-flight check used before a bucket config is persisted."""
    return ObjectStorageTransport(options).test_connection(config)


def extract_archive(archive: Path, dest: Path) -> None:
    """
    Unpack a tar archive (any compression) into ``dest``.

    The ``data`` filter rejects absolute paths, ``..`` escapes and special files.
    """
    with tarfile.open(archive, "r:*") as tar:
        tar.extractall(dest, filter="data")


def _temp_name(key: str) -> str:
    return _UNSAFE_CHARS.sub("_", key).strip("_") or "object"
