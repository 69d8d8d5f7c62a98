"""
S3 connection for bucket sync.

Provides a lazily created boto3 client configured for S3-compatible services
(Cloudflare R2, MinIO, ...): explicit endpoint, explicit credentials and
path-style addressing.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import boto3
from botocore.config import Config as BotoConfig

from ccumd.settings.models import BucketConfig

DEFAULT_REGION = "auto"


@dataclass(frozen=True)
class RemoteObject:
    """Bucket listing entry; consumed immediately during sync, never persisted."""

    key: str
    size: int
    last_modified: datetime


class S3Connection:
    """
    S3 connection wrapper for one registered bucket.

    Only the operations the sync path needs: list, download, and a cheap
    existence check for pre-flight validation.
    """

    def __init__(
        self,
        config: BucketConfig,
        *,
        connect_timeout_s: float = 15.0,
        io_timeout_s: float = 60.0,
        max_attempts: int = 3,
    ):
        self.config = config
        self.connect_timeout_s = connect_timeout_s
        self.io_timeout_s = io_timeout_s
        self.max_attempts = max_attempts
        self._client = None

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def bucket(self) -> str:
        return self.config.bucket

    @property
    def region(self) -> str:
        return self.config.region or DEFAULT_REGION

    def _get_client_kwargs(self) -> dict[str, Any]:
        """Build kwargs for boto3 client initialization."""
        return {
            "endpoint_url": self.config.endpoint,
            "region_name": self.region,
            "aws_access_key_id": self.config.access_key_id,
            "aws_secret_access_key": self.config.secret_access_key,
            "config": BotoConfig(
                s3={"addressing_style": "path"},
                connect_timeout=self.connect_timeout_s,
                read_timeout=self.io_timeout_s,
                retries={"max_attempts": self.max_attempts, "mode": "standard"},
            ),
        }

    @property
    def client(self):
        """
        Get boto3 S3 client (lazy initialization).

        Returns:
            boto3.client('s3') instance
        """
        if self._client is None:
            self._client = boto3.client("s3", **self._get_client_kwargs())
        return self._client

    def list_objects(self, prefix: str = "") -> Iterator[RemoteObject]:
        """
        List every object under ``prefix``, following pagination.

        Yields:
            RemoteObject per key (directory placeholder keys ending in '/' are skipped)
        """
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                key = obj.get("Key") or ""
                if not key or key.endswith("/"):
                    continue
                yield RemoteObject(
                    key=key,
                    size=int(obj.get("Size") or 0),
                    last_modified=obj.get("LastModified") or datetime.now(timezone.utc),
                )

    def download_file(self, key: str, local_path: str | Path) -> Path:
        """
        Download an object to a local file.

        Writes to ``<local_path>.part`` first and renames on success, so an
        interrupted download never leaves a file that looks complete.

        Returns:
            Path to the downloaded file
        """
        local_path = Path(local_path)
        local_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = local_path.with_name(local_path.name + ".part")
        try:
            self.client.download_file(self.bucket, key, str(tmp_path))
            os.replace(tmp_path, local_path)
        except Exception:
            if tmp_path.exists():
                tmp_path.unlink()
            raise

        return local_path

    def head_bucket(self) -> None:
        """Fetch bucket metadata; raises if the bucket is unreachable or access is denied."""
        self.client.head_bucket(Bucket=self.bucket)

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._client is not None:
            try:
                self._client.close()
            finally:
                self._client = None

    def __enter__(self) -> S3Connection:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', bucket='{self.bucket}')"
