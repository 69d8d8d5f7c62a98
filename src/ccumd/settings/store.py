"""
Durable settings store backed by a single JSON document.

``load()`` never fails: a missing or corrupt settings.json is replaced by an
empty document. ``save()`` always rewrites the whole file through a temp file
and ``os.replace`` so a crash mid-write never leaves a truncated document.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from ccumd.exceptions import InvalidConfigError, SettingsCorruptError
from ccumd.settings.models import BucketConfig, Settings, validate_source_name
from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.settings.store")


class SettingsStore:
    """Load/save the Settings document at a fixed path. No locking: one process at a time."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Settings:
        """
        Load settings, creating an empty document if needed.

        Returns:
            Settings read from disk, or fresh empty Settings (persisted) when the
            file is missing or corrupt
        """
        if not self.path.exists():
            logger.debug(f"No settings file at {self.path}, creating defaults")
            settings = Settings()
            self.save(settings)
            return settings

        try:
            return self._read()
        except SettingsCorruptError as e:
            logger.warning(f"{e}; resetting to empty settings")
            settings = Settings()
            self.save(settings)
            return settings

    def save(self, settings: Settings) -> None:
        """Persist ``settings``, overwriting the existing document wholesale."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(settings.to_dict(), indent=2, ensure_ascii=False) + "\n"

        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def _read(self) -> Settings:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SettingsCorruptError(str(self.path), str(e)) from e
        return self._parse(raw)

    def _parse(self, raw: Any) -> Settings:
        if not isinstance(raw, dict):
            raise SettingsCorruptError(str(self.path), f"expected an object, got {type(raw).__name__}")

        raw_devices = raw.get("devices") or []
        raw_buckets = raw.get("s3Buckets") or []
        if not isinstance(raw_devices, list) or not isinstance(raw_buckets, list):
            raise SettingsCorruptError(str(self.path), "'devices' and 's3Buckets' must be arrays")

        settings = Settings()
        for device in raw_devices:
            try:
                validate_source_name(device, kind="Device")
            except InvalidConfigError:
                logger.warning(f"Ignoring invalid device entry in {self.path}: {device!r}")
                continue
            if device not in settings.devices:
                settings.devices.append(device)

        for entry in raw_buckets:
            try:
                bucket = BucketConfig.from_dict(entry)
            except InvalidConfigError as e:
                logger.warning(f"Ignoring invalid bucket entry in {self.path}: {e}")
                continue
            # Later duplicates win, matching upsert semantics
            settings.buckets[bucket.name] = bucket

        return settings
