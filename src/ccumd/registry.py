"""
Source registry: add, list and delete devices and buckets.

Every mutation validates first, then persists the whole Settings document,
then touches the local cache directory. Directory removal is best-effort and
never rolls back the registry change.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path

from ccumd.config.paths import Paths
from ccumd.exceptions import ConnectivityError, DuplicateSourceError, SourceNotFoundError
from ccumd.settings.models import BucketConfig, Settings, validate_source_name
from ccumd.settings.store import SettingsStore
from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.registry")


class SourceRegistry:
    """
    CRUD operations on registered sources.

    Holds one loaded Settings value for the lifetime of the registry; pass
    ``settings`` to share a value already loaded elsewhere in the same run.
    """

    def __init__(self, store: SettingsStore, paths: Paths, settings: Settings | None = None):
        self.store = store
        self.paths = paths
        self.settings = settings if settings is not None else store.load()

    # --- Devices -------------------------------------------------------------

    def list_devices(self) -> list[str]:
        return list(self.settings.devices)

    def add_device(self, device: str) -> None:
        """
        Register a device and create its local cache directory.

        Raises:
            InvalidConfigError: If ``device`` cannot be used as a directory name
            DuplicateSourceError: If the device is already registered
        """
        validate_source_name(device, kind="Device")
        if device in self.settings.devices:
            raise DuplicateSourceError(device)

        self.settings.devices.append(device)
        self.store.save(self.settings)

        self.paths.projects_dir(self.paths.device_dir(device)).mkdir(parents=True, exist_ok=True)
        logger.info(f"Device '{device}' added")

    def delete_device(self, device: str) -> None:
        """
        Unregister a device and remove its local cache directory.

        Raises:
            SourceNotFoundError: If the device is not registered
        """
        if device not in self.settings.devices:
            raise SourceNotFoundError(device)

        self.settings.devices.remove(device)
        self.store.save(self.settings)

        _remove_tree(self.paths.device_dir(device))
        logger.info(f"Device '{device}' deleted")

    # --- Buckets -------------------------------------------------------------

    def list_buckets(self) -> list[BucketConfig]:
        return list(self.settings.buckets.values())

    def get_bucket(self, name: str) -> BucketConfig | None:
        return self.settings.buckets.get(name)

    def add_bucket(
        self,
        config: BucketConfig,
        check_connection: Callable[[BucketConfig], bool] | None = None,
    ) -> None:
        """
        Add or replace a bucket config (upsert by name).

        A replaced bucket keeps its position in the list.

        Args:
            config: Bucket config to store
            check_connection: Optional pre-flight check; a false result blocks persistence

        Raises:
            InvalidConfigError: If the config is malformed
            ConnectivityError: If ``check_connection`` returns False
        """
        config.validate()
        if check_connection is not None and not check_connection(config):
            raise ConnectivityError(config.name)

        replaced = config.name in self.settings.buckets
        self.settings.buckets[config.name] = config
        self.store.save(self.settings)

        self.paths.projects_dir(self.paths.bucket_dir(config.name)).mkdir(parents=True, exist_ok=True)
        logger.info(f"S3 bucket '{config.name}' {'updated' if replaced else 'added'}")

    def delete_bucket(self, name: str) -> bool:
        """
        Remove a bucket config. Unknown names are ignored.

        Returns:
            True if a bucket was removed
        """
        if name not in self.settings.buckets:
            logger.debug(f"S3 bucket '{name}' not registered, nothing to delete")
            return False

        del self.settings.buckets[name]
        self.store.save(self.settings)

        _remove_tree(self.paths.bucket_dir(name))
        logger.info(f"S3 bucket '{name}' deleted")
        return True


def _remove_tree(path: Path) -> None:
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")
