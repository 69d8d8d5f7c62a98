"""
Shared state for CLI commands, built once by the root callback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ccumd.config.loader import Config, load_config
from ccumd.config.paths import Paths
from ccumd.registry import SourceRegistry
from ccumd.settings.models import Settings
from ccumd.settings.store import SettingsStore
from ccumd.sync.orchestrator import SyncOrchestrator
from ccumd.sync.types import SyncOptions
from ccumd.utils.logging import setup_logging_from_config


@dataclass
class AppContext:
    paths: Paths
    config: Config
    _registry: SourceRegistry | None = field(default=None, repr=False)

    @classmethod
    def create(cls, home: Path | None = None, log_level: str | None = None) -> AppContext:
        """
        Resolve paths, load config.yaml and set up logging.

        Raises:
            ConfigurationError: If config.yaml is invalid
        """
        paths = Paths.default(home)
        config = load_config(paths.config_file)
        if log_level:
            config.data.setdefault("logging", {})["level"] = log_level
        setup_logging_from_config(config.data, base_dir=paths.base_dir)
        return cls(paths=paths, config=config)

    @property
    def store(self) -> SettingsStore:
        return SettingsStore(self.paths.settings_file)

    @property
    def registry(self) -> SourceRegistry:
        if self._registry is None:
            self._registry = SourceRegistry(self.store, self.paths)
        return self._registry

    @property
    def sync_options(self) -> SyncOptions:
        return SyncOptions.from_config(self.config)

    def orchestrator(self, settings: Settings | None = None) -> SyncOrchestrator:
        if settings is None:
            settings = self.registry.settings
        return SyncOrchestrator(settings, self.paths, self.sync_options)
