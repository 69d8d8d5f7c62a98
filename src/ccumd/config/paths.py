"""
On-disk layout of the ccumd cache.

    <home>/.ccumd/settings.json
    <home>/.ccumd/config.yaml
    <home>/.ccumd/devices/<device>/projects/**/*.jsonl
    <home>/.ccumd/s3/<bucket name>/projects/**/*.jsonl
    <home>/.claude                      (primary local log root)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

HOME_ENV_VAR = "CCUMD_HOME"
SETTINGS_FILENAME = "settings.json"
CONFIG_FILENAME = "config.yaml"
PROJECTS_DIRNAME = "projects"


@dataclass(frozen=True)
class Paths:
    """Resolved filesystem locations used by the store, registry and orchestrator."""

    base_dir: Path
    claude_dir: Path

    @classmethod
    def default(cls, base_dir: str | Path | None = None) -> Paths:
        """
        Build the default layout.

        ``base_dir`` wins over ``$CCUMD_HOME``, which wins over ``~/.ccumd``.
        """
        home = Path.home()
        if base_dir is None:
            base_dir = os.environ.get(HOME_ENV_VAR) or home / ".ccumd"
        return cls(base_dir=Path(base_dir).expanduser(), claude_dir=home / ".claude")

    @property
    def settings_file(self) -> Path:
        return self.base_dir / SETTINGS_FILENAME

    @property
    def config_file(self) -> Path:
        return self.base_dir / CONFIG_FILENAME

    @property
    def devices_dir(self) -> Path:
        return self.base_dir / "devices"

    @property
    def buckets_dir(self) -> Path:
        return self.base_dir / "s3"

    def device_dir(self, device: str) -> Path:
        return self.devices_dir / device

    def bucket_dir(self, name: str) -> Path:
        return self.buckets_dir / name

    def projects_dir(self, source_dir: Path) -> Path:
        return source_dir / PROJECTS_DIRNAME
