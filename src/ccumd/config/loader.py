"""
Application config loading.

The config file (``~/.ccumd/config.yaml``) is optional: every key has a
default, and a missing file simply yields the defaults. It holds tunables only;
the registry of devices and buckets lives in settings.json.
"""

from pathlib import Path
from typing import Any

import yaml

from ccumd.config.resolver import deep_merge, resolve_config
from ccumd.exceptions import ConfigurationError
from ccumd.retry.policy import RetryPolicy

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "file": None,
        "file_mode": "a",
        "console_type": "rich",
    },
    "sync": {
        "max_workers": 1,
        "connect_timeout_s": 15.0,
        "io_timeout_s": 60.0,
        "remote_root": ".claude/projects",
        "bucket_prefix": "claude_projects",
        "ssh_config": "~/.ssh/config",
        "strict_host_keys": True,
        "retry": {
            "max_attempts": 1,
            "initial_delay": 1.0,
            "max_delay": 10.0,
        },
    },
    "report": {
        "command": ["npx", "ccusage@latest"],
    },
}


class Config:
    """ccumd configuration container with dot-notation access."""

    def __init__(self, data: dict[str, Any]):
        self.data = data
        self.logging = data.get("logging", {})
        self.sync = data.get("sync", {})
        self.report = data.get("report", {})

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        keys = key.split(".")
        value = self.data
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def validate(self) -> None:
        """Validate configuration structure and content."""
        errors = []

        for section in ("logging", "sync", "report"):
            value = self.data.get(section)
            if value is not None and not isinstance(value, dict):
                errors.append(f"Configuration '{section}' must be a mapping, got {type(value).__name__}")

        workers = self.get("sync.max_workers", 1)
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            errors.append(f"sync.max_workers must be a positive integer, got {workers!r}")

        for key in ("sync.connect_timeout_s", "sync.io_timeout_s"):
            value = self.get(key)
            if value is not None and (not isinstance(value, (int, float)) or value <= 0):
                errors.append(f"{key} must be a positive number, got {value!r}")

        retry = self.get("sync.retry")
        if retry is not None:
            if not isinstance(retry, dict):
                errors.append(f"sync.retry must be a mapping, got {type(retry).__name__}")
            else:
                try:
                    RetryPolicy.from_config(retry)
                except (TypeError, ValueError) as e:
                    errors.append(f"sync.retry is invalid: {e}")

        # A plain string is accepted and split with shlex by the report runner
        command = self.get("report.command")
        if isinstance(command, str):
            command = [command] if command.strip() else []
        if not isinstance(command, list) or not command or not all(isinstance(c, str) for c in command):
            errors.append("report.command must be a non-empty list of strings")

        if errors:
            raise ConfigurationError("\n".join(errors))


def load_config(config_path: Path | None = None) -> Config:
    """
    Load ccumd configuration.

    Merges ``config_path`` (when it exists) over DEFAULT_CONFIG and substitutes
    ``${VAR}`` placeholders from the environment.

    Args:
        config_path: Path to config.yaml (default: none, defaults only)

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    user_data: dict[str, Any] = {}

    if config_path is not None and config_path.exists():
        if not config_path.is_file():
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")
        try:
            with open(config_path, encoding="utf-8") as f:
                user_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            if hasattr(e, "problem_mark"):
                mark = e.problem_mark
                raise ConfigurationError(
                    f"Error parsing {config_path.name} at line {mark.line + 1}, column {mark.column + 1}:\n"
                    f"  {e}\n"
                    f"  File: {config_path}"
                ) from e
            raise ConfigurationError(f"Error parsing {config_path.name}: {e}\n  File: {config_path}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}") from e

        if not isinstance(user_data, dict):
            raise ConfigurationError(
                f"Configuration must be a mapping, got {type(user_data).__name__}\n  File: {config_path}"
            )

    config = Config(resolve_config(deep_merge(DEFAULT_CONFIG, user_data)))
    config.validate()
    return config
