"""
Hand-off to the external usage-reporting tool (ccusage).

The reporting tool finds usage logs through CLAUDE_CONFIG_DIR, which accepts a
comma-separated list of directories; ccumd passes the combined path there and
forwards the remaining command-line arguments verbatim.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence

from ccumd.exceptions import ReportError
from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.report")

CONFIG_DIR_ENV_VAR = "CLAUDE_CONFIG_DIR"
DEFAULT_COMMAND = ("npx", "ccusage@latest")
DEFAULT_ARGS = ("daily",)


def build_report_env(combined_path: str, base_env: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment for the reporting process: the caller's env plus the combined path."""
    env = dict(os.environ if base_env is None else base_env)
    env[CONFIG_DIR_ENV_VAR] = combined_path
    env["FORCE_COLOR"] = "1"
    return env


def resolve_command(command: str | Sequence[str] | None) -> list[str]:
    if command is None:
        return list(DEFAULT_COMMAND)
    if isinstance(command, str):
        return shlex.split(command)
    return list(command)


def run_report(
    args: Sequence[str] | None,
    combined_path: str,
    command: str | Sequence[str] | None = None,
) -> int:
    """
    Run the reporting tool and wait for it.

    Args:
        args: Arguments for the reporting tool (default: ``daily``)
        combined_path: Comma-joined log directories
        command: Reporting command (default: ``npx ccusage@latest``)

    Returns:
        The reporting tool's exit code

    Raises:
        ReportError: If the command cannot be started
    """
    argv = resolve_command(command) + list(args or DEFAULT_ARGS)
    logger.debug(f"Running {shlex.join(argv)} with {CONFIG_DIR_ENV_VAR}={combined_path}")
    try:
        completed = subprocess.run(argv, env=build_report_env(combined_path), check=False)
    except FileNotFoundError as e:
        raise ReportError(f"Reporting command not found: {argv[0]}", details={"command": argv}) from e
    except OSError as e:
        raise ReportError(f"Could not start reporting command {argv[0]}: {e}", details={"command": argv}) from e
    return completed.returncode
