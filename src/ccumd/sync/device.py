"""
Device transport: copy usage logs from a remote host over SSH/SFTP.

Strategy: one SSH session per device, enumerate ``*.jsonl`` under the remote
log root, then copy file by file into the same relative layout locally. This
costs one SFTP round trip per file but needs no remote temp archive, so there
is nothing to clean up on the device when a transfer fails halfway.
"""

from __future__ import annotations

import fnmatch
import os
import stat
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ccumd.connections.ssh import SSHConnection
from ccumd.exceptions import TransferError
from ccumd.sync.base import Transport, close_quietly, remove_quietly
from ccumd.sync.types import LOG_FILE_PATTERN, RemoteFile, Source, SourceKind, SyncOptions, TransferOutcome
from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.sync.device")


class RemoteShellTransport(Transport):
    """Fails the whole device on the first transport error."""

    kind = SourceKind.DEVICE

    def __init__(
        self,
        options: SyncOptions | None = None,
        connection_factory: Callable[[str], Any] | None = None,
    ):
        super().__init__(options)
        self._connection_factory = connection_factory or self._default_connection

    def _default_connection(self, device: str) -> SSHConnection:
        return SSHConnection(
            device,
            ssh_config_path=self.options.ssh_config,
            connect_timeout_s=self.options.connect_timeout_s,
            io_timeout_s=self.options.io_timeout_s,
            strict_host_keys=self.options.strict_host_keys,
        )

    @property
    def remote_root(self) -> str:
        # SFTP resolves relative paths against the remote home directory
        root = self.options.remote_root
        if root.startswith("~/"):
            root = root[2:]
        return root.rstrip("/") or "."

    def fetch(self, source: Source) -> TransferOutcome:
        device = str(source.target)
        source.local_dir.mkdir(parents=True, exist_ok=True)

        conn = self._connection_factory(device)
        try:
            sftp = conn.connect()

            if not self._remote_dir_exists(sftp, device):
                logger.info(f"No ~/{self.remote_root} directory found on device '{device}'")
                source.projects_dir.mkdir(parents=True, exist_ok=True)
                return TransferOutcome(file_count=0)

            remote_files = list_remote_logs(sftp, self.remote_root)
            total_mb = sum(f.size for f in remote_files) / 1024 / 1024
            logger.debug(f"Found {len(remote_files)} log files ({total_mb:.2f} MB) on device '{device}'")

            source.projects_dir.mkdir(parents=True, exist_ok=True)
            for remote_file in remote_files:
                _copy_remote_file(sftp, remote_file, source.projects_dir)

            logger.info(f"Synced {len(remote_files)} files from device '{device}'")
            return TransferOutcome(file_count=len(remote_files))
        except TransferError:
            raise
        except Exception as e:
            raise TransferError(device, str(e) or type(e).__name__, cause=e) from e
        finally:
            close_quietly(conn)

    def _remote_dir_exists(self, sftp: Any, device: str) -> bool:
        try:
            attr = sftp.stat(self.remote_root)
        except FileNotFoundError:
            return False
        if not stat.S_ISDIR(attr.st_mode or 0):
            raise TransferError(device, f"~/{self.remote_root} exists but is not a directory")
        return True


def list_remote_logs(sftp: Any, root: str, pattern: str = LOG_FILE_PATTERN) -> list[RemoteFile]:
    """
    Recursively list regular files under ``root`` whose name matches ``pattern``.

    Symlinks are not followed. Results are ordered by relative path.
    """
    results: list[RemoteFile] = []

    def walk(dir_path: str, rel_prefix: str) -> None:
        for attr in sftp.listdir_attr(dir_path):
            name = attr.filename
            if name in (".", ".."):
                continue
            full_path = f"{dir_path.rstrip('/')}/{name}"
            rel_path = f"{rel_prefix}{name}"
            mode = attr.st_mode or 0
            if stat.S_ISDIR(mode):
                walk(full_path, f"{rel_path}/")
            elif stat.S_ISREG(mode) and fnmatch.fnmatch(name, pattern):
                results.append(
                    RemoteFile(
                        path=full_path,
                        relative_path=rel_path,
                        size=int(attr.st_size or 0),
                    )
                )

    walk(root, "")
    results.sort(key=lambda r: r.relative_path)
    return results


def _copy_remote_file(sftp: Any, remote_file: RemoteFile, projects_dir: Path) -> Path:
    local_path = projects_dir / _safe_relpath(remote_file.relative_path)
    local_path.parent.mkdir(parents=True, exist_ok=True)

    # Final names only ever appear through an atomic rename
    tmp_path = local_path.with_name(local_path.name + ".part")
    try:
        sftp.get(remote_file.path, str(tmp_path))
        os.replace(tmp_path, local_path)
    finally:
        if tmp_path.exists():
            remove_quietly(tmp_path)
    return local_path


def _safe_relpath(relative_path: str) -> str:
    parts = [p for p in relative_path.split("/") if p not in ("", ".", "..")]
    return os.path.join(*parts)
