"""
SSH connection for device sync.

Devices are registered by their OpenSSH host alias, so the alias is resolved
through ``~/.ssh/config`` (HostName, Port, User, IdentityFile, ProxyCommand)
before connecting. File access goes over the session's SFTP channel.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import paramiko

from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.connections.ssh")


@dataclass(frozen=True)
class SSHHostConfig:
    alias: str
    hostname: str
    port: int = 22
    username: str | None = None
    key_filenames: tuple[str, ...] = ()
    proxy_command: str | None = None
    connect_timeout_s: float = 15.0
    io_timeout_s: float = 60.0


def resolve_host(
    device: str,
    ssh_config_path: str | Path | None = "~/.ssh/config",
    *,
    connect_timeout_s: float = 15.0,
    io_timeout_s: float = 60.0,
) -> SSHHostConfig:
    """
    Resolve a device id (``alias`` or ``user@alias``) into connection parameters.

    Unknown aliases resolve to themselves as the hostname, like ``ssh`` does.
    """
    user_override = None
    alias = device
    if "@" in device:
        user_override, alias = device.rsplit("@", 1)

    ssh_config = paramiko.SSHConfig()
    if ssh_config_path:
        path = Path(ssh_config_path).expanduser()
        if path.is_file():
            ssh_config = paramiko.SSHConfig.from_path(str(path))
    entry = ssh_config.lookup(alias)

    key_filenames = tuple(str(Path(p).expanduser()) for p in entry.get("identityfile", []))
    return SSHHostConfig(
        alias=alias,
        hostname=entry.get("hostname", alias),
        port=int(entry.get("port", 22)),
        username=user_override or entry.get("user"),
        key_filenames=key_filenames,
        proxy_command=entry.get("proxycommand"),
        connect_timeout_s=connect_timeout_s,
        io_timeout_s=io_timeout_s,
    )


class SSHConnection:
    """
    Minimal SSH/SFTP connection wrapper for pulling usage logs off a device.

    Connects lazily; use as a context manager so the session is always closed.
    """

    def __init__(
        self,
        device: str,
        *,
        ssh_config_path: str | Path | None = "~/.ssh/config",
        connect_timeout_s: float = 15.0,
        io_timeout_s: float = 60.0,
        strict_host_keys: bool = True,
    ):
        self.device = device
        self.ssh_config_path = ssh_config_path
        self.connect_timeout_s = connect_timeout_s
        self.io_timeout_s = io_timeout_s
        self.strict_host_keys = strict_host_keys
        self._client: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None

    def _parse_config(self) -> SSHHostConfig:
        return resolve_host(
            self.device,
            self.ssh_config_path,
            connect_timeout_s=self.connect_timeout_s,
            io_timeout_s=self.io_timeout_s,
        )

    def connect(self) -> paramiko.SFTPClient:
        """Connect (lazy) and return a live `paramiko.SFTPClient`."""
        if self._sftp is not None:
            return self._sftp

        cfg = self._parse_config()
        logger.debug(f"Connecting to {self.device} ({cfg.username or ''}@{cfg.hostname}:{cfg.port})")

        client = paramiko.SSHClient()
        client.load_system_host_keys()
        if self.strict_host_keys:
            client.set_missing_host_key_policy(paramiko.RejectPolicy())
        else:
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        sock = paramiko.ProxyCommand(cfg.proxy_command) if cfg.proxy_command else None
        try:
            client.connect(
                hostname=cfg.hostname,
                port=cfg.port,
                username=cfg.username,
                key_filename=list(cfg.key_filenames) or None,
                timeout=cfg.connect_timeout_s,
                banner_timeout=cfg.connect_timeout_s,
                auth_timeout=cfg.connect_timeout_s,
                sock=sock,
            )
            sftp = client.open_sftp()
            # Bound every SFTP read/write so a stalled device can't hang the run
            sftp.get_channel().settimeout(cfg.io_timeout_s)
        except Exception:
            client.close()
            raise

        self._client = client
        self._sftp = sftp
        return sftp

    def close(self) -> None:
        """Close SFTP channel + underlying SSH session."""
        try:
            if self._sftp is not None:
                self._sftp.close()
        finally:
            self._sftp = None
        try:
            if self._client is not None:
                self._client.close()
        finally:
            self._client = None

    def __enter__(self) -> SSHConnection:
        self.connect()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(device='{self.device}')"
