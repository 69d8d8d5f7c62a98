"""
Shared fixtures and fakes for ccumd tests.

Nothing here touches the network: SFTP and S3 are replaced by in-memory fakes
that honour the small subset of the paramiko / boto3 APIs the transports use.
"""

import errno
import io
import stat
import tarfile
from pathlib import Path

import paramiko
import pytest

from ccumd.config.paths import Paths
from ccumd.connections.s3 import RemoteObject
from ccumd.settings.models import BucketConfig
from ccumd.settings.store import SettingsStore


@pytest.fixture
def paths(tmp_path):
    return Paths(base_dir=tmp_path / ".ccumd", claude_dir=tmp_path / ".claude")


@pytest.fixture
def store(paths):
    return SettingsStore(paths.settings_file)


@pytest.fixture
def bucket_config():
    return BucketConfig(
        name="r2",
        endpoint="https://account.r2.cloudflarestorage.com",
        bucket="usage-logs",
        access_key_id="AKIATEST",
        secret_access_key="secret123",
    )


# --- SFTP fake ---------------------------------------------------------------


def _attr(name: str, mode: int, size: int = 0) -> paramiko.SFTPAttributes:
    attr = paramiko.SFTPAttributes()
    attr.filename = name
    attr.st_mode = mode
    attr.st_size = size
    attr.st_mtime = 1_700_000_000
    return attr


class FakeSFTP:
    """In-memory SFTP server; paths are relative to the remote home directory."""

    def __init__(self, files: dict[str, bytes], fail_on: set[str] | None = None):
        self.files = files
        self.fail_on = fail_on or set()
        self.downloaded: list[str] = []

    def _dirs(self) -> set[str]:
        dirs = set()
        for path in self.files:
            parts = path.split("/")[:-1]
            for i in range(1, len(parts) + 1):
                dirs.add("/".join(parts[:i]))
        return dirs

    def stat(self, path: str) -> paramiko.SFTPAttributes:
        if path in self.files:
            return _attr(path.rsplit("/", 1)[-1], stat.S_IFREG | 0o644, len(self.files[path]))
        if path in self._dirs():
            return _attr(path.rsplit("/", 1)[-1], stat.S_IFDIR | 0o755)
        raise FileNotFoundError(errno.ENOENT, "No such file")

    def listdir_attr(self, path: str) -> list[paramiko.SFTPAttributes]:
        prefix = path.rstrip("/") + "/"
        entries: dict[str, paramiko.SFTPAttributes] = {}
        for file_path, data in self.files.items():
            if not file_path.startswith(prefix):
                continue
            rest = file_path[len(prefix):]
            name, _, remainder = rest.partition("/")
            if remainder:
                entries[name] = _attr(name, stat.S_IFDIR | 0o755)
            else:
                entries[name] = _attr(name, stat.S_IFREG | 0o644, len(data))
        return list(entries.values())

    def get(self, remote_path: str, local_path: str) -> None:
        if remote_path in self.fail_on:
            Path(local_path).write_bytes(b"partial")
            raise OSError("Connection reset by peer")
        Path(local_path).write_bytes(self.files[remote_path])
        self.downloaded.append(remote_path)


class FakeSSHConnection:
    def __init__(self, sftp: FakeSFTP | None = None, connect_error: Exception | None = None):
        self.sftp = sftp
        self.connect_error = connect_error
        self.closed = False

    def connect(self) -> FakeSFTP:
        if self.connect_error is not None:
            raise self.connect_error
        return self.sftp

    def close(self) -> None:
        self.closed = True


# --- S3 fake -----------------------------------------------------------------


def make_archive(members: dict[str, bytes]) -> bytes:
    """Build a .tar.gz holding ``members`` (name -> content)."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class FakeS3Connection:
    def __init__(
        self,
        objects: dict[str, bytes] | None = None,
        *,
        list_error: Exception | None = None,
        head_error: Exception | None = None,
        fail_on: set[str] | None = None,
    ):
        self.objects = objects or {}
        self.list_error = list_error
        self.head_error = head_error
        self.fail_on = fail_on or set()
        self.closed = False
        self.prefixes: list[str] = []

    def list_objects(self, prefix: str = ""):
        self.prefixes.append(prefix)
        if self.list_error is not None:
            raise self.list_error
        for key, data in self.objects.items():
            if key.startswith(prefix):
                yield RemoteObject(key=key, size=len(data), last_modified=None)

    def download_file(self, key: str, local_path) -> Path:
        if key in self.fail_on:
            raise OSError(f"download of {key} failed")
        local_path = Path(local_path)
        local_path.parent.mkdir(parents=True, exist_ok=True)
        local_path.write_bytes(self.objects[key])
        return local_path

    def head_bucket(self) -> None:
        if self.head_error is not None:
            raise self.head_error

    def close(self) -> None:
        self.closed = True
