"""
Tests for the SSH/SFTP device transport.

Uses the in-memory FakeSFTP from conftest; no SSH server is involved.
"""

import logging
import socket
from unittest.mock import MagicMock, patch

import pytest

from ccumd.connections.ssh import SSHConnection, resolve_host
from ccumd.exceptions import TransferError
from ccumd.sync.device import RemoteShellTransport, list_remote_logs
from ccumd.sync.types import Source, SourceKind, SyncOptions
from tests.conftest import FakeSFTP, FakeSSHConnection


@pytest.fixture
def source(paths):
    return Source(
        source_id="laptop",
        kind=SourceKind.DEVICE,
        local_dir=paths.device_dir("laptop"),
        target="laptop",
    )


def make_transport(conn, **options):
    return RemoteShellTransport(SyncOptions(**options), connection_factory=lambda device: conn)


class TestRemoteShellTransport:
    """Fetching usage logs from a device."""

    def test_missing_remote_root_is_empty_success(self, source):
        conn = FakeSSHConnection(FakeSFTP({".bashrc": b""}))
        outcome = make_transport(conn).fetch(source)

        assert outcome.file_count == 0
        assert source.projects_dir.is_dir()
        assert list(source.projects_dir.iterdir()) == []
        assert conn.closed

    def test_copies_logs_preserving_layout(self, source):
        sftp = FakeSFTP(
            {
                ".claude/projects/app/session-1.jsonl": b'{"a": 1}\n',
                ".claude/projects/app/session-2.jsonl": b'{"a": 2}\n',
                ".claude/projects/lib/nested/s.jsonl": b'{"b": 1}\n',
                ".claude/projects/app/notes.txt": b"ignored",
            }
        )
        conn = FakeSSHConnection(sftp)
        outcome = make_transport(conn).fetch(source)

        assert outcome.file_count == 3
        assert (source.projects_dir / "app" / "session-1.jsonl").read_bytes() == b'{"a": 1}\n'
        assert (source.projects_dir / "lib" / "nested" / "s.jsonl").is_file()
        assert not (source.projects_dir / "app" / "notes.txt").exists()
        assert not list(source.projects_dir.rglob("*.part"))
        assert conn.closed

    def test_logs_transfer_size(self, source, caplog):
        caplog.set_level(logging.DEBUG, logger="ccumd")
        sftp = FakeSFTP({".claude/projects/app/s.jsonl": b"x" * (512 * 1024)})
        make_transport(FakeSSHConnection(sftp)).fetch(source)
        assert "Found 1 log files (0.50 MB) on device 'laptop'" in caplog.text

    def test_resync_overwrites_files(self, source):
        files = {".claude/projects/app/s.jsonl": b"old\n"}
        make_transport(FakeSSHConnection(FakeSFTP(files))).fetch(source)

        files[".claude/projects/app/s.jsonl"] = b"old\nnew\n"
        make_transport(FakeSSHConnection(FakeSFTP(files))).fetch(source)

        assert (source.projects_dir / "app" / "s.jsonl").read_bytes() == b"old\nnew\n"

    def test_copy_failure_raises_and_cleans_up(self, source):
        sftp = FakeSFTP(
            {
                ".claude/projects/app/a.jsonl": b"a\n",
                ".claude/projects/app/b.jsonl": b"b\n",
            },
            fail_on={".claude/projects/app/b.jsonl"},
        )
        conn = FakeSSHConnection(sftp)

        with pytest.raises(TransferError, match="Connection reset by peer") as exc_info:
            make_transport(conn).fetch(source)

        assert exc_info.value.source_id == "laptop"
        assert isinstance(exc_info.value.__cause__, OSError)
        assert not list(source.local_dir.rglob("*.part"))
        assert not (source.projects_dir / "app" / "b.jsonl").exists()
        assert conn.closed

    def test_connect_failure_raises_transfer_error(self, source):
        conn = FakeSSHConnection(connect_error=socket.timeout("timed out"))
        with pytest.raises(TransferError, match="timed out"):
            make_transport(conn).fetch(source)
        assert conn.closed

    def test_remote_root_not_a_directory(self, source):
        conn = FakeSSHConnection(FakeSFTP({".claude/projects": b"oops"}))
        with pytest.raises(TransferError, match="not a directory"):
            make_transport(conn).fetch(source)

    def test_custom_remote_root(self, source):
        conn = FakeSSHConnection(FakeSFTP({"logs/p/s.jsonl": b"x\n"}))
        outcome = make_transport(conn, remote_root="~/logs/").fetch(source)
        assert outcome.file_count == 1
        assert (source.projects_dir / "p" / "s.jsonl").is_file()

    def test_remote_root_normalization(self):
        assert RemoteShellTransport(SyncOptions(remote_root="~/.claude/projects")).remote_root == ".claude/projects"
        assert RemoteShellTransport(SyncOptions(remote_root="/var/logs/")).remote_root == "/var/logs"


class TestListRemoteLogs:
    """Recursive listing over SFTP."""

    def test_sorted_by_relative_path(self):
        sftp = FakeSFTP(
            {
                "root/b/2.jsonl": b"22",
                "root/a/1.jsonl": b"1",
                "root/a/z/3.jsonl": b"333",
            }
        )
        files = list_remote_logs(sftp, "root")
        assert [f.relative_path for f in files] == ["a/1.jsonl", "a/z/3.jsonl", "b/2.jsonl"]
        assert [f.size for f in files] == [1, 3, 2]
        assert files[0].path == "root/a/1.jsonl"

    def test_custom_pattern(self):
        sftp = FakeSFTP({"root/a.log": b"", "root/b.jsonl": b""})
        assert [f.relative_path for f in list_remote_logs(sftp, "root", "*.log")] == ["a.log"]


class TestResolveHost:
    """Resolving a device id through an OpenSSH config file."""

    @pytest.fixture
    def ssh_config(self, tmp_path):
        path = tmp_path / "ssh_config"
        path.write_text(
            "Host laptop\n"
            "    HostName 10.0.0.5\n"
            "    Port 2222\n"
            "    User alice\n"
            "    IdentityFile /keys/id_laptop\n"
        )
        return path

    def test_alias_lookup(self, ssh_config):
        cfg = resolve_host("laptop", ssh_config)
        assert cfg.hostname == "10.0.0.5"
        assert cfg.port == 2222
        assert cfg.username == "alice"
        assert cfg.key_filenames == ("/keys/id_laptop",)

    def test_user_prefix_overrides_config(self, ssh_config):
        cfg = resolve_host("bob@laptop", ssh_config)
        assert cfg.alias == "laptop"
        assert cfg.username == "bob"
        assert cfg.hostname == "10.0.0.5"

    def test_unknown_alias_is_hostname(self, ssh_config):
        cfg = resolve_host("build.example.com", ssh_config)
        assert cfg.hostname == "build.example.com"
        assert cfg.port == 22

    def test_missing_config_file(self, tmp_path):
        cfg = resolve_host("laptop", tmp_path / "nope", connect_timeout_s=3.0)
        assert cfg.hostname == "laptop"
        assert cfg.connect_timeout_s == 3.0


class TestSSHConnection:
    """SSHConnection wiring around paramiko.SSHClient."""

    def test_connect_applies_timeouts(self, tmp_path):
        client = MagicMock()
        with patch("ccumd.connections.ssh.paramiko.SSHClient", return_value=client):
            conn = SSHConnection(
                "laptop",
                ssh_config_path=tmp_path / "nope",
                connect_timeout_s=5.0,
                io_timeout_s=30.0,
            )
            sftp = conn.connect()

        kwargs = client.connect.call_args.kwargs
        assert kwargs["hostname"] == "laptop"
        assert kwargs["timeout"] == 5.0
        assert kwargs["banner_timeout"] == 5.0
        assert kwargs["auth_timeout"] == 5.0
        sftp.get_channel.return_value.settimeout.assert_called_once_with(30.0)

        conn.close()
        client.close.assert_called_once()

    def test_failed_connect_closes_client(self, tmp_path):
        client = MagicMock()
        client.connect.side_effect = OSError("No route to host")
        with patch("ccumd.connections.ssh.paramiko.SSHClient", return_value=client):
            conn = SSHConnection("laptop", ssh_config_path=tmp_path / "nope")
            with pytest.raises(OSError):
                conn.connect()
        client.close.assert_called_once()
