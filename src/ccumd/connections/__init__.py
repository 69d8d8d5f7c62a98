"""
Remote connections used by the transports: SSH/SFTP for devices, S3 for buckets.
"""

from ccumd.connections.s3 import RemoteObject, S3Connection
from ccumd.connections.ssh import SSHConnection, SSHHostConfig, resolve_host

__all__ = ["RemoteObject", "S3Connection", "SSHConnection", "SSHHostConfig", "resolve_host"]
