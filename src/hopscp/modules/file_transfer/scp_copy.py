"""File copy primitive over an established SSH session."""

import logging
import os
from typing import Protocol, runtime_checkable

import paramiko
from scp import SCPClient, SCPException

from hopscp.exceptions import TransferError
from hopscp.ssh.transport import SSHSession

logger = logging.getLogger(__name__)

DEFAULT_SOCKET_TIMEOUT = 30.0


@runtime_checkable
class FileCopier(Protocol):
    """Copy single files between the local machine and a session's host."""

    def copy_to(self, session: SSHSession, local_path: str, remote_path: str) -> int:
        """Push local_path to remote_path. Returns bytes written."""
        ...

    def copy_from(self, session: SSHSession, remote_path: str, local_path: str) -> int:
        """Pull remote_path to local_path. Returns bytes written."""
        ...


class ScpCopier:
    """FileCopier using the scp protocol on the session's transport."""

    def __init__(self, socket_timeout: float = DEFAULT_SOCKET_TIMEOUT):
        self.socket_timeout = socket_timeout

    def copy_to(self, session: SSHSession, local_path: str, remote_path: str) -> int:
        try:
            size = os.path.getsize(local_path)
            with SCPClient(session.transport, socket_timeout=self.socket_timeout) as client:
                client.put(local_path, remote_path)
        except (SCPException, paramiko.SSHException, OSError) as e:
            raise TransferError(f"Failed to upload file to remote: {e}", source=local_path) from e

        logger.debug(f"Wrote {size} bytes to {session.name}:{remote_path}")
        return size

    def copy_from(self, session: SSHSession, remote_path: str, local_path: str) -> int:
        try:
            with SCPClient(session.transport, socket_timeout=self.socket_timeout) as client:
                client.get(remote_path, local_path)
            size = os.path.getsize(local_path)
        except (SCPException, paramiko.SSHException, OSError) as e:
            raise TransferError(
                f"Failed to download file from remote: {e}", source=remote_path
            ) from e

        logger.debug(f"Wrote {size} bytes to {local_path}")
        return size


__all__ = ["DEFAULT_SOCKET_TIMEOUT", "FileCopier", "ScpCopier"]
