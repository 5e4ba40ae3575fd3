"""Host key verification by pinned fingerprint.

The expected fingerprint from configuration is the only root of trust.
No known_hosts file is read and unknown keys are never accepted.
"""

import base64
import hashlib
import logging
from collections.abc import Callable
from typing import Any

import paramiko

from hopscp.exceptions import HostKeyMismatchError

logger = logging.getLogger(__name__)

# (hostname, remote address, presented key) -> None, raises on mismatch
HostKeyVerifier = Callable[[str, Any, paramiko.PKey], None]


def fingerprint_sha256(key: paramiko.PKey) -> str:
    """Compute the OpenSSH SHA256 fingerprint of a public key.

    Returns:
        "SHA256:" followed by the unpadded base64 digest of the key's wire
        encoding, the same form `ssh-keygen -lf` prints.
    """
    digest = hashlib.sha256(key.asbytes()).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")


def verify_fingerprint(expected: str, hop: str = "target") -> HostKeyVerifier:
    """Build a verifier that accepts only the key matching `expected`.

    Args:
        expected: Fingerprint in canonical "SHA256:..." form
        hop: Endpoint name used in error messages

    Returns:
        Callable raising HostKeyMismatchError when fingerprints differ
    """

    def verify(hostname: str, remote: Any, key: paramiko.PKey) -> None:
        actual = fingerprint_sha256(key)
        if actual != expected:
            logger.debug(f"Rejected {hop} host key from {hostname} ({remote}): {actual}")
            raise HostKeyMismatchError(hop, expected, actual)
        logger.debug(f"Verified {hop} host key {actual}")

    return verify


class FingerprintPolicy(paramiko.MissingHostKeyPolicy):
    """paramiko policy that pins the server key to one fingerprint.

    With no host keys loaded into the client, paramiko consults this policy
    for every server key right after key exchange and before user
    authentication. Raising here aborts the connection.
    """

    def __init__(self, expected: str, hop: str = "target"):
        self.expected = expected
        self.hop = hop
        self._verify = verify_fingerprint(expected, hop)

    def missing_host_key(self, client, hostname, key):
        transport = client.get_transport()
        remote = transport.getpeername() if transport is not None else None
        self._verify(hostname, remote, key)


__all__ = ["FingerprintPolicy", "HostKeyVerifier", "fingerprint_sha256", "verify_fingerprint"]
