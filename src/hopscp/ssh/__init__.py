"""SSH utilities for hopscp.

This package contains:
- host_key: host key fingerprint pinning
- transport: direct and jump-host session establishment
"""

from .host_key import FingerprintPolicy, fingerprint_sha256, verify_fingerprint
from .transport import SSHSession, TransportBuilder, load_private_key

__all__ = [
    "FingerprintPolicy",
    "SSHSession",
    "TransportBuilder",
    "fingerprint_sha256",
    "load_private_key",
    "verify_fingerprint",
]
