"""Exception hierarchy for hopscp.

Every failure in hopscp is fatal. Each exception carries the process exit
code the CLI terminates with, so callers never map categories by hand.
"""


class HopScpError(Exception):
    """Base exception for all hopscp failures."""

    exit_code = 1


class ConfigurationError(HopScpError):
    """Configuration is missing, empty or malformed."""

    exit_code = 2


class CredentialError(HopScpError):
    """Private key material for an endpoint could not be parsed."""

    exit_code = 3

    def __init__(self, message: str, endpoint: str):
        super().__init__(message)
        self.endpoint = endpoint


class ConnectivityError(HopScpError):
    """Network dial to a hop failed."""

    exit_code = 4

    def __init__(self, message: str, hop: str):
        super().__init__(message)
        self.hop = hop


class TunnelError(ConnectivityError):
    """Proxy session could not open a channel to the target address."""

    pass


class AuthenticationError(ConnectivityError):
    """Remote host rejected the public key."""

    pass


class HostKeyMismatchError(HopScpError):
    """Presented host key does not match the expected fingerprint."""

    exit_code = 5

    def __init__(self, hop: str, expected: str, actual: str):
        super().__init__(
            f"Failed to verify {hop} host key: fingerprint mismatch "
            f"(expected {expected}, got {actual})"
        )
        self.hop = hop
        self.expected = expected
        self.actual = actual


class TransferError(HopScpError):
    """Copy of a single file failed.

    files_transferred is the count of files completed before the failure.
    """

    exit_code = 6

    def __init__(self, message: str, source: str | None = None, files_transferred: int = 0):
        super().__init__(message)
        self.source = source
        self.files_transferred = files_transferred


class DeadlineExceededError(HopScpError):
    """Overall action deadline elapsed before the run finished."""

    exit_code = 124

    def __init__(self, timeout: float):
        super().__init__(f"Failed to run action: action timed out after {timeout:g}s")
        self.timeout = timeout


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "ConnectivityError",
    "CredentialError",
    "DeadlineExceededError",
    "HopScpError",
    "HostKeyMismatchError",
    "TransferError",
    "TunnelError",
]
