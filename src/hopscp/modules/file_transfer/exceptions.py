"""Custom exceptions for file transfer."""

from hopscp.exceptions import ConfigurationError, TransferError


class InvalidPathError(ConfigurationError):
    """Path is malformed or does not name a file."""

    pass


__all__ = ["InvalidPathError", "TransferError"]
