"""File transfer module for the hopscp command."""

from .exceptions import InvalidPathError, TransferError
from .file_transfer import (
    FileTransfer,
    ProgressCallback,
    TransferRequest,
    TransferResult,
    TransferState,
)
from .path_mapper import PathMapper
from .scp_copy import FileCopier, ScpCopier

__all__ = [
    # Classes
    "FileCopier",
    "FileTransfer",
    # Exceptions
    "InvalidPathError",
    "PathMapper",
    "ProgressCallback",
    "ScpCopier",
    "TransferError",
    "TransferRequest",
    "TransferResult",
    "TransferState",
]
