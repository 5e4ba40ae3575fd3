"""Sequential file transfer over one SSH session."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from hopscp.config_manager import Direction, TransferConfig
from hopscp.ssh.transport import SSHSession

from .exceptions import TransferError
from .path_mapper import PathMapper
from .scp_copy import FileCopier, ScpCopier

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]


class TransferState(Enum):
    """Orchestrator lifecycle."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class TransferRequest:
    """Files to move and where to put them."""

    direction: Direction
    sources: tuple[str, ...]
    destination: str

    @classmethod
    def from_config(cls, config: TransferConfig) -> "TransferRequest":
        return cls(
            direction=config.direction,
            sources=tuple(config.sources),
            destination=config.destination,
        )

    def plan(self) -> list[tuple[str, str]]:
        """(source, destination) pairs in transfer order."""
        return PathMapper.map_sources(self.sources, self.destination)


@dataclass
class TransferResult:
    """Result of file transfer operation."""

    files_transferred: int = 0
    bytes_transferred: int = 0
    duration_seconds: float = 0.0
    transfers: list[tuple[str, str]] = field(default_factory=list)


class FileTransfer:
    """Copy each source to the destination directory, in order.

    The first failing copy aborts the run; files after it are never
    attempted. The raised TransferError carries the count of files that
    completed before the failure.
    """

    def __init__(
        self,
        copier: FileCopier | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        self.copier = copier or ScpCopier()
        self.progress_callback = progress_callback
        self.state = TransferState.IDLE
        self.result = TransferResult()

    def run(self, session: SSHSession, request: TransferRequest) -> TransferResult:
        """Transfer all files in request over session.

        Args:
            session: Established session to the target
            request: Direction, sources and destination directory

        Returns:
            TransferResult with statistics

        Raises:
            TransferError: A copy failed (files_transferred set on the error)
            RuntimeError: Orchestrator already ran
        """
        if self.state is not TransferState.IDLE:
            raise RuntimeError(f"transfer already {self.state.value}")

        plan = request.plan()
        self.state = TransferState.RUNNING
        start_time = time.time()

        if request.direction is Direction.UPLOAD:
            logger.info("🔼 Uploading ...")
            copy = self.copier.copy_to
        else:
            logger.info("🔽 Downloading ...")
            copy = self.copier.copy_from

        for source, destination in plan:
            try:
                written = copy(session, source, destination)
            except TransferError as e:
                self._abort(start_time)
                e.source = e.source or source
                e.files_transferred = self.result.files_transferred
                raise
            except BaseException:
                # Deadline or interrupt mid-copy
                self._abort(start_time)
                raise

            self.result.files_transferred += 1
            self.result.bytes_transferred += written or 0
            self.result.transfers.append((source, destination))
            logger.info(f"{source} >> {destination}")
            if self.progress_callback:
                self.progress_callback(source, destination)

        self.result.duration_seconds = time.time() - start_time
        self.state = TransferState.COMPLETED
        return self.result

    def _abort(self, start_time: float) -> None:
        self.result.duration_seconds = time.time() - start_time
        self.state = TransferState.ABORTED
        logger.debug(f"Transfer aborted after {self.result.files_transferred} files")


__all__ = [
    "FileTransfer",
    "ProgressCallback",
    "TransferRequest",
    "TransferResult",
    "TransferState",
]
