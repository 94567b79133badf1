"""Cross-process exclusive lock keyed by tunnel."""

import fcntl
import os
from pathlib import Path
from types import TracebackType
from typing import Literal

from .common.exceptions import LockAcquireError, LockOpenError
from .common.logging import get_logger

logger = get_logger(__name__)


class TunnelLock:
    """Blocking flock on a per-tunnel lock file with context manager support.

    flock locks belong to the open file description, so two TunnelLock
    instances exclude each other whether they live in different processes
    or in different threads of one process.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)
        self._fd: int | None = None

    @property
    def locked(self) -> bool:
        """Whether this instance currently holds the lock."""
        return self._fd is not None

    def acquire(self) -> None:
        """Open (creating if absent) and lock the file, waiting indefinitely.

        Raises:
            LockOpenError: If the lock file cannot be created or opened
            LockAcquireError: If flock fails
        """
        if self._fd is not None:
            return

        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_CREAT | os.O_RDWR, 0o600)
        except OSError as e:
            logger.error("Failed to open lock file", path=str(self.path), error=str(e))
            raise LockOpenError("failed to open lock file") from e

        logger.debug("Waiting for tunnel lock", path=str(self.path))
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError as e:
            os.close(fd)
            logger.error("Failed to acquire lock", path=str(self.path), error=str(e))
            raise LockAcquireError("failed to acquire lock") from e

        self._fd = fd
        logger.debug("Tunnel lock acquired", path=str(self.path))

    def release(self) -> None:
        """Unlock and close the lock file. Safe to call when not held."""
        if self._fd is None:
            return

        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
        logger.debug("Tunnel lock released", path=str(self.path))

    def __enter__(self) -> "TunnelLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> Literal[False]:
        self.release()
        return False  # Don't suppress exceptions
