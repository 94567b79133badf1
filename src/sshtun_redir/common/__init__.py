"""Common utilities and shared functionality."""

from .exceptions import (
    BinaryNotFoundError,
    ClientWriteError,
    ConnectError,
    InvalidPortError,
    InvalidSSHPortError,
    InvalidUserHostError,
    LockAcquireError,
    LockOpenError,
    ProbeLaunchError,
    RedirError,
    RelayError,
    RelayPollError,
    SocketCreateError,
    TargetWriteError,
    TunnelError,
    TunnelLaunchError,
    TunnelStartError,
    TunnelTimeoutError,
    UsageError,
)
from .logging import get_logger, setup_logging
from .utils import (
    DEFAULT_SSH_PORT,
    MAX_PORT,
    MIN_PORT,
    is_safe_name,
    parse_port,
    validate_port,
)

__all__ = [
    # Exceptions
    "RedirError",
    "UsageError",
    "InvalidUserHostError",
    "InvalidPortError",
    "InvalidSSHPortError",
    "RelayError",
    "SocketCreateError",
    "ConnectError",
    "RelayPollError",
    "TargetWriteError",
    "ClientWriteError",
    "TunnelError",
    "ProbeLaunchError",
    "LockOpenError",
    "LockAcquireError",
    "TunnelLaunchError",
    "TunnelStartError",
    "TunnelTimeoutError",
    "BinaryNotFoundError",
    # Logging
    "get_logger",
    "setup_logging",
    # Utils
    "is_safe_name",
    "parse_port",
    "validate_port",
    "DEFAULT_SSH_PORT",
    "MIN_PORT",
    "MAX_PORT",
]
