"""sshtun-redir - relay inetd connections through on-demand ssh SOCKS tunnels."""

from .api import parse_target, redirect
from .common.exceptions import (
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
from .common.logging import get_logger, setup_logging
from .common.utils import is_safe_name, parse_port, validate_port
from .config import RedirConfig
from .lock import TunnelLock
from .models import LocalEndpoint, TunnelKey, TunnelState
from .relay import Relay, SocketChannel, StdioChannel, open_target
from .transport import TransportClient
from .tunnel import TunnelManager

__version__ = "0.1.0"


__all__ = [
    # High-level API
    "parse_target",
    "redirect",
    # Tunnel management
    "TunnelManager",
    "TunnelLock",
    "TransportClient",
    "TunnelKey",
    "TunnelState",
    "LocalEndpoint",
    "RedirConfig",
    # Relay
    "Relay",
    "SocketChannel",
    "StdioChannel",
    "open_target",
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
    # Utilities
    "get_logger",
    "setup_logging",
    "is_safe_name",
    "parse_port",
    "validate_port",
]
