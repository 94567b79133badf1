"""Custom exceptions for the SSH tunnel redirector.

Every exception carries the process exit status the command line entry
point reports for it, so the invoking supervisor can tell causes apart.
"""


class RedirError(Exception):
    """Base exception for all redirector errors."""

    exit_code = 1


# Input validation


class UsageError(RedirError):
    """Raised when the command line has the wrong shape."""

    exit_code = 2


class InvalidUserHostError(RedirError):
    """Raised when the ssh user@host identifier contains unsafe characters."""

    exit_code = 3


class InvalidPortError(RedirError):
    """Raised when the local SOCKS port is out of range."""

    exit_code = 4


class InvalidSSHPortError(RedirError):
    """Raised when the ssh port is out of range."""

    exit_code = 5


# Relay


class RelayError(RedirError):
    """Base exception for relay failures."""

    exit_code = 10


class SocketCreateError(RelayError):
    """Raised when the target socket cannot be created."""

    exit_code = 11


class ConnectError(RelayError):
    """Raised when the local SOCKS endpoint refuses the connection."""

    exit_code = 12


class RelayPollError(RelayError):
    """Raised when waiting for channel readiness fails."""

    exit_code = 13


class TargetWriteError(RelayError):
    """Raised when writing to the target channel fails."""

    exit_code = 14


class ClientWriteError(RelayError):
    """Raised when writing to the client channel fails."""

    exit_code = 15


# Tunnel lifecycle


class TunnelError(RedirError):
    """Base exception for tunnel lifecycle failures."""

    exit_code = 20


class ProbeLaunchError(TunnelError):
    """Raised when the ssh health check cannot even be executed."""

    exit_code = 21


class LockOpenError(TunnelError):
    """Raised when the per-tunnel lock file cannot be opened."""

    exit_code = 22


class LockAcquireError(TunnelError):
    """Raised when the exclusive lock cannot be taken."""

    exit_code = 23


class TunnelLaunchError(TunnelError):
    """Raised when the ssh master process cannot be executed."""

    exit_code = 24


class TunnelStartError(TunnelError):
    """Raised when ssh refuses to bring the tunnel up."""

    exit_code = 25


class TunnelTimeoutError(TunnelError):
    """Raised when the tunnel does not become ready in time."""

    exit_code = 26


class BinaryNotFoundError(RedirError):
    """Raised when the ssh binary is not found or not executable."""

    exit_code = 21
