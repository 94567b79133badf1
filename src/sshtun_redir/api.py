"""High-level API for the SSH tunnel redirector.

This module wires argument validation, the tunnel manager and the relay
together for one client connection.
"""

from .common.exceptions import (
    InvalidPortError,
    InvalidSSHPortError,
    InvalidUserHostError,
)
from .common.logging import get_logger
from .common.utils import DEFAULT_SSH_PORT, is_safe_name, parse_port
from .config import RedirConfig
from .models import LocalEndpoint, TunnelKey
from .relay import Channel, Relay, SocketChannel, StdioChannel, open_target
from .tunnel import TunnelManager

logger = get_logger(__name__)


def parse_target(
    local_port: str, user_host: str, ssh_port: str | None = None
) -> tuple[LocalEndpoint, TunnelKey]:
    """Validate raw command line arguments.

    Args:
        local_port: SOCKS port on the loopback interface
        user_host: ssh destination
        ssh_port: ssh server port (22 if None)

    Returns:
        The SOCKS endpoint and the tunnel key

    Raises:
        InvalidUserHostError: If user_host is empty or has unsafe characters
        InvalidPortError: If local_port is not a port number
        InvalidSSHPortError: If ssh_port is not a port number

    Example:
        >>> endpoint, key = parse_target("1080", "me@bastion.example.com")
        >>> key.stem
        'me@bastion.example.com:22'
    """
    if not user_host or not is_safe_name(user_host):
        raise InvalidUserHostError("invalid ssh-user-host")

    try:
        port = parse_port(local_port, "Local port")
    except ValueError as e:
        raise InvalidPortError("invalid port") from e

    remote_port = DEFAULT_SSH_PORT
    if ssh_port is not None:
        try:
            remote_port = parse_port(ssh_port, "SSH port")
        except ValueError as e:
            raise InvalidSSHPortError("invalid ssh port") from e

    return LocalEndpoint(port=port), TunnelKey(user_host=user_host, ssh_port=remote_port)


def redirect(
    endpoint: LocalEndpoint,
    key: TunnelKey,
    config: RedirConfig | None = None,
    *,
    client: Channel | None = None,
    manager: TunnelManager | None = None,
) -> tuple[int, int]:
    """Bring the tunnel up and relay one client connection through it.

    The tunnel lock is released before relaying starts.

    Args:
        endpoint: Local SOCKS endpoint
        key: Tunnel to use
        config: Redirector configuration (defaults if None)
        client: Client channel (stdin/stdout if None)
        manager: Tunnel manager (built from config if None)

    Returns:
        Bytes relayed (client->target, target->client)

    Raises:
        RedirError: Any tunnel or relay failure
    """
    if config is None:
        config = RedirConfig()
    if manager is None:
        manager = TunnelManager(config)
    if client is None:
        client = StdioChannel()

    manager.ensure_ready(endpoint, key)

    target = SocketChannel(open_target(endpoint))
    try:
        sent, received = Relay(client, target, config.buffer_size).run()
    finally:
        target.close()

    logger.info("Connection relayed", tunnel=str(key), sent=sent, received=received)
    return sent, received
