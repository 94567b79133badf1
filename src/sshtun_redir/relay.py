"""Bidirectional byte relay between the client and the SOCKS endpoint."""

import os
import selectors
import socket
import stat
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .common.exceptions import (
    ClientWriteError,
    ConnectError,
    RelayError,
    RelayPollError,
    SocketCreateError,
    TargetWriteError,
)
from .common.logging import get_logger
from .models import LocalEndpoint

logger = get_logger(__name__)

DEFAULT_BUFFER_SIZE = 8192


@runtime_checkable
class Channel(Protocol):
    """A duplex byte stream whose write side can be closed on its own."""

    def fileno(self) -> int:
        """Descriptor to wait on for readability."""
        ...

    def read(self, size: int) -> bytes:
        """Read up to size bytes; b"" means end of stream."""
        ...

    def write_all(self, data: bytes) -> None:
        """Write every byte, retrying short writes."""
        ...

    def shutdown_write(self) -> None:
        """Signal end of stream to the peer, keeping the read side open."""
        ...

    def close(self) -> None:
        """Release the channel."""
        ...


class SocketChannel:
    """Channel over a connected stream socket."""

    def __init__(self, sock: socket.socket):
        self.sock = sock

    def fileno(self) -> int:
        return self.sock.fileno()

    def read(self, size: int) -> bytes:
        return self.sock.recv(size)

    def write_all(self, data: bytes) -> None:
        self.sock.sendall(data)

    def shutdown_write(self) -> None:
        self.sock.shutdown(socket.SHUT_WR)

    def close(self) -> None:
        self.sock.close()


class StdioChannel:
    """Channel over inherited descriptors, stdin/stdout by default.

    inetd hands over the accepted socket on both descriptors. When the
    write descriptor is not a socket (a pipe, in tests or under other
    supervisors) closing it is the only way to signal end of stream.
    """

    def __init__(self, read_fd: int = 0, write_fd: int = 1):
        self.read_fd = read_fd
        self.write_fd = write_fd

    def fileno(self) -> int:
        return self.read_fd

    def read(self, size: int) -> bytes:
        return os.read(self.read_fd, size)

    def write_all(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = os.write(self.write_fd, view)
            view = view[written:]

    def shutdown_write(self) -> None:
        if stat.S_ISSOCK(os.fstat(self.write_fd).st_mode):
            with socket.socket(fileno=os.dup(self.write_fd)) as sock:
                sock.shutdown(socket.SHUT_WR)
        elif self.write_fd != self.read_fd:
            os.close(self.write_fd)

    def close(self) -> None:
        # Inherited descriptors stay open until the process exits.
        pass


@dataclass
class _Direction:
    """One half of the session: bytes flowing from source to sink."""

    name: str
    source: Channel
    sink: Channel
    write_error: type[RelayError]
    open: bool = True
    transferred: int = 0


class Relay:
    """Copies bytes both ways between two channels on a single thread.

    Waits on both channels with a selector. When one side reaches end of
    stream, the other side's write half is shut down and the remaining
    direction keeps draining. The session ends once both directions are
    closed.
    """

    def __init__(
        self,
        client: Channel,
        target: Channel,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.client = client
        self.target = target
        self.buffer_size = buffer_size
        self.upstream = _Direction("client->target", client, target, TargetWriteError)
        self.downstream = _Direction(
            "target->client", target, client, ClientWriteError
        )
        self._selector: selectors.BaseSelector | None = None

    @property
    def is_open(self) -> bool:
        """True while either direction can still carry data."""
        return self.upstream.open or self.downstream.open

    def run(self) -> tuple[int, int]:
        """Relay until both directions reach end of stream.

        Returns:
            Bytes transferred (client->target, target->client)

        Raises:
            RelayPollError: If waiting for readiness fails
            TargetWriteError: If writing to the target fails
            ClientWriteError: If writing to the client fails
        """
        self._selector = selectors.DefaultSelector()
        try:
            try:
                for direction in (self.upstream, self.downstream):
                    self._selector.register(
                        direction.source.fileno(), selectors.EVENT_READ, direction
                    )
            except (OSError, ValueError) as e:
                raise RelayPollError("poll error") from e

            while self.is_open:
                try:
                    events = self._selector.select()
                except OSError as e:
                    raise RelayPollError("poll error") from e

                for key, _ in events:
                    direction = key.data
                    if direction.open:
                        self._pump(direction)
        finally:
            self._selector.close()
            self._selector = None

        logger.debug(
            "Relay finished",
            sent=self.upstream.transferred,
            received=self.downstream.transferred,
        )
        return self.upstream.transferred, self.downstream.transferred

    def _pump(self, direction: _Direction) -> None:
        """Move one chunk for a readable direction."""
        try:
            data = direction.source.read(self.buffer_size)
        except OSError as e:
            logger.debug("Read failed, closing", direction=direction.name, error=str(e))
            data = b""

        if not data:
            self._close(direction)
            return

        try:
            direction.sink.write_all(data)
        except OSError as e:
            logger.error("Write failed", direction=direction.name, error=str(e))
            raise direction.write_error(f"write error ({direction.name})") from e
        direction.transferred += len(data)

    def _close(self, direction: _Direction) -> None:
        """Mark a direction done and half-close its sink."""
        direction.open = False
        if self._selector is not None:
            self._selector.unregister(direction.source.fileno())
        logger.debug("End of stream", direction=direction.name)

        try:
            direction.sink.shutdown_write()
        except OSError as e:
            # The peer may already be gone; the other direction still drains.
            logger.debug("Half-close failed", direction=direction.name, error=str(e))


def open_target(endpoint: LocalEndpoint) -> socket.socket:
    """Connect a TCP socket to the local SOCKS endpoint.

    Raises:
        SocketCreateError: If the socket cannot be created
        ConnectError: If the connection is refused or fails
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as e:
        raise SocketCreateError("socket error") from e

    try:
        sock.connect(endpoint.address)
    except OSError as e:
        sock.close()
        logger.error("Connect failed", endpoint=endpoint.bind_spec, error=str(e))
        raise ConnectError("connect error") from e

    logger.debug("Connected to SOCKS endpoint", endpoint=endpoint.bind_spec)
    return sock
