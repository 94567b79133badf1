"""Shared pytest fixtures for redirector tests."""

import socket
import threading
from unittest.mock import Mock

import pytest

from sshtun_redir.config import RedirConfig
from sshtun_redir.models import LocalEndpoint, TunnelKey


@pytest.fixture
def mock_subprocess_run(monkeypatch):
    """Mock subprocess.run for testing ssh invocations.

    Returns:
        Mock: Mocked run function, returning exit status 0 by default
    """
    mock_run = Mock()
    mock_run.return_value = Mock(returncode=0)
    monkeypatch.setattr("subprocess.run", mock_run)
    return mock_run


@pytest.fixture
def fake_ssh(tmp_path):
    """Create an executable stand-in for the ssh binary.

    It appends its arguments to calls.log next to itself and exits with
    the status stored in exit_status (0 if missing).
    """
    binary_path = tmp_path / "bin" / "ssh"
    binary_path.parent.mkdir()
    binary_path.write_text(
        "#!/bin/sh\n"
        'dir=$(dirname "$0")\n'
        'echo "$@" >> "$dir/calls.log"\n'
        'if [ -f "$dir/exit_status" ]; then exit "$(cat "$dir/exit_status")"; fi\n'
        "exit 0\n"
    )
    binary_path.chmod(0o755)
    return binary_path


@pytest.fixture
def config(tmp_path, fake_ssh):
    """Config rooted in tmp_path with a fast probe interval."""
    return RedirConfig(
        ssh_binary=str(fake_ssh),
        run_dir=tmp_path / "run",
        log_file=tmp_path / "log" / "redir.log",
        wait_timeout=3,
        probe_interval=0.01,
    )


@pytest.fixture
def key():
    return TunnelKey(user_host="tunnel@bastion.example.com", ssh_port=2222)


@pytest.fixture
def endpoint():
    return LocalEndpoint(port=1080)


def _echo(sock: socket.socket) -> None:
    with sock:
        while True:
            data = sock.recv(4096)
            if not data:
                break
            sock.sendall(data)
        sock.shutdown(socket.SHUT_WR)


@pytest.fixture
def echo_server():
    """TCP echo server on an ephemeral loopback port.

    Yields:
        LocalEndpoint: Where the server listens
    """
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen()
    port = listener.getsockname()[1]

    def serve() -> None:
        try:
            conn, _ = listener.accept()
        except OSError:
            return
        _echo(conn)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield LocalEndpoint(port=port)
    listener.close()
    thread.join(timeout=5)


@pytest.fixture
def echo_peer():
    """One end of a socketpair whose other end echoes everything back.

    Yields:
        socket.socket: The end to hand to the relay as its target
    """
    ours, theirs = socket.socketpair()
    thread = threading.Thread(target=_echo, args=(theirs,), daemon=True)
    thread.start()
    yield ours
    thread.join(timeout=5)
    ours.close()
