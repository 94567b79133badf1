"""Tests for tunnel models."""

import pytest
from pydantic import ValidationError

from sshtun_redir.models import LocalEndpoint, TunnelKey, TunnelState


class TestTunnelKey:
    """Test TunnelKey model."""

    def test_defaults_to_ssh_port(self):
        key = TunnelKey(user_host="me@host")
        assert key.ssh_port == 22
        assert key.stem == "me@host:22"
        assert str(key) == "me@host:22"

    def test_rejects_unsafe_user_host(self):
        with pytest.raises(ValidationError, match="user_host may only contain"):
            TunnelKey(user_host="me@host;id")

    def test_rejects_empty_user_host(self):
        with pytest.raises(ValidationError):
            TunnelKey(user_host="")

    @pytest.mark.parametrize("port", [0, 65536, -22])
    def test_rejects_bad_port(self, port):
        with pytest.raises(ValidationError):
            TunnelKey(user_host="host", ssh_port=port)

    def test_is_hashable_and_immutable(self):
        """Keys compare by value and cannot be modified."""
        a = TunnelKey(user_host="host", ssh_port=2222)
        b = TunnelKey(user_host="host", ssh_port=2222)
        assert a == b
        assert len({a, b}) == 1

        with pytest.raises(ValidationError):
            a.ssh_port = 22  # type: ignore[misc]


class TestLocalEndpoint:
    """Test LocalEndpoint model."""

    def test_loopback_by_default(self):
        endpoint = LocalEndpoint(port=1080)
        assert endpoint.host == "127.0.0.1"
        assert endpoint.address == ("127.0.0.1", 1080)
        assert endpoint.bind_spec == "127.0.0.1:1080"

    @pytest.mark.parametrize("port", [0, 65536])
    def test_rejects_bad_port(self, port):
        with pytest.raises(ValidationError):
            LocalEndpoint(port=port)


def test_tunnel_state_values():
    assert TunnelState.ALIVE.value == "alive"
    assert TunnelState.DEAD.value == "dead"
    assert TunnelState.UNKNOWN.value == "unknown"
