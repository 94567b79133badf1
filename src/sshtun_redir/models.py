"""Tunnel models using Pydantic for type safety and validation."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common.utils import DEFAULT_SSH_PORT, is_safe_name

LOOPBACK_HOST = "127.0.0.1"


class TunnelState(str, Enum):
    """Liveness of an ssh master as last observed by a probe."""

    UNKNOWN = "unknown"
    ALIVE = "alive"
    DEAD = "dead"


class TunnelKey(BaseModel):
    """Identifies one logical tunnel: the ssh destination and its port."""

    model_config = ConfigDict(frozen=True)

    user_host: str = Field(min_length=1, description="ssh destination, e.g. user@host")
    ssh_port: int = Field(
        default=DEFAULT_SSH_PORT, ge=1, le=65535, description="ssh server port"
    )

    @field_validator("user_host")
    @classmethod
    def validate_user_host(cls, v: str) -> str:
        """Reject characters that could escape a path or argument."""
        if not is_safe_name(v):
            raise ValueError(
                "user_host may only contain letters, digits, '_', '-', '.' and '@'"
            )
        return v

    @property
    def stem(self) -> str:
        """File name stem shared by the control socket and the lock file."""
        return f"{self.user_host}:{self.ssh_port}"

    def __str__(self) -> str:
        return self.stem


class LocalEndpoint(BaseModel):
    """Loopback address where ssh exposes the SOCKS proxy."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default=LOOPBACK_HOST, description="Bind address")
    port: int = Field(ge=1, le=65535, description="SOCKS port")

    @property
    def address(self) -> tuple[str, int]:
        """Socket address tuple for connect()."""
        return (self.host, self.port)

    @property
    def bind_spec(self) -> str:
        """Value for ssh -D."""
        return f"{self.host}:{self.port}"
