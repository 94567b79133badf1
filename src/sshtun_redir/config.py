"""Runtime configuration for the redirector."""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import TunnelKey

ENV_PREFIX = "SSHTUN_REDIR_"


class RedirConfig(BaseModel):
    """Pydantic model for redirector settings.

    Defaults match a system-wide install run from inetd.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True, validate_assignment=True, extra="forbid"
    )

    # External ssh client
    ssh_binary: str = Field(default="/usr/bin/ssh", description="ssh client binary")
    control_persist: str = Field(
        default="10m",
        pattern=r"^(yes|no|\d+[smhdw]?)$",
        description="ControlPersist value for the master",
    )
    server_alive_interval: int = Field(
        default=30, ge=1, le=3600, description="ServerAliveInterval seconds"
    )
    server_alive_count_max: int = Field(
        default=2, ge=1, le=100, description="ServerAliveCountMax"
    )

    # Filesystem layout
    run_dir: Path = Field(
        default=Path("/run/ssh-tunnel"), description="Control sockets and locks"
    )
    log_file: Path = Field(
        default=Path("/var/log/ssh-tunnel/redir.log"),
        description="Append-only log for ssh master output",
    )

    # Readiness wait
    wait_timeout: int = Field(
        default=10, ge=1, le=300, description="Readiness probes before giving up"
    )
    probe_interval: float = Field(
        default=1.0, gt=0.0, le=60.0, description="Seconds between readiness probes"
    )

    # Relay
    buffer_size: int = Field(
        default=8192, ge=512, le=1048576, description="Relay chunk size in bytes"
    )

    @field_validator("ssh_binary")
    @classmethod
    def validate_ssh_binary(cls, v: str) -> str:
        """ssh binary must be given as a non-empty path or name."""
        if not v:
            raise ValueError("ssh_binary cannot be empty")
        return v

    def control_path(self, key: TunnelKey) -> Path:
        """ControlPath of the ssh master for a tunnel."""
        return self.run_dir / f"{key.stem}.ctl"

    def lock_path(self, key: TunnelKey) -> Path:
        """Lock file serialising establishment of a tunnel."""
        return self.run_dir / f"{key.stem}.lock"

    @classmethod
    def from_env(cls, **overrides: Any) -> "RedirConfig":
        """Build config from SSHTUN_REDIR_* environment variables.

        Explicit keyword overrides win over the environment; None values are
        ignored so CLI options that were not given fall through.
        """
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            env_value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if env_value is not None:
                values[name] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
