"""Process management for the ssh client binary."""

import os
import shutil
import subprocess
from pathlib import Path

from .common.exceptions import (
    BinaryNotFoundError,
    ProbeLaunchError,
    TunnelLaunchError,
)
from .common.logging import get_logger
from .config import RedirConfig
from .models import LocalEndpoint, TunnelKey, TunnelState

logger = get_logger(__name__)


class TransportClient:
    """Runs the ssh client to probe and start ControlMaster tunnels.

    Every invocation is an argument vector; nothing goes through a shell.
    The destination always follows "--" so ssh never reads it as an option.
    """

    def __init__(self, config: RedirConfig):
        """Initialize TransportClient with the redirector config.

        Args:
            config: Redirector configuration

        Raises:
            BinaryNotFoundError: If the ssh binary doesn't exist or isn't executable
        """
        self.config = config
        self.binary_path = self.find_ssh_binary(config.ssh_binary)

    @staticmethod
    def find_ssh_binary(binary: str) -> str:
        """Resolve the ssh binary to an executable path.

        Bare names are looked up in PATH, anything with a slash is used as is.

        Raises:
            BinaryNotFoundError: If binary cannot be found
        """
        if os.sep not in binary:
            found = shutil.which(binary)
            if found is None:
                raise BinaryNotFoundError(f"{binary} not found in PATH")
            return found

        path = Path(binary)
        if not path.is_file():
            raise BinaryNotFoundError(f"Binary not found: {binary}")
        if not os.access(binary, os.X_OK):
            raise BinaryNotFoundError(f"Binary is not executable: {binary}")
        return binary

    def check_command(self, key: TunnelKey) -> list[str]:
        """Argument vector for `ssh -O check` against the tunnel's master."""
        return [
            self.binary_path,
            "-p",
            str(key.ssh_port),
            "-S",
            str(self.config.control_path(key)),
            "-O",
            "check",
            "--",
            key.user_host,
        ]

    def establish_command(self, key: TunnelKey, endpoint: LocalEndpoint) -> list[str]:
        """Argument vector that starts a backgrounded master with a SOCKS proxy."""
        config = self.config
        return [
            self.binary_path,
            "-o",
            "ExitOnForwardFailure=yes",
            "-o",
            "ControlMaster=yes",
            "-o",
            f"ControlPath={config.control_path(key)}",
            "-o",
            f"ControlPersist={config.control_persist}",
            "-o",
            f"ServerAliveInterval={config.server_alive_interval}",
            "-o",
            f"ServerAliveCountMax={config.server_alive_count_max}",
            "-p",
            str(key.ssh_port),
            "-N",
            "-f",
            "-D",
            endpoint.bind_spec,
            "--",
            key.user_host,
        ]

    def check(self, key: TunnelKey) -> bool:
        """Ask the master for the tunnel whether it is alive.

        Returns:
            True if `ssh -O check` exits with status 0

        Raises:
            ProbeLaunchError: If ssh cannot be executed at all
        """
        try:
            result = subprocess.run(
                self.check_command(key),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            logger.error("Failed to run ssh check", tunnel=str(key), error=str(e))
            raise ProbeLaunchError("exec check error") from e

        alive = result.returncode == 0
        logger.debug("Tunnel probed", tunnel=str(key), returncode=result.returncode)
        return alive

    def probe(self, key: TunnelKey) -> TunnelState:
        """Probe and report the tunnel state."""
        return TunnelState.ALIVE if self.check(key) else TunnelState.DEAD

    def establish(self, key: TunnelKey, endpoint: LocalEndpoint) -> int:
        """Start the ssh master and wait for it to background itself.

        ssh forks into the background (-f) once authentication and the
        forward succeed, so the returned status reflects startup only. Output
        is appended to the diagnostic log.

        Returns:
            Exit status of the foreground ssh process

        Raises:
            TunnelLaunchError: If the log cannot be opened or ssh cannot be executed
        """
        command = self.establish_command(key, endpoint)
        logger.info(
            "Starting ssh master",
            tunnel=str(key),
            endpoint=endpoint.bind_spec,
            log_file=str(self.config.log_file),
        )
        try:
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config.log_file, "ab") as log:
                result = subprocess.run(
                    command,
                    stdin=subprocess.DEVNULL,
                    stdout=log,
                    stderr=log,
                    close_fds=True,
                    start_new_session=True,
                    check=False,
                )
        except OSError as e:
            logger.error("Failed to run ssh master", tunnel=str(key), error=str(e))
            raise TunnelLaunchError("exec start error") from e

        logger.info(
            "ssh master returned", tunnel=str(key), returncode=result.returncode
        )
        return result.returncode
