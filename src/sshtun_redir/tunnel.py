"""Tunnel lifecycle management: reuse a live ssh master or start one."""

import time
from collections.abc import Callable

from .common.exceptions import TunnelStartError, TunnelTimeoutError
from .common.logging import get_logger
from .config import RedirConfig
from .lock import TunnelLock
from .models import LocalEndpoint, TunnelKey, TunnelState
from .transport import TransportClient

logger = get_logger(__name__)


class TunnelManager:
    """Makes sure a SOCKS tunnel is up before a connection is relayed.

    The check-then-establish sequence runs under a per-tunnel file lock, and
    liveness is re-probed after the lock is taken, so concurrent redirector
    processes for one tunnel start at most one ssh master between them.
    """

    def __init__(
        self,
        config: RedirConfig,
        transport: TransportClient | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize tunnel manager.

        Args:
            config: Redirector configuration
            transport: ssh client wrapper (built from config if None)
            sleep: Sleep function used between readiness probes
        """
        self.config = config
        self.transport = transport if transport is not None else TransportClient(config)
        self._sleep = sleep

    def lock_for(self, key: TunnelKey) -> TunnelLock:
        """Lock guarding establishment of the given tunnel."""
        return TunnelLock(self.config.lock_path(key))

    def ensure_ready(
        self,
        endpoint: LocalEndpoint,
        key: TunnelKey,
        timeout: int | None = None,
    ) -> TunnelState:
        """Return once the tunnel for key answers its health check.

        Args:
            endpoint: Where ssh should bind the SOCKS proxy if it must start
            key: Tunnel to make ready
            timeout: Readiness probes to try after a start (config default if None)

        Returns:
            TunnelState.ALIVE

        Raises:
            LockOpenError: If the lock file cannot be opened
            LockAcquireError: If the lock cannot be taken
            ProbeLaunchError: If ssh cannot be run for a health check
            TunnelLaunchError: If ssh cannot be run to start the master
            TunnelStartError: If ssh exits non-zero while starting
            TunnelTimeoutError: If the master never reports alive in time
        """
        attempts = self.config.wait_timeout if timeout is None else timeout

        with self.lock_for(key):
            if self.transport.probe(key) == TunnelState.ALIVE:
                logger.debug("Reusing live tunnel", tunnel=str(key))
                return TunnelState.ALIVE

            logger.info("Tunnel is down, starting it", tunnel=str(key))
            returncode = self.transport.establish(key, endpoint)
            if returncode != 0:
                logger.error(
                    "ssh refused to start tunnel",
                    tunnel=str(key),
                    returncode=returncode,
                )
                raise TunnelStartError("tunnel start error")

            return self._wait_until_alive(key, attempts)

    def _wait_until_alive(self, key: TunnelKey, attempts: int) -> TunnelState:
        """Poll the health check once per interval, up to attempts times."""
        for attempt in range(1, attempts + 1):
            self._sleep(self.config.probe_interval)
            if self.transport.probe(key) == TunnelState.ALIVE:
                logger.info("Tunnel ready", tunnel=str(key), attempts=attempt)
                return TunnelState.ALIVE

        logger.error("Tunnel did not become ready", tunnel=str(key), attempts=attempts)
        raise TunnelTimeoutError("tunnel ready timeout")
