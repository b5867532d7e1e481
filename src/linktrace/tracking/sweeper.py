"""Expiry Sweeper - background eviction of stale tracking sessions."""

import atexit, logging, threading
from datetime import timedelta
from typing import Dict, List, Optional

from linktrace.common.constants import LifecycleConstants
from linktrace.tracking.store import Clock, SessionStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Daemon thread that periodically sweeps a SessionStore."""

    DEFAULT_INTERVAL = timedelta(hours=LifecycleConstants.SWEEP_INTERVAL_HOURS)
    DEFAULT_RETENTION = timedelta(hours=LifecycleConstants.RETENTION_HOURS)
    DEFAULT_SHUTDOWN_TIMEOUT = LifecycleConstants.SHUTDOWN_TIMEOUT_SECONDS

    def __init__(
        self,
        store: SessionStore,
        interval: timedelta = DEFAULT_INTERVAL,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Optional[Clock] = None,
    ):
        """Initialize the sweeper. Call ``start()`` to begin ticking.

        Args:
            store: Store to sweep.
            interval: Time between sweeps.
            retention: Sessions older than this are evicted.
            clock: Time source. Defaults to the store's clock.
        """
        if interval <= timedelta(0):
            raise ValueError("Sweep interval must be positive")
        self.store = store
        self.interval = interval
        self.retention = retention
        self.clock = clock or store.clock

        self._shutdown_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        # Statistics
        self._sweeps_completed = 0
        self._sweeps_failed = 0
        self._sessions_evicted = 0
        self._stats_lock = threading.Lock()

        # Register shutdown hook
        atexit.register(self.shutdown)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background sweeper thread."""
        if self.is_running:
            return
        self._shutdown_event.clear()
        self._thread = threading.Thread(
            target=self._sweep_loop,
            name="ExpirySweeper",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            f"Expiry sweeper started (interval={self.interval}, "
            f"retention={self.retention})"
        )

    def _sweep_loop(self) -> None:
        """Tick until shutdown. A failed tick never ends the loop."""
        while not self._shutdown_event.wait(self.interval.total_seconds()):
            self.run_once()
        logger.info("Expiry sweeper stopped")

    def run_once(self) -> List[str]:
        """Run a single sweep.

        Returns:
            Ids evicted by this sweep. Empty if the sweep failed.
        """
        try:
            evicted = self.store.sweep(self.clock(), self.retention)
        except Exception as e:
            with self._stats_lock:
                self._sweeps_failed += 1
            logger.error(f"Expiry sweep failed: {e}", exc_info=True)
            return []

        for session_id in evicted:
            logger.info(f"Cleaned up tracking data for ID: {session_id}")
        with self._stats_lock:
            self._sweeps_completed += 1
            self._sessions_evicted += len(evicted)
        return evicted

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Stop the sweeper thread.

        Args:
            timeout: Maximum time to wait for the thread. Uses default if None.
        """
        if self._shutdown_event.is_set():
            return  # Already shutdown

        timeout = timeout if timeout is not None else self.DEFAULT_SHUTDOWN_TIMEOUT
        self._shutdown_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Expiry sweeper did not stop cleanly")

        logger.info(
            f"Expiry sweeper shutdown complete. "
            f"Sweeps: {self._sweeps_completed}, "
            f"Failed: {self._sweeps_failed}, "
            f"Evicted: {self._sessions_evicted}"
        )

    def stats(self) -> Dict[str, int]:
        with self._stats_lock:
            return {
                "sweeps_completed": self._sweeps_completed,
                "sweeps_failed": self._sweeps_failed,
                "sessions_evicted": self._sessions_evicted,
            }
