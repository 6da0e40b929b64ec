import threading

import structlog

from release_contributors.core.config import settings
from release_contributors.services.release_cache import ReleaseCache

logger = structlog.get_logger()


class BackgroundRefresher:
    """Keeps the release cache warm from a daemon thread.

    Refreshes once immediately, then every ``interval_seconds`` until
    ``stop()`` is called. A failing refresh is logged and the loop carries on.
    """

    def __init__(
        self,
        cache: ReleaseCache,
        interval_seconds: float | None = None,
        stop_event: threading.Event | None = None,
    ) -> None:
        self.cache = cache
        self.interval_seconds = (
            settings.refresh_interval_seconds if interval_seconds is None else interval_seconds
        )
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._stop_event = stop_event or threading.Event()
        self._thread: threading.Thread | None = None
        self.cycles = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        if self.is_running:
            logger.warning("Background refresher is already running")
            return False

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop, name="release-cache-refresher", daemon=True
        )
        self._thread.start()
        logger.info("Background refresher started", interval_seconds=self.interval_seconds)
        return True

    def stop(self, timeout: float | None = 10.0) -> None:
        if not self.is_running:
            return

        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        logger.info("Background refresher stopped", cycles=self.cycles)

    def run_once(self) -> None:
        """One refresh cycle; never raises."""
        try:
            releases = self.cache.refresh()
        except Exception:
            logger.exception("Release cache refresh failed")
        else:
            logger.info("Refresh cycle complete", cached_releases=len(releases))
        finally:
            self.cycles += 1

    def _run_loop(self) -> None:
        self.run_once()
        while not self._stop_event.wait(self.interval_seconds):
            self.run_once()
