"""Self-ping loop that keeps an auto-sleeping host awake."""

import logging
import threading
import time
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

USER_AGENT = "Keep-Alive-Service"
INITIAL_DELAY_SECONDS = 60
REQUEST_TIMEOUT = 10


class KeepAlive:
    """Periodically GETs ``<base_url>/health`` on a daemon thread."""

    def __init__(
        self,
        base_url: str,
        enabled: bool,
        interval_minutes: int = 14,
        initial_delay: float = INITIAL_DELAY_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.enabled = enabled and bool(self.base_url)
        self.interval_minutes = interval_minutes
        self.initial_delay = initial_delay
        self._session = session or requests.Session()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._pings = 0

    @property
    def pings(self) -> int:
        with self._lock:
            return self._pings

    def describe(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "pings": self.pings,
            "intervalDescription": f"{self.interval_minutes} minutes",
        }

    def start(self) -> bool:
        if not self.enabled:
            logger.info("Keep-alive: disabled (requires production mode and RENDER_EXTERNAL_URL)")
            return False
        if self._thread is not None and self._thread.is_alive():
            logger.info("Keep-alive: already running")
            return True

        logger.info("Keep-alive: pinging %s/health every %d minutes", self.base_url, self.interval_minutes)
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="keep-alive", daemon=True)
        self._thread.start()
        return True

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=REQUEST_TIMEOUT + 1)
            self._thread = None

    def _run(self) -> None:
        delay = self.initial_delay
        while not self._stop.wait(delay):
            self.ping()
            delay = self.interval_minutes * 60

    def ping(self) -> bool:
        started = time.monotonic()
        try:
            response = self._session.get(
                f"{self.base_url}/health",
                headers={"User-Agent": USER_AGENT},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            logger.warning("Keep-alive: ping #%d error - %s", self.pings, exc)
            return False

        duration_ms = int((time.monotonic() - started) * 1000)
        with self._lock:
            self._pings += 1
            count = self._pings
        if response.status_code == 200:
            logger.info("Keep-alive: ping #%d successful (%dms)", count, duration_ms)
            return True
        logger.warning("Keep-alive: ping #%d failed with status %s", count, response.status_code)
        return False
