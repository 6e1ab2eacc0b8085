"""Network reachability checks and change notifications."""

import logging
import socket
import threading
from typing import Callable, List, Optional
from urllib.parse import urlparse

import requests

from application.ports import ConnectivityOracle, NetworkStatusProvider

logger = logging.getLogger("todo_sync.connectivity")

DEFAULT_PROBE_URL = "https://clients3.google.com/generate_204"


class HttpConnectivityOracle(ConnectivityOracle):
    """Online means: the probe host resolves (link) and the probe URL answers (internet).

    Every call probes again; any failure counts as offline.
    """

    def __init__(
        self,
        probe_url: str = DEFAULT_PROBE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 5.0,
    ) -> None:
        self.probe_url = probe_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def _has_link(self) -> bool:
        parsed = urlparse(self.probe_url)
        host = parsed.hostname
        if not host:
            return False
        port = parsed.port or (443 if parsed.scheme == "https" else 80)
        socket.getaddrinfo(host, port)
        return True

    def _internet_reachable(self) -> bool:
        response = self.session.get(self.probe_url, timeout=self.timeout, allow_redirects=False)
        return response.status_code < 400

    def is_online(self) -> bool:
        try:
            return self._has_link() and self._internet_reachable()
        except (OSError, requests.RequestException) as exc:
            logger.debug("Connectivity probe failed: %s", exc)
            return False
        except Exception as exc:  # pragma: no cover - unexpected probe failure
            logger.debug("Connectivity probe crashed: %s", exc)
            return False


class ConnectivityWatcher(NetworkStatusProvider):
    """Polls an oracle and notifies subscribers on online/offline transitions."""

    def __init__(self, oracle: ConnectivityOracle, interval: float = 30.0) -> None:
        self.oracle = oracle
        self.interval = interval
        self._callbacks: List[Callable[[bool], None]] = []
        self._lock = threading.Lock()
        self._last: Optional[bool] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def is_online(self) -> bool:
        return self.oracle.is_online()

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def poll(self) -> bool:
        """Check once; fire callbacks if the state changed since the previous poll."""
        online = bool(self.oracle.is_online())
        with self._lock:
            changed = self._last is not None and online != self._last
            first = self._last is None
            self._last = online
            callbacks = list(self._callbacks)
        if changed or (first and online):
            logger.info("Connectivity changed: %s", "online" if online else "offline")
            for callback in callbacks:
                try:
                    callback(online)
                except Exception as exc:
                    logger.warning("Connectivity callback failed: %s", exc)
        return online

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="connectivity-watcher")
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.is_set():
            self.poll()
            self._stop.wait(self.interval)
