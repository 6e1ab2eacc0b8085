import time
from threading import Lock
from typing import Any, Mapping, Optional


def _header(headers: Mapping[str, Any], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


class RateLimiter:
    """Backs off requests after ``Retry-After`` / exhausted rate-limit headers."""

    def __init__(self, exhausted_wait: float = 60.0, max_sleep: float = 2.0) -> None:
        self._lock = Lock()
        self._next_ts = 0.0
        self.exhausted_wait = exhausted_wait
        self.max_sleep = max_sleep
        self.last_remaining: Optional[int] = None
        self.last_wait: float = 0.0

    def acquire(self) -> None:
        while True:
            with self._lock:
                wait = self._next_ts - time.time()
            if wait <= 0:
                return
            time.sleep(min(wait, self.max_sleep))

    def update(self, headers: Mapping[str, Any]) -> None:
        retry_after = _header(headers, "Retry-After")
        remaining = _header(headers, "X-RateLimit-Remaining")
        reset = _header(headers, "X-RateLimit-Reset")
        with self._lock:
            now = time.time()
            if retry_after:
                try:
                    self._next_ts = max(self._next_ts, now + float(retry_after))
                except ValueError:
                    pass
            if remaining is not None:
                try:
                    self.last_remaining = int(remaining)
                except ValueError:
                    self.last_remaining = None
                if self.last_remaining is not None and self.last_remaining <= 0:
                    resume = now + self.exhausted_wait
                    if reset:
                        try:
                            reset_ts = float(reset)
                            if reset_ts > now:
                                resume = reset_ts
                        except ValueError:
                            pass
                    self._next_ts = max(self._next_ts, resume)
            self.last_wait = max(0.0, self._next_ts - now)
