import logging
import random
import time
from typing import Any, Callable, Dict, Iterable, Optional

import requests

from .rate_limiter import RateLimiter

logger = logging.getLogger("todo_sync.remote")


class RemoteStoreError(RuntimeError):
    pass


class RemoteUnavailableError(RemoteStoreError):
    """Backend not reachable: network failure, timeout, 5xx or throttling."""


class RemoteRejectedError(RemoteStoreError):
    """Backend reachable but refused the request (auth, validation, missing record)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: float = 30,
        max_attempts: int = 3,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.token_provider = token_provider
        self.rate_limiter = rate_limiter or RateLimiter()
        self.timeout = timeout
        self.max_attempts = max_attempts

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        accept_statuses: Iterable[int] = (),
    ) -> requests.Response:
        url = self.url(path)
        kwargs: Dict[str, Any] = {"headers": self._headers(), "timeout": self.timeout}
        for name, value in (("json", json), ("params", params), ("data", data), ("files", files)):
            if value is not None:
                kwargs[name] = value
        accepted = set(accept_statuses)
        attempt = 0
        delay = 1.0
        while True:
            attempt += 1
            try:
                self.rate_limiter.acquire()
                response = getattr(self.session, method.lower())(url, **kwargs)
            except requests.RequestException as exc:
                if attempt >= self.max_attempts:
                    raise RemoteUnavailableError(f"{method.upper()} {url} failed: {exc}") from exc
                logger.debug("%s %s network error (attempt %s): %s", method.upper(), url, attempt, exc)
                self._sleep(delay)
                delay *= 2
                continue
            self.rate_limiter.update(response.headers)
            status = response.status_code
            if status in accepted:
                return response
            if status >= 500 or status == 429:
                if attempt < self.max_attempts:
                    logger.debug("%s %s retry #%s due to HTTP %s", method.upper(), url, attempt, status)
                    self._sleep(delay)
                    delay *= 2
                    continue
                raise RemoteUnavailableError(f"HTTP {status} from {method.upper()} {url}")
            if status >= 400:
                raise RemoteRejectedError(f"HTTP {status}: {response.text}", status_code=status)
            return response

    @staticmethod
    def json_body(response: requests.Response) -> Any:
        if response.status_code == 204 or not getattr(response, "content", b"x"):
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteStoreError(f"Invalid JSON from backend: {exc}") from exc

    def _sleep(self, base_delay: float) -> None:
        time.sleep(base_delay + random.uniform(0, base_delay))
