from __future__ import annotations

from typing import Any, Optional

import requests

from .rate_limiter import RateLimiter


class ThrottledSession:
    """requests.Session wrapper that takes one permit per outgoing request.

    Share one instance (or one RateLimiter) between threads to keep all
    of them under the same requests-per-second budget."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        session: Optional[requests.Session] = None,
        timeout: float = 20,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._session = session or requests.Session()
        self._timeout = timeout

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Wait for a permit, then send the request."""
        self._rate_limiter.acquire()
        kwargs.setdefault("timeout", self._timeout)
        return self._session.request(method=method, url=url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", url, **kwargs)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> ThrottledSession:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
