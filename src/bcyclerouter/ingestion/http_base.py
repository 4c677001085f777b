from __future__ import annotations

# `logging` reports slow or failing feeds without hiding them behind silent fallbacks.
import logging
# `random` adds jitter to client-side throttling so bursts from several processes do not line up.
import random
# `time` provides the monotonic clock and sleeping used by the throttle.
import time
from typing import Any, Callable, Mapping, MutableMapping, Optional

# `requests` performs the HTTP calls; this module wraps it so callers only ever see `FetchError`.
import requests
# `HTTPAdapter` lets us mount a retry policy onto the session.
from requests.adapters import HTTPAdapter
# `Retry` is configured with zero retries by default: the station poll already acts as the retry loop.
from urllib3.util.retry import Retry

from bcyclerouter.errors import FetchError


logger = logging.getLogger(__name__)


class _RateLimiter:
    """
    Minimal client-side throttle.

    Public geocoding endpoints (Nominatim) ask for at most one request per second;
    this keeps us under that without any server-side feedback.
    """

    def __init__(
        self,
        *,
        min_interval_s: float,
        jitter_s: float = 0.0,
        now_fn: Callable[[], float] = time.monotonic,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        self._min_interval_s = max(float(min_interval_s), 0.0)
        self._jitter_s = max(float(jitter_s), 0.0)
        self._now = now_fn
        self._sleep = sleep_fn
        self._next_allowed_at = 0.0

    def wait(self) -> None:
        if self._min_interval_s <= 0:
            return
        now = float(self._now())
        remaining = self._next_allowed_at - now
        if remaining > 0:
            jitter = random.random() * self._jitter_s if self._jitter_s else 0.0
            self._sleep(remaining + jitter)
            now = float(self._now())
        self._next_allowed_at = now + self._min_interval_s


class JsonHttpClient:
    """
    Small blocking JSON-over-HTTP client shared by the GBFS feeds and the geocoder.

    - One `requests.Session` per client (keep-alive, stable User-Agent).
    - Transport errors, non-2xx statuses and invalid JSON all surface as `FetchError`.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 30.0,
        max_retries: int = 0,
        backoff_factor: float = 0.5,
        min_request_interval_s: float = 0.0,
        request_jitter_s: float = 0.0,
        user_agent: str = "bcyclerouter/0.1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._rate_limiter = _RateLimiter(
            min_interval_s=min_request_interval_s,
            jitter_s=request_jitter_s,
        )

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})

        retry = Retry(
            total=max_retries,
            connect=max_retries,
            read=max_retries,
            status=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            respect_retry_after_header=True,
            # Surface the final response so we can raise a single `FetchError` with its status.
            raise_on_status=False,
        )
        self._session.mount("https://", HTTPAdapter(max_retries=retry))
        self._session.mount("http://", HTTPAdapter(max_retries=retry))

    def get_json(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        label: Optional[str] = None,
    ) -> Any:
        what = label or url
        self._rate_limiter.wait()

        req_headers: MutableMapping[str, str] = {}
        if headers:
            req_headers.update(headers)

        started_at = time.monotonic()
        try:
            resp = self._session.get(url, params=params, headers=req_headers, timeout=self._timeout_s)
        except requests.RequestException as exc:
            raise FetchError(f"Failed to load {what} ({type(exc).__name__})") from exc

        elapsed_s = time.monotonic() - started_at
        logger.debug("GET %s -> %s in %.2fs", url, resp.status_code, elapsed_s)

        if resp.status_code >= 400:
            raise FetchError(f"Failed to load {what} ({resp.status_code})", status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise FetchError(f"Failed to load {what} (invalid JSON)", status_code=resp.status_code) from exc

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "JsonHttpClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
