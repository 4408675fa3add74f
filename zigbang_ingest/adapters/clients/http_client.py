# zigbang_ingest/adapters/clients/http_client.py
from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable

import httpx

from ...config import Settings


class RateLimiter:
    """
    Minimum gap between consecutive requests. Requests are issued one at a time,
    so no lock is needed: the only caller is the single scrape flow.
    """

    def __init__(
        self,
        min_interval_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.min_interval_s = max(0.0, float(min_interval_s))
        self._clock = clock
        self._sleep = sleep
        self._last_ts: float | None = None

    async def wait(self) -> None:
        if self._last_ts is not None and self.min_interval_s > 0:
            wait = (self._last_ts + self.min_interval_s) - self._clock()
            if wait > 0:
                await self._sleep(wait)
        self._last_ts = self._clock()


def build_http_client(cfg: Settings, **kwargs: Any) -> httpx.AsyncClient:
    """Shared AsyncClient with the fixed per-request deadline (and optional proxy)."""
    kwargs.setdefault("timeout", httpx.Timeout(float(cfg.HTTP_TIMEOUT_S)))
    kwargs.setdefault("headers", {"user-agent": cfg.USER_AGENT, "accept": "application/json"})
    if cfg.PROXY_URL and "transport" not in kwargs:
        kwargs.setdefault("proxy", cfg.PROXY_URL)
    return httpx.AsyncClient(**kwargs)


async def limited_request(
    client: httpx.AsyncClient,
    limiter: RateLimiter,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: Any | None = None,
    json: Any | None = None,
) -> httpx.Response:
    """
    One request, no retries. Non-2xx raises httpx.HTTPStatusError; timeouts and
    network errors surface as their httpx exceptions.
    """
    await limiter.wait()
    resp = await client.request(method, url, headers=headers, params=params, json=json)
    resp.raise_for_status()
    return resp
