# zigbang_ingest/adapters/clients/zigbang.py
from __future__ import annotations

from typing import Any

import httpx

from ...config import Settings
from ...domain.parsing import to_int
from ...domain.types import CATEGORY_SALES_TYPES, SalesType, ZigbangCategory
from .http_client import RateLimiter, limited_request

Range = tuple[int | None, int | None]


class ZigbangApiError(RuntimeError):
    """Upstream answered 2xx but the body is not what the endpoint promises."""


def _item_id(entry: Any) -> int | None:
    if isinstance(entry, dict):
        return to_int(entry.get("itemId") if entry.get("itemId") is not None else entry.get("item_id"))
    if isinstance(entry, (int, str)) and not isinstance(entry, bool):
        return to_int(entry)
    return None


def _items(data: Any, url: str) -> list[Any]:
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        return data["items"]
    raise ZigbangApiError(f"unexpected body from {url}: missing 'items' list")


class ZigbangClient:
    """
    Low-level HTTP client for the Zigbang v2 item endpoints.
    Raises on any failure; callers decide what a failure costs.
    """

    def __init__(self, cfg: Settings, http: httpx.AsyncClient, limiter: RateLimiter) -> None:
        self._base_url = (cfg.ZIGBANG_API_URL or "").rstrip("/")
        self._http = http
        self._limiter = limiter

    def _search_params(
        self,
        cell: str,
        category: ZigbangCategory,
        deposit_range: Range,
        rent_range: Range,
    ) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = [
            ("geohash", cell),
            ("domain", "zigbang"),
            ("checkAnyItemWithoutFilter", "true"),
        ]
        for key, (lo, hi) in (("deposit", deposit_range), ("rent", rent_range)):
            if lo is not None:
                params.append((f"{key}Min", str(lo)))
            if hi is not None:
                params.append((f"{key}Max", str(hi)))

        sales_types = CATEGORY_SALES_TYPES.get(category, (SalesType.jeonse, SalesType.monthly_rent))
        for i, st in enumerate(sales_types):
            params.append((f"salesTypes[{i}]", st.value))
        return params

    async def search_item_ids(
        self,
        cell: str,
        category: ZigbangCategory,
        deposit_range: Range = (0, None),
        rent_range: Range = (0, None),
    ) -> list[int]:
        url = f"{self._base_url}/v2/items/{category.value}"
        resp = await limited_request(
            self._http,
            self._limiter,
            "GET",
            url,
            params=self._search_params(cell, category, deposit_range, rent_range),
        )
        try:
            data = resp.json()
        except ValueError as e:
            raise ZigbangApiError(f"non-JSON body from {url}") from e

        out: list[int] = []
        for entry in _items(data, url):
            iid = _item_id(entry)
            if iid is not None:
                out.append(iid)
        return out

    async def fetch_items(self, item_ids: list[int]) -> list[Any]:
        """Raw item payloads for one batch; items are NOT validated here."""
        url = f"{self._base_url}/v2/items/list"
        body = {"domain": "zigbang", "withCoalition": True, "item_ids": list(item_ids)}
        resp = await limited_request(self._http, self._limiter, "POST", url, json=body)
        try:
            data = resp.json()
        except ValueError as e:
            raise ZigbangApiError(f"non-JSON body from {url}") from e
        return _items(data, url)
