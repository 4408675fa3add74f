# zigbang_ingest/adapters/ingestion/discovery.py
from __future__ import annotations

import logging
from typing import Iterable

import httpx

from ...domain.types import ZigbangCategory
from ..clients.zigbang import Range, ZigbangApiError, ZigbangClient

log = logging.getLogger(__name__)


class ListingDiscovery:
    """Collects item ids cell by cell; a failing cell contributes nothing."""

    def __init__(self, client: ZigbangClient) -> None:
        self._client = client
        self.failed_cells: list[str] = []

    async def discover_cell(
        self,
        cell: str,
        category: ZigbangCategory,
        deposit_range: Range = (0, None),
        rent_range: Range = (0, None),
    ) -> set[int]:
        try:
            ids = await self._client.search_item_ids(cell, category, deposit_range, rent_range)
        except (httpx.HTTPError, ZigbangApiError) as e:
            self.failed_cells.append(cell)
            log.warning("search failed cell=%s category=%s: %s: %s", cell, category.value, type(e).__name__, e)
            return set()
        return set(ids)

    async def discover(
        self,
        cells: Iterable[str],
        category: ZigbangCategory,
        deposit_range: Range = (0, None),
        rent_range: Range = (0, None),
    ) -> set[int]:
        found: set[int] = set()
        for cell in cells:
            ids = await self.discover_cell(cell, category, deposit_range, rent_range)
            if ids:
                log.debug("cell=%s ids=%d", cell, len(ids))
            found |= ids
        return found
