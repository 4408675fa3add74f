# zigbang_ingest/adapters/ingestion/details.py
from __future__ import annotations

import logging
from typing import Sequence, TypeVar

import httpx
from pydantic import ValidationError

from ...schemas import RawListing
from ..clients.zigbang import ZigbangApiError, ZigbangClient

log = logging.getLogger(__name__)

T = TypeVar("T")


def chunked(seq: Sequence[T], size: int) -> list[list[T]]:
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [list(seq[i : i + size]) for i in range(0, len(seq), size)]


def parse_item(item: object) -> RawListing:
    listing = RawListing.from_api(item)
    if listing.listing_id is None:
        raise ValueError("item has no item_id")
    return listing


class DetailFetcher:
    """
    Batch detail lookups. Partial success is normal: failed chunks and
    malformed items are logged and dropped, everything else is returned.
    """

    def __init__(self, client: ZigbangClient, batch_size: int) -> None:
        self._client = client
        self.batch_size = max(1, int(batch_size))
        self.failed_chunks = 0
        self.bad_items = 0

    async def fetch_details(self, ids: Sequence[int]) -> list[RawListing]:
        out: list[RawListing] = []
        for idx, chunk in enumerate(chunked(list(ids), self.batch_size)):
            try:
                items = await self._client.fetch_items(chunk)
            except (httpx.HTTPError, ZigbangApiError) as e:
                self.failed_chunks += 1
                log.warning(
                    "detail chunk %d failed (%d ids): %s: %s", idx, len(chunk), type(e).__name__, e
                )
                continue

            for item in items:
                try:
                    out.append(parse_item(item))
                except (ValidationError, ValueError) as e:
                    self.bad_items += 1
                    ref = item.get("item_id") if isinstance(item, dict) else None
                    log.warning("skipping malformed item item_id=%s: %s", ref, e)
        return out
