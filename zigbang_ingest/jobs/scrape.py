# zigbang_ingest/jobs/scrape.py
from __future__ import annotations

import logging
from collections import defaultdict

import httpx

from ..adapters.clients.http_client import RateLimiter, build_http_client
from ..adapters.clients.zigbang import ZigbangClient
from ..adapters.ingestion.details import DetailFetcher
from ..adapters.ingestion.discovery import ListingDiscovery
from ..config import ConfigError, Settings
from ..domain.geohash import search_cells
from ..domain.types import ZigbangCategory
from ..integrations.core_service import CoreServiceClient
from ..schemas import IngestionEnvelope, ScrapeResult
from ..services.normalize import normalize_listing

log = logging.getLogger(__name__)


def resolve_categories(names: list[str]) -> list[ZigbangCategory]:
    out: list[ZigbangCategory] = []
    for name in names:
        try:
            out.append(ZigbangCategory(name.strip().lower()))
        except ValueError:
            valid = ", ".join(c.value for c in ZigbangCategory)
            raise ConfigError(f"unknown category {name!r} (valid: {valid})") from None
    return out


def cap_ids(ids: set[int], max_results: int) -> list[int]:
    """Highest (newest) ids first; max_results <= 0 keeps everything."""
    ordered = sorted(ids, reverse=True)
    if max_results > 0:
        return ordered[:max_results]
    return ordered


async def scrape_combination(
    *,
    city: str,
    category: ZigbangCategory,
    cfg: Settings,
    discovery: ListingDiscovery,
    fetcher: DetailFetcher,
    sender: CoreServiceClient,
) -> ScrapeResult:
    failure_reasons: dict[str, int] = defaultdict(int)

    cells = search_cells(city)
    ids = await discovery.discover(cells, category, cfg.deposit_range(), cfg.rent_range())
    target_ids = cap_ids(ids, cfg.MAX_RESULTS)
    log.info(
        "%s/%s: %d unique ids from %d cells (processing %d)",
        city, category.value, len(ids), len(cells), len(target_ids),
    )

    listings = await fetcher.fetch_details(target_ids)

    if discovery.failed_cells:
        failure_reasons["search::failed_cells"] += len(discovery.failed_cells)
    if fetcher.failed_chunks:
        failure_reasons["detail::failed_chunks"] += fetcher.failed_chunks
    if fetcher.bad_items:
        failure_reasons["detail::malformed_items"] += fetcher.bad_items

    normalized = sent = failed = 0
    for raw in listings:
        portal_id = str(raw.listing_id)
        try:
            prop = normalize_listing(raw, cfg)
        except Exception as e:
            failed += 1
            failure_reasons[f"normalize::{type(e).__name__}"] += 1
            log.warning("normalize failed portal_id=%s: %s", portal_id, e)
            continue
        normalized += 1

        envelope = IngestionEnvelope(
            portal=cfg.PORTAL,
            portal_id=portal_id,
            country=cfg.COUNTRY,
            data=prop,
            raw_data=raw.raw_payload(),
        )
        try:
            result = await sender.send(envelope)
        except Exception as e:
            failed += 1
            failure_reasons[f"ingest::{type(e).__name__}"] += 1
            log.exception("ingest crashed portal_id=%s", portal_id)
            continue

        if result.ok:
            sent += 1
        else:
            failed += 1
            failure_reasons[f"ingest::http_{result.status_code}" if result.status_code else "ingest::transport"] += 1

    res = ScrapeResult(
        city=city,
        category=category.value,
        cells=len(cells),
        discovered=len(ids),
        capped=len(target_ids),
        fetched=len(listings),
        normalized=normalized,
        sent=sent,
        failed=failed,
        failure_reasons=dict(failure_reasons),
    )
    log.info(
        "%s/%s done: fetched=%d normalized=%d sent=%d failed=%d",
        city, category.value, res.fetched, res.normalized, res.sent, res.failed,
    )
    return res


async def run_scrape(
    cfg: Settings,
    *,
    cities: list[str] | None = None,
    categories: list[str] | None = None,
    http: httpx.AsyncClient | None = None,
) -> list[ScrapeResult]:
    """
    Every (city, category) combination, sequentially, sharing one HTTP client
    and one rate limiter toward the portal.
    """
    target_cities = cities or cfg.cities()
    target_categories = resolve_categories(categories or cfg.categories())

    owns_http = http is None
    client = http or build_http_client(cfg)
    limiter = RateLimiter(cfg.request_delay_s)
    zigbang = ZigbangClient(cfg, client, limiter)
    sender = CoreServiceClient(cfg, client)

    log.info("Starting %s scraper for %s", cfg.PORTAL, cfg.COUNTRY)
    results: list[ScrapeResult] = []
    try:
        for city in target_cities:
            for category in target_categories:
                res = await scrape_combination(
                    city=city,
                    category=category,
                    cfg=cfg,
                    discovery=ListingDiscovery(zigbang),
                    fetcher=DetailFetcher(zigbang, cfg.BATCH_SIZE),
                    sender=sender,
                )
                results.append(res)
    finally:
        if owns_http:
            await client.aclose()

    log.info(
        "Scrape complete: sent=%d failed=%d",
        sum(r.sent for r in results), sum(r.failed for r in results),
    )
    return results
