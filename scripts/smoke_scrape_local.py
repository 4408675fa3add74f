# scripts/smoke_scrape_local.py
# Discovery + detail + normalize for one geohash cell. Prints, never posts.
import asyncio
import os

from zigbang_ingest.adapters.clients.http_client import RateLimiter, build_http_client
from zigbang_ingest.adapters.clients.zigbang import ZigbangClient
from zigbang_ingest.adapters.ingestion.details import DetailFetcher
from zigbang_ingest.adapters.ingestion.discovery import ListingDiscovery
from zigbang_ingest.config import Settings
from zigbang_ingest.domain.types import ZigbangCategory
from zigbang_ingest.services.normalize import format_korean_price, normalize_listing


async def main():
    settings = Settings()
    cell = os.environ.get("CELL", "wydm9")
    category = ZigbangCategory(os.environ.get("CATEGORY", "oneroom"))
    limit = int(os.environ.get("LIMIT", "5"))

    async with build_http_client(settings) as http:
        client = ZigbangClient(settings, http, RateLimiter(settings.request_delay_s))
        ids = await ListingDiscovery(client).discover_cell(cell, category)
        print(f"cell={cell} category={category.value} ids={len(ids)}")

        listings = await DetailFetcher(client, settings.BATCH_SIZE).fetch_details(sorted(ids)[:limit])
        for raw in listings:
            prop = normalize_listing(raw, settings)
            print(f"Listing {raw.listing_id}: {raw.title}")
            print(f"  Price: {format_korean_price(raw)} -> {prop.price:,} {prop.currency}")
            print(f"  Type: {prop.property_type.value} / {prop.transaction_type.value}")
            print(f"  Rooms: {prop.details.rooms} (bedrooms {prop.details.bedrooms})")
            print(f"  City: {prop.location.city} {prop.location.neighborhood or ''}")
            print(f"  URL: {prop.url}")


if __name__ == "__main__":
    asyncio.run(main())
