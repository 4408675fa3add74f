# zigbang_ingest/domain/geohash.py
from __future__ import annotations

GEOHASH_ALPHABET = "0123456789bcdefghjkmnpqrstuvwxyz"

# "" keeps the base cell itself; each extra character narrows the cell ~32x,
# which gets under the search endpoint's per-cell result cap.
GEOHASH_SUFFIXES: tuple[str, ...] = ("",) + tuple(GEOHASH_ALPHABET)

DEFAULT_GEOHASH = "wydm"

SEOUL_GEOHASHES: tuple[str, ...] = (
    "wydm",  # central / Gangnam
    "wydq",  # north (Nowon, Dobong)
    "wydj",  # west (Gangseo, Yangcheon)
    "wydn",  # north-west (Eunpyeong)
)

CITY_GEOHASHES: dict[str, tuple[str, ...]] = {
    "seoul": SEOUL_GEOHASHES,
    "서울": SEOUL_GEOHASHES,
    "서울특별시": SEOUL_GEOHASHES,
    "incheon": ("wydj",),
    "인천": ("wydj",),
    "busan": ("wy7b",),
    "부산": ("wy7b",),
    "daegu": ("wy7k",),
    "대구": ("wy7k",),
}


def base_prefixes(city: str | None) -> tuple[str, ...]:
    key = (city or "").strip().lower()
    return CITY_GEOHASHES.get(key) or (DEFAULT_GEOHASH,)


def search_cells(city: str | None, suffixes: tuple[str, ...] = GEOHASH_SUFFIXES) -> list[str]:
    """
    prefixes x suffixes, prefix-major. Cells overlap (a base cell contains its
    own children), so callers must dedupe ids.
    """
    return [prefix + suffix for prefix in base_prefixes(city) for suffix in suffixes]
