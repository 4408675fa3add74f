# zigbang_ingest/services/normalize.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from ..config import Settings
from ..domain.address import KoreanAddress, compose_address
from ..domain.parsing import get_first, manwon_to_krw, parse_manwon, to_iso
from ..domain.types import ListingStatus, PropertyType, SalesType, TransactionType
from ..schemas import CanonicalProperty, Coordinates, Details, Location, RawListing

SQM_TO_SQFT = 10.7639

CURRENCIES: dict[str, str] = {
    "south-korea": "KRW",
    "australia": "AUD",
    "uk": "GBP",
    "usa": "USD",
    "spain": "EUR",
    "italy": "EUR",
    "france": "EUR",
    "germany": "EUR",
}

# Ordered: first match wins. Korean keyword first, then the romanized label.
PROPERTY_TYPE_PATTERNS: tuple[tuple[tuple[str, ...], PropertyType], ...] = (
    (("오피스텔", "officetel"), PropertyType.apartment),
    (("아파트", "apart"), PropertyType.apartment),
    # 빌라 are low-rise multi-unit buildings, i.e. apartments, not detached villas
    (("빌라", "villa"), PropertyType.apartment),
    (("원룸", "oneroom"), PropertyType.apartment),
    (("투룸", "tworoom"), PropertyType.apartment),
    (("타운하우스", "townhouse"), PropertyType.townhouse),
)

# (keywords, bedrooms, rooms)
ROOM_LABELS: tuple[tuple[tuple[str, ...], int, int], ...] = (
    (("원룸", "oneroom"), 0, 1),
    (("투룸", "tworoom"), 1, 2),
    (("쓰리룸", "threeroom"), 2, 3),
)

_N_ROOM_RE = re.compile(r"(\d+)\s*room")

AMENITY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "has_parking": ("주차", "parking"),
    "has_balcony": ("발코니", "베란다", "balcony"),
    "has_garden": ("정원", "마당", "garden"),
    "has_pool": ("수영장", "pool"),
    "has_elevator": ("엘리베이터", "elevator"),
    "has_ac": ("에어컨", "aircon", "air conditioning"),
    "has_heating": ("난방", "heating"),
}

_BASE_AMENITIES = ("has_parking", "has_balcony", "has_garden", "has_pool")


class NormalizationError(ValueError):
    pass


@dataclass(frozen=True)
class PriceBreakdown:
    price: int
    monthly_rent_krw: int | None = None


def get_currency(country: str) -> str:
    return CURRENCIES.get((country or "").strip().lower(), "USD")


def _contains(text: str | None, needle: str) -> bool:
    return bool(text) and needle in text


def is_sale(sales_type: str | None) -> bool:
    return sales_type == SalesType.sale.value or _contains(sales_type, SalesType.sale.value)


def is_jeonse(sales_type: str | None) -> bool:
    return sales_type == SalesType.jeonse.value or _contains(sales_type, SalesType.jeonse.value)


def determine_transaction_type(sales_type: str | None) -> TransactionType:
    # 매매 = sale; 전세 / 월세 / missing / anything else is a rental
    if is_sale(sales_type):
        return TransactionType.sale
    return TransactionType.rent


def calculate_price(raw: RawListing) -> PriceBreakdown:
    """
    Three regimes, all reported in KRW:
      매매 (sale):   deposit field carries the sale price
      전세 (jeonse): the refundable deposit is the price
      월세 (monthly, and the fallback): deposit + 12 months of rent, annualized
    """
    deposit = max(0.0, raw.deposit or 0)
    if is_sale(raw.sales_type) or is_jeonse(raw.sales_type):
        return PriceBreakdown(price=_krw_or_raise(deposit, raw))

    rent = max(0.0, raw.rent or 0)
    return PriceBreakdown(
        price=_krw_or_raise(deposit + rent * 12, raw),
        monthly_rent_krw=manwon_to_krw(rent),
    )


def _krw_or_raise(amount_man_won: float, raw: RawListing) -> int:
    krw = manwon_to_krw(amount_man_won)
    if krw is None:
        raise NormalizationError(f"listing {raw.listing_id} price out of range: {amount_man_won!r}")
    return krw


def _type_label(raw: RawListing) -> str:
    return str(get_first(raw.room_type, raw.room_type_title, raw.service_type) or "").lower()


def normalize_property_type(raw: RawListing) -> PropertyType:
    label = _type_label(raw)
    for keywords, ptype in PROPERTY_TYPE_PATTERNS:
        if any(k in label for k in keywords):
            return ptype
    return PropertyType.apartment


def extract_room_counts(room_type: str | None) -> tuple[int, int]:
    """(bedrooms, rooms). The living room counts as a room but not a bedroom."""
    if not room_type:
        return 0, 1

    label = room_type.lower()
    for keywords, bedrooms, rooms in ROOM_LABELS:
        if any(k in label for k in keywords):
            return bedrooms, rooms

    m = _N_ROOM_RE.search(label)
    if m:
        rooms = int(m.group(1))
        return max(0, rooms - 1), rooms

    return 0, 1


def extract_features(raw: RawListing, manage_cost_man_won: float | None) -> list[str]:
    features: list[str] = []

    if raw.service_type:
        features.append(f"Type: {raw.service_type}")
    floor = get_first(raw.floor, raw.floor_string)
    if floor:
        features.append(f"Floor: {floor}")
    total_floors = get_first(raw.total_floors, raw.building_floor)
    if total_floors:
        features.append(f"Total Floors: {total_floors}")
    if manage_cost_man_won:
        features.append(f"Management Fee: {_fmt_number(manage_cost_man_won)}만원")
    if raw.is_new:
        features.append("New Listing")

    for tag in raw.tags or []:
        tag = str(tag).strip()
        if tag and tag not in features:
            features.append(tag)

    return features


def extract_amenities(raw: RawListing) -> dict[str, bool]:
    amenities = {k: False for k in _BASE_AMENITIES}
    tags = [str(t).lower() for t in (raw.tags or [])]
    for name, keywords in AMENITY_KEYWORDS.items():
        if any(k in tag for tag in tags for k in keywords):
            amenities[name] = True
    return amenities


def format_korean_price(raw: RawListing) -> str:
    deposit = _fmt_number(raw.deposit)
    if is_jeonse(raw.sales_type):
        return f"전세 {deposit}만원"
    if _contains(raw.sales_type, SalesType.monthly_rent.value):
        return f"월세 {deposit}/{_fmt_number(raw.rent)}만원"
    if is_sale(raw.sales_type):
        return f"매매 {deposit}만원"
    return f"{_fmt_number(raw.deposit or 0)}만원"


def _fmt_number(x: float | None) -> str:
    if x is None:
        return "?"
    if float(x).is_integer():
        return str(int(x))
    return str(x)


def _coordinates(raw: RawListing) -> Coordinates | None:
    lat, lng = raw.lat, raw.lng
    if (lat is None or lng is None) and raw.random_location is not None:
        lat, lng = raw.random_location.lat, raw.random_location.lng
    if lat is None or lng is None:
        return None
    return Coordinates(lat=lat, lon=lng)


def _images(raw: RawListing) -> list[str]:
    if raw.images:
        return [str(x) for x in raw.images if x]
    if raw.images_thumbnail:
        return [raw.images_thumbnail]
    return []


def _listing_url(raw: RawListing, listing_id: int, cfg: Settings) -> str:
    if raw.url:
        return raw.url
    return f"{cfg.ZIGBANG_WEB_URL.rstrip('/')}/home/{_url_category(raw)}/items/{listing_id}"


def _url_category(raw: RawListing) -> str:
    label = str(get_first(raw.service_type, raw.room_type) or "").lower()
    if "오피스텔" in label or "officetel" in label:
        return "officetel"
    if "빌라" in label or "villa" in label:
        return "villa"
    return "oneroom"


def _country_specific(
    raw: RawListing,
    prices: PriceBreakdown,
    address: KoreanAddress,
    manage_cost_man_won: float | None,
    supply_m2: float | None,
    exclusive_m2: float | None,
) -> dict[str, Any]:
    return {
        # 월세 (monthly), 전세 (jeonse), 매매 (sale)
        "sales_type": raw.sales_type,
        "deposit_man_won": raw.deposit,
        "deposit_krw": manwon_to_krw(raw.deposit),
        "rent_man_won": raw.rent,
        "rent_krw": manwon_to_krw(raw.rent),
        "monthly_rent_krw": prices.monthly_rent_krw,
        "manage_cost_man_won": manage_cost_man_won,
        "manage_cost_krw": manwon_to_krw(manage_cost_man_won),
        "price_display": format_korean_price(raw),
        # 전용면적 / 공급면적
        "exclusive_area_m2": exclusive_m2,
        "supply_area_m2": supply_m2,
        "floor": get_first(raw.floor, raw.floor_string),
        "total_floors": get_first(raw.total_floors, raw.building_floor),
        "room_type": get_first(raw.room_type, raw.room_type_title),
        "service_type": raw.service_type,
        "local1": address.local1,
        "local2": address.local2,
        "local3": address.local3,
        "is_new": raw.is_new,
        "reg_date": raw.reg_date,
    }


def normalize_listing(raw: RawListing, cfg: Settings) -> CanonicalProperty:
    """
    Zigbang record -> CanonicalProperty. Pure: the output depends only on
    `raw` and the static settings (country, web url).
    """
    listing_id = raw.listing_id
    if listing_id is None:
        raise NormalizationError("listing has no item_id")
    if raw.title is None:
        raise NormalizationError(f"listing {listing_id} has no title")

    prices = calculate_price(raw)
    manage_cost = parse_manwon(raw.manage_cost)

    supply_m2 = get_first(raw.size_m2, raw.supply_area.m2 if raw.supply_area else None)
    exclusive_m2 = get_first(raw.exclusive_m2, raw.exclusive_area.m2 if raw.exclusive_area else None)
    sqm = get_first(supply_m2, exclusive_m2)

    room_label = get_first(raw.room_type, raw.room_type_title)
    bedrooms, rooms = extract_room_counts(room_label)

    address = compose_address(
        local1=get_first(raw.local1, raw.address1),
        local2=get_first(raw.local2, raw.address2),
        local3=get_first(raw.local3, raw.address3),
        free_text=raw.address,
    )

    return CanonicalProperty(
        title=raw.title,
        price=prices.price,
        currency=get_currency(cfg.COUNTRY),
        property_type=normalize_property_type(raw),
        transaction_type=determine_transaction_type(raw.sales_type),
        location=Location(
            address=address.address,
            city=address.city,
            state=address.state,
            neighborhood=address.neighborhood,
            country=cfg.COUNTRY,
            coordinates=_coordinates(raw),
        ),
        details=Details(
            bedrooms=bedrooms,
            bathrooms=1,  # not in the payload
            sqm=sqm,
            sqft=round(sqm * SQM_TO_SQFT, 2) if sqm is not None else None,
            rooms=rooms,
        ),
        features=extract_features(raw, manage_cost),
        amenities=extract_amenities(raw),
        country_specific=_country_specific(raw, prices, address, manage_cost, supply_m2, exclusive_m2),
        images=_images(raw),
        # Zigbang has no separate description body; the title is it
        description=raw.title,
        url=_listing_url(raw, listing_id, cfg),
        status=ListingStatus.active,
        listing_date=to_iso(raw.reg_date),
        updated_date=to_iso(raw.updated_at),
    )
