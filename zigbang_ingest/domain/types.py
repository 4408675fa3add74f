# zigbang_ingest/domain/types.py
from __future__ import annotations

from enum import Enum


class SalesType(str, Enum):
    monthly_rent = "월세"
    jeonse = "전세"
    sale = "매매"


class ZigbangCategory(str, Enum):
    """Search endpoint categories (path segment of /v2/items/<category>)."""

    oneroom = "oneroom"
    villa = "villa"
    officetel = "officetel"


# Sales types requested per category; only villas are listed for sale on these endpoints.
CATEGORY_SALES_TYPES: dict[ZigbangCategory, tuple[SalesType, ...]] = {
    ZigbangCategory.oneroom: (SalesType.jeonse, SalesType.monthly_rent),
    ZigbangCategory.villa: (SalesType.jeonse, SalesType.monthly_rent, SalesType.sale),
    ZigbangCategory.officetel: (SalesType.jeonse, SalesType.monthly_rent),
}


class PropertyType(str, Enum):
    apartment = "apartment"
    house = "house"
    villa = "villa"
    townhouse = "townhouse"
    land = "land"
    commercial = "commercial"
    other = "other"


class TransactionType(str, Enum):
    sale = "sale"
    rent = "rent"


class ListingStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    sold = "sold"
    rented = "rented"
