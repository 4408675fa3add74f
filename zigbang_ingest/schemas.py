from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .domain.types import ListingStatus, PropertyType, TransactionType


# --- Portal-native (Zigbang) --------------------------------------------------


class AreaBlock(BaseModel):
    model_config = ConfigDict(extra="allow", allow_inf_nan=False)

    m2: float | None = None
    p: float | None = None  # pyeong


class RawLocation(BaseModel):
    model_config = ConfigDict(extra="allow", allow_inf_nan=False)

    lat: float | None = None
    lng: float | None = None


class RawListing(BaseModel):
    """
    One record from /v2/items/list. Every field is optional: absence means
    unknown, not zero. Native-script keys are modelled as their own aliased
    fields; the normalizer decides which alias wins.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, allow_inf_nan=False)

    item_id: int | None = None
    id: int | None = None
    title: str | None = None
    url: str | None = None

    sales_type: str | None = None
    deposit: float | None = None  # manwon
    rent: float | None = None  # manwon
    manage_cost: float | str | None = None  # manwon

    size_m2: float | None = None
    exclusive_m2: float | None = None
    supply_area: AreaBlock | None = Field(default=None, alias="공급면적")
    exclusive_area: AreaBlock | None = Field(default=None, alias="전용면적")

    floor: str | None = None
    floor_string: str | None = None
    total_floors: str | None = None
    building_floor: str | None = None

    room_type: str | None = None
    room_type_title: str | None = None
    service_type: str | None = None

    local1: str | None = None
    local2: str | None = None
    local3: str | None = None
    address1: str | None = None
    address2: str | None = None
    address3: str | None = None
    address: str | None = None

    lat: float | None = None
    lng: float | None = None
    random_location: RawLocation | None = None

    images: list[str] | None = None
    images_thumbnail: str | None = None

    is_new: bool | None = None
    reg_date: str | None = None
    updated_at: str | None = None
    tags: list[str] | None = None

    @field_validator("floor", "floor_string", "total_floors", "building_floor", mode="before")
    @classmethod
    def _floor_as_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("images", "tags", mode="before")
    @classmethod
    def _text_entries_only(cls, v: Any) -> Any:
        # non-string entries are dropped, the rest of the record stands
        if isinstance(v, list):
            return [x for x in v if isinstance(x, str)]
        return v

    _source: dict[str, Any] | None = PrivateAttr(default=None)

    @classmethod
    def from_api(cls, item: Any) -> "RawListing":
        if not isinstance(item, dict):
            raise ValueError(f"expected object, got {type(item).__name__}")
        listing = cls.model_validate(item)
        listing._source = dict(item)
        return listing

    @property
    def listing_id(self) -> int | None:
        return self.item_id if self.item_id is not None else self.id

    def raw_payload(self) -> dict[str, Any]:
        """The record as the portal sent it (original keys, nothing added)."""
        if self._source is not None:
            return dict(self._source)
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# --- Canonical (portal-agnostic) ---------------------------------------------


class Coordinates(BaseModel):
    lat: float
    lon: float


class Location(BaseModel):
    address: str | None = None
    city: str | None = None
    state: str | None = None
    neighborhood: str | None = None
    postal_code: str | None = None
    country: str
    coordinates: Coordinates | None = None


class Details(BaseModel):
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    sqm: float | None = None
    sqft: float | None = None
    rooms: int | None = Field(default=None, ge=0)
    year_built: int | None = None


class CanonicalProperty(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    price: int = Field(..., ge=0)
    currency: str
    property_type: PropertyType = PropertyType.apartment
    transaction_type: TransactionType = TransactionType.rent

    location: Location
    details: Details = Field(default_factory=Details)

    features: list[str] = Field(default_factory=list)
    amenities: dict[str, bool] = Field(default_factory=dict)
    country_specific: dict[str, Any] = Field(default_factory=dict)

    images: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)
    virtual_tour_url: str | None = None
    description: str | None = None

    url: str | None = None
    status: ListingStatus = ListingStatus.active
    listing_date: str | None = None
    updated_date: str | None = None


class IngestionEnvelope(BaseModel):
    portal: str
    portal_id: str
    country: str
    data: CanonicalProperty
    raw_data: dict[str, Any]

    def to_json_body(self) -> dict[str, Any]:
        # raw_data goes out untouched; only the canonical block drops unknowns
        return {
            "portal": self.portal,
            "portal_id": self.portal_id,
            "country": self.country,
            "data": self.data.model_dump(mode="json", exclude_none=True),
            "raw_data": self.raw_data,
        }


# --- Job reporting -----------------------------------------------------------


class ScrapeResult(BaseModel):
    city: str
    category: str
    cells: int = Field(0, ge=0)
    discovered: int = Field(0, ge=0)
    capped: int = Field(0, ge=0)
    fetched: int = Field(0, ge=0)
    normalized: int = Field(0, ge=0)
    sent: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    failure_reasons: dict[str, int] = Field(default_factory=dict)
