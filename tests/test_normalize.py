import pytest
from pydantic import ValidationError

from zigbang_ingest.domain.types import PropertyType, TransactionType
from zigbang_ingest.schemas import RawListing
from zigbang_ingest.services.normalize import (
    NormalizationError,
    calculate_price,
    determine_transaction_type,
    extract_room_counts,
    format_korean_price,
    get_currency,
    normalize_listing,
)


def test_monthly_rent_end_to_end(cfg):
    raw = RawListing(item_id=1, title="원룸", sales_type="월세", deposit=1000, rent=50, room_type="원룸")
    prop = normalize_listing(raw, cfg)

    assert prop.transaction_type == TransactionType.rent
    assert prop.price == (1000 + 600) * 10000 == 16_000_000
    assert prop.details.bedrooms == 0
    assert prop.details.rooms == 1
    assert prop.country_specific["monthly_rent_krw"] == 500_000
    assert prop.currency == "KRW"


def test_sale_end_to_end(cfg):
    raw = RawListing(item_id=2, title="빌라 매매", sales_type="매매", deposit=50000)
    prop = normalize_listing(raw, cfg)

    assert prop.transaction_type == TransactionType.sale
    assert prop.price == 500_000_000
    assert prop.country_specific["monthly_rent_krw"] is None


def test_jeonse_uses_deposit_only(cfg):
    raw = RawListing(item_id=3, title="전세", sales_type="전세", deposit=20000, rent=30)
    prop = normalize_listing(raw, cfg)

    assert prop.transaction_type == TransactionType.rent
    assert prop.price == 200_000_000
    assert prop.country_specific["monthly_rent_krw"] is None


@pytest.mark.parametrize(
    "sales_type,deposit,rent,expected",
    [
        ("매매", 35000, None, 350_000_000),
        ("전세", 15000, None, 150_000_000),
        ("월세", 500, 45, 10_400_000),
        (None, None, 40, 4_800_000),
        ("단기임대", 100, None, 1_000_000),
        ("월세", None, None, 0),
    ],
)
def test_price_is_krw_for_every_regime(sales_type, deposit, rent, expected):
    raw = RawListing(item_id=9, title="x", sales_type=sales_type, deposit=deposit, rent=rent)
    breakdown = calculate_price(raw)
    assert breakdown.price == expected
    assert breakdown.price >= 0


def test_transaction_type_defaults_to_rent():
    assert determine_transaction_type(None) == TransactionType.rent
    assert determine_transaction_type("") == TransactionType.rent
    assert determine_transaction_type("전세") == TransactionType.rent
    assert determine_transaction_type("매매") == TransactionType.sale
    assert determine_transaction_type("아파트 매매") == TransactionType.sale


def test_normalize_is_pure(cfg, make_raw):
    raw = make_raw()
    assert normalize_listing(raw, cfg) == normalize_listing(raw, cfg)


@pytest.mark.parametrize("label", ["원룸", "분리형원룸", "오픈형 원룸", "OneRoom"])
def test_studio_label_means_zero_bedrooms(cfg, make_raw, label):
    prop = normalize_listing(make_raw(room_type=label, service_type="빌라", rent=999), cfg)
    assert prop.details.bedrooms == 0
    assert prop.details.rooms == 1


def test_room_counts():
    assert extract_room_counts("투룸") == (1, 2)
    assert extract_room_counts("쓰리룸") == (2, 3)
    assert extract_room_counts("4room") == (3, 4)
    assert extract_room_counts("1room") == (0, 1)
    assert extract_room_counts("복층") == (0, 1)
    assert extract_room_counts(None) == (0, 1)


def test_property_type_classification(cfg, make_raw):
    def ptype(**kw):
        return normalize_listing(make_raw(**kw), cfg).property_type

    assert ptype(room_type=None, service_type="오피스텔") == PropertyType.apartment
    assert ptype(room_type="타운하우스", service_type=None) == PropertyType.townhouse
    assert ptype(room_type=None, service_type="Townhouse") == PropertyType.townhouse
    assert ptype(room_type="빌라", service_type=None) == PropertyType.apartment
    assert ptype(room_type=None, service_type=None) == PropertyType.apartment
    assert ptype(room_type="상가", service_type=None) == PropertyType.apartment
    # room_type is looked at before service_type
    assert ptype(room_type="원룸", service_type="타운하우스") == PropertyType.apartment


def test_structured_address_preferred(cfg, make_raw):
    prop = normalize_listing(make_raw(address="무시되는 주소"), cfg)
    loc = prop.location

    assert loc.address == "서울특별시 강남구 역삼동"
    assert loc.city == "서울특별시"
    assert loc.state == "서울특별시"
    assert loc.neighborhood == "역삼동"
    assert loc.country == "south-korea"
    assert loc.coordinates is not None
    assert loc.coordinates.lat == pytest.approx(37.5007)
    assert loc.coordinates.lon == pytest.approx(127.0365)


def test_free_text_address_fallback(cfg, make_raw):
    raw = make_raw(local1=None, local2=None, local3=None, address="서울시 마포구 합정동", lat=None, lng=None)
    loc = normalize_listing(raw, cfg).location

    assert loc.address == "서울시 마포구 합정동"
    assert loc.city is None
    assert loc.state is None
    assert loc.coordinates is None


def test_city_falls_back_to_district(cfg, make_raw):
    loc = normalize_listing(make_raw(local1=None, local2="수원시", local3="영통동"), cfg).location
    assert loc.city == "수원시"
    assert loc.state is None
    assert loc.address == "수원시 영통동"


def test_country_specific_keeps_both_units(cfg, make_raw):
    cs = normalize_listing(make_raw(manage_cost="7만원"), cfg).country_specific

    assert cs["deposit_man_won"] == 1000
    assert cs["deposit_krw"] == 10_000_000
    assert cs["rent_man_won"] == 50
    assert cs["rent_krw"] == 500_000
    assert cs["manage_cost_man_won"] == 7
    assert cs["manage_cost_krw"] == 70_000
    assert cs["sales_type"] == "월세"
    assert cs["local2"] == "강남구"
    assert cs["price_display"] == "월세 1000/50만원"


def test_missing_amounts_stay_unknown(cfg, make_raw):
    prop = normalize_listing(make_raw(deposit=None, rent=None, manage_cost=None), cfg)
    cs = prop.country_specific

    assert prop.price == 0
    assert cs["deposit_krw"] is None
    assert cs["rent_krw"] is None
    assert cs["manage_cost_krw"] is None


def test_native_key_areas_and_location(cfg):
    raw = RawListing.from_api(
        {
            "item_id": 7,
            "title": "오피스텔",
            "공급면적": {"m2": 33.0, "p": 10.0},
            "전용면적": {"m2": 23.1, "p": 7.0},
            "random_location": {"lat": 37.55, "lng": 126.92},
        }
    )
    prop = normalize_listing(raw, cfg)

    assert prop.details.sqm == pytest.approx(33.0)
    assert prop.details.sqft == pytest.approx(355.21, abs=0.01)
    assert prop.country_specific["exclusive_area_m2"] == pytest.approx(23.1)
    assert prop.location.coordinates.lat == pytest.approx(37.55)


def test_features_and_amenities(cfg, make_raw):
    prop = normalize_listing(make_raw(tags=["주차가능", "엘리베이터"]), cfg)

    assert "Type: 원룸" in prop.features
    assert "Floor: 3" in prop.features
    assert "Total Floors: 5" in prop.features
    assert "Management Fee: 7만원" in prop.features
    assert "New Listing" in prop.features
    assert prop.amenities["has_parking"] is True
    assert prop.amenities["has_elevator"] is True
    assert prop.amenities["has_pool"] is False


def test_media_url_and_dates(cfg, make_raw):
    prop = normalize_listing(make_raw(), cfg)

    assert prop.images == ["https://ic.zigbang.com/ic/items/40123456/1.jpg"]
    assert prop.url == "https://www.zigbang.test/home/oneroom/items/40123456"
    assert prop.description == prop.title
    assert prop.status == "active"
    assert prop.listing_date == "2024-03-02T10:15:00+09:00"
    assert prop.updated_date is None


def test_unparsable_date_is_dropped(cfg, make_raw):
    assert normalize_listing(make_raw(reg_date="어제"), cfg).listing_date is None


def test_missing_identity_raises(cfg):
    with pytest.raises(NormalizationError):
        normalize_listing(RawListing(title="no id"), cfg)
    with pytest.raises(NormalizationError):
        normalize_listing(RawListing(item_id=5), cfg)


def test_format_korean_price():
    assert format_korean_price(RawListing(sales_type="전세", deposit=20000)) == "전세 20000만원"
    assert format_korean_price(RawListing(sales_type="매매", deposit=50000)) == "매매 50000만원"
    assert format_korean_price(RawListing(deposit=None)) == "0만원"


def test_get_currency():
    assert get_currency("south-korea") == "KRW"
    assert get_currency("spain") == "EUR"
    assert get_currency("atlantis") == "USD"


def test_non_finite_amounts_are_malformed():
    with pytest.raises(ValidationError):
        RawListing.from_api({"item_id": 1, "title": "t", "sales_type": "전세", "deposit": float("inf")})
    with pytest.raises(ValidationError):
        RawListing.from_api({"item_id": 1, "title": "t", "rent": float("nan")})


def test_price_beyond_float_range_is_a_normalization_error(cfg):
    raw = RawListing(item_id=1, title="t", sales_type="매매", deposit=1e305)
    with pytest.raises(NormalizationError):
        normalize_listing(raw, cfg)


def test_odd_media_and_tag_entries_do_not_drop_the_listing(cfg, make_raw):
    raw = make_raw(images=["https://ic.zigbang.com/1.jpg", 7, {"url": "x"}], tags=["주차가능", None, 3])
    prop = normalize_listing(raw, cfg)

    assert prop.images == ["https://ic.zigbang.com/1.jpg"]
    assert "주차가능" in prop.features
    assert prop.amenities["has_parking"] is True
    assert raw.raw_payload()["tags"] == ["주차가능", None, 3]
