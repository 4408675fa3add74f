# tests/conftest.py
import json
from typing import Any, Callable

import httpx
import pytest

from zigbang_ingest.config import Settings
from zigbang_ingest.schemas import RawListing


@pytest.fixture
def cfg() -> Settings:
    return Settings(
        _env_file=None,
        ENV="dev",
        LANDOMO_API_URL="https://core.test/api/v1",
        LANDOMO_API_KEY="test-key",
        ZIGBANG_API_URL="https://zigbang.test",
        ZIGBANG_WEB_URL="https://www.zigbang.test",
        REQUEST_DELAY_MS=0,
        BATCH_SIZE=100,
        MAX_RESULTS=1000,
        TARGET_CATEGORIES="oneroom",
    )


@pytest.fixture
def make_raw() -> Callable[..., RawListing]:
    def _make(**overrides: Any) -> RawListing:
        payload: dict[str, Any] = {
            "item_id": 40123456,
            "title": "역삼역 5분 풀옵션 원룸",
            "sales_type": "월세",
            "deposit": 1000,
            "rent": 50,
            "room_type": "원룸",
            "service_type": "원룸",
            "size_m2": 23.1,
            "floor": "3",
            "total_floors": "5",
            "local1": "서울특별시",
            "local2": "강남구",
            "local3": "역삼동",
            "lat": 37.5007,
            "lng": 127.0365,
            "images_thumbnail": "https://ic.zigbang.com/ic/items/40123456/1.jpg",
            "manage_cost": "7",
            "is_new": True,
            "reg_date": "2024-03-02T10:15:00+09:00",
        }
        payload.update(overrides)
        return RawListing.from_api({k: v for k, v in payload.items() if v is not None})

    return _make


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(data, ensure_ascii=False).encode("utf-8"),
        headers={"content-type": "application/json"},
    )


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
