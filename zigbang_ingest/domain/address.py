# zigbang_ingest/domain/address.py
from __future__ import annotations

from dataclasses import dataclass

from .parsing import get_first


@dataclass(frozen=True)
class KoreanAddress:
    address: str | None
    city: str | None
    state: str | None
    neighborhood: str | None
    local1: str | None
    local2: str | None
    local3: str | None


def _clean(x: object) -> str | None:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def format_korean_address(
    local1: str | None,
    local2: str | None,
    local3: str | None,
    address: str | None = None,
) -> str:
    """Free-text address wins; else join the populated levels with spaces."""
    if address:
        return address
    return " ".join(p for p in (local1, local2, local3) if p)


def compose_address(
    *,
    local1: str | None,
    local2: str | None,
    local3: str | None,
    free_text: str | None,
) -> KoreanAddress:
    """
    Three-level decomposition is preferred:
      local1 = province / metropolitan city  (서울특별시)
      local2 = district                       (강남구)
      local3 = neighborhood                   (역삼동)
    """
    l1, l2, l3 = _clean(local1), _clean(local2), _clean(local3)
    free = _clean(free_text)

    if l1 or l2 or l3:
        address = format_korean_address(l1, l2, l3)
    else:
        address = free

    return KoreanAddress(
        address=address,
        city=get_first(l1, l2),
        state=l1,
        neighborhood=l3,
        local1=l1,
        local2=l2,
        local3=l3,
    )
