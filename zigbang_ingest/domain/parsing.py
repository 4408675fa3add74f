# zigbang_ingest/domain/parsing.py
from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any

MANWON = 10_000

_NUMERIC_RE = re.compile(r"[^0-9.\-]")


def to_int(x: Any) -> int | None:
    if x is None or x == "":
        return None
    try:
        return int(float(x))
    except Exception:
        return None


def to_float(x: Any) -> float | None:
    """Finite float or None; "inf" / "nan" count as unparsable."""
    if x is None or x == "":
        return None
    try:
        f = float(x)
    except Exception:
        return None
    return f if math.isfinite(f) else None


def get_first(*values: Any) -> Any:
    """Return first non-empty value (None and blank strings are skipped)."""
    for v in values:
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None


def parse_manwon(x: Any) -> float | None:
    """
    Portal amounts arrive as numbers or strings like "7", "7만원", "1,000".
    Unparsable input => None (unknown), never 0.
    """
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, (int, float)):
        return to_float(x)
    cleaned = _NUMERIC_RE.sub("", str(x))
    return to_float(cleaned)


def manwon_to_krw(manwon: float | None) -> int | None:
    """KRW for a manwon amount; None when unknown or out of float range."""
    base = to_float(manwon)
    if base is None or not math.isfinite(base * MANWON):
        return None
    return int(round(base * MANWON))


def to_iso(x: Any) -> str | None:
    """Re-render a portal date string as ISO-8601; unparsable => None."""
    if not x or not isinstance(x, str):
        return None
    s = x.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s).isoformat()
    except ValueError:
        pass
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y.%m.%d", "%Y%m%d"):
        try:
            return datetime.strptime(s, fmt).isoformat()
        except ValueError:
            continue
    return None
