# otcfinder/domain/normalizers.py
import re
from typing import Iterable, Optional, Sequence, TypeVar

_WS = re.compile(r"\s+")


def normalize_query(raw: Optional[str]) -> str:
    """Trim, collapse whitespace, lower-case. Used only for comparison."""
    return _WS.sub(" ", (raw or "").strip()).lower()


def normalize_ingredient(raw: Optional[str]) -> str:
    return _WS.sub(" ", str(raw or "").strip()).upper()


def normalize_country(raw: Optional[str]) -> str:
    return str(raw or "").strip().upper()


R = TypeVar("R")

# field priority used by exact-name resolution
EXACT_NAME_FIELDS = ("name", "brand_name", "active_ingredient")


def pick_exact(records: Sequence[R], query: str, prefer_country: Optional[str] = None) -> Optional[R]:
    """
    Exact (case-insensitive) match on name, then brand_name, then active_ingredient.
    Within one field, a record from `prefer_country` beats table order.
    """
    q = normalize_query(query)
    if not q:
        return None
    pref = normalize_country(prefer_country) if prefer_country else None
    for field in EXACT_NAME_FIELDS:
        hits = [r for r in records if normalize_query(getattr(r, field, None)) == q]
        if not hits:
            continue
        if pref:
            for r in hits:
                if getattr(r, "country", None) == pref:
                    return r
        return hits[0]
    return None


def contains_text(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def unique_ids(ids: Iterable[str]) -> list:
    seen, out = set(), []
    for i in ids:
        if i and i not in seen:
            seen.add(i)
            out.append(i)
    return out
