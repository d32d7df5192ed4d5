# otcfinder/services/suggestions.py
from __future__ import annotations

from typing import List, Optional, Tuple

from otcfinder.domain.models import MedicationRecord, SuggestionItem
from otcfinder.domain.normalizers import contains_text, normalize_query
from otcfinder.domain.ports import CatalogPort

# checked in this order; the first field containing the query labels the hit
MATCH_FIELDS = (
    ("brand", "brand_name"),
    ("generic", "generic_name"),
    ("ingredient", "active_ingredient"),
)


def classify(rec: MedicationRecord, q: str) -> Optional[Tuple[str, str]]:
    for kind, attr in MATCH_FIELDS:
        val = getattr(rec, attr)
        if contains_text(val, q):
            return kind, val
    return None


class SuggestionService:
    """Autocomplete for the search box."""

    def __init__(self, catalog: CatalogPort, *, min_query_length: int = 2, max_window: int = 500):
        self.catalog = catalog
        self.min_query_length = min_query_length
        self.max_window = max_window

    async def suggest(self, query: str, limit: int = 10) -> List[SuggestionItem]:
        q = normalize_query(query)
        if len(q) < self.min_query_length:
            return []

        out: List[SuggestionItem] = []
        seen = set()
        window = limit * 3
        while True:
            hits = await self.catalog.search(q, limit=window)
            self._collect(hits, q, limit, out, seen)
            # records matching only on `name` take search slots; widen until full or exhausted
            if len(out) >= limit or len(hits) < window or window >= self.max_window:
                return out
            window = min(window * 2, self.max_window)

    def _collect(self, hits, q, limit, out, seen) -> None:
        for rec in hits:
            if len(out) >= limit:
                return
            hit = classify(rec, q)
            if hit is None:
                continue
            key = (rec.name, rec.country)
            if key in seen:
                continue
            seen.add(key)
            kind, text = hit
            out.append(SuggestionItem(
                name=rec.display_name,
                brand_name=rec.brand_name,
                generic_name=rec.generic_name,
                active_ingredient=rec.active_ingredient,
                country=rec.country,
                match_type=kind,
                match_text=text,
            ))
