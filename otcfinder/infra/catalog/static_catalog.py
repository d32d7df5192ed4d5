# otcfinder/infra/catalog/static_catalog.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from otcfinder.domain.errors import CatalogLoadError
from otcfinder.domain.models import MedicationRecord
from otcfinder.domain.normalizers import (
    contains_text, normalize_country, normalize_ingredient, normalize_query, pick_exact,
)
from otcfinder.domain.ports import CatalogPort

logger = logging.getLogger("otcfinder.catalog")

DEFAULT_DATA = Path(__file__).resolve().parent / "data" / "otc_medications.json"

# field → record attribute, for field-restricted search
_SEARCH_FIELDS = {
    "brand_name": ("brand_name",),
    "generic_name": ("generic_name",),
    "substance_name": ("active_ingredient",),
}
_FREE_TEXT_FIELDS = ("name", "brand_name", "generic_name", "active_ingredient")


class StaticCatalog(CatalogPort):
    """
    In-process table, loaded once. Lookups never touch the network, so every
    method is trivially safe for concurrent readers.
    """
    is_remote = False
    source_label = "Local Medication Database"

    def __init__(self, records: Iterable[MedicationRecord]):
        self._records: List[MedicationRecord] = list(records)
        self._by_id: Dict[str, MedicationRecord] = {}
        self._by_ingredient: Dict[tuple, List[MedicationRecord]] = {}
        for r in self._records:
            if r.id in self._by_id:
                raise CatalogLoadError(f"duplicate record id {r.id!r}")
            self._by_id[r.id] = r
            if r.active_ingredient:
                self._by_ingredient.setdefault((r.active_ingredient, r.country), []).append(r)

    @classmethod
    def from_json(cls, path: Optional[str | Path] = None) -> "StaticCatalog":
        p = Path(path) if path else DEFAULT_DATA
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
            records = [MedicationRecord(**row) for row in raw]
        except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
            raise CatalogLoadError(f"cannot load catalog from {p}: {e}") from e
        logger.info("[catalog] loaded %d records from %s", len(records), p)
        return cls(records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> List[MedicationRecord]:
        return list(self._records)

    # ── exact lookups ───────────────────────────────────────────────
    async def lookup_by_exact_name(self, name: str, prefer_country: Optional[str] = None) -> Optional[MedicationRecord]:
        return pick_exact(self._records, name, prefer_country)

    async def find_by_ingredient_and_country(self, ingredient: str, country: str) -> List[MedicationRecord]:
        key = (normalize_ingredient(ingredient), normalize_country(country))
        return list(self._by_ingredient.get(key, []))

    async def find_by_ids(self, ids: Sequence[str]) -> List[MedicationRecord]:
        return [self._by_id[i] for i in ids if i in self._by_id]

    # ── search capability ───────────────────────────────────────────
    async def search(self, query: str, limit: int = 10, field: Optional[str] = None) -> List[MedicationRecord]:
        q = normalize_query(query)
        if not q:
            return []
        attrs = _SEARCH_FIELDS.get(field, _FREE_TEXT_FIELDS) if field else _FREE_TEXT_FIELDS
        out = [r for r in self._records if any(contains_text(getattr(r, a), q) for a in attrs)]
        return out[:limit]

    async def search_by_ingredient(self, ingredient: str, limit: int = 10) -> List[MedicationRecord]:
        ing = normalize_ingredient(ingredient)
        if not ing:
            return []
        return [r for r in self._records if r.active_ingredient == ing][:limit]

    async def ping(self) -> bool:
        return len(self._records) > 0
