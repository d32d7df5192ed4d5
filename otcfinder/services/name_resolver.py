# otcfinder/services/name_resolver.py
from __future__ import annotations

import logging
from typing import Optional

from otcfinder.domain.models import MedicationRecord
from otcfinder.domain.normalizers import normalize_query
from otcfinder.domain.ports import CatalogPort

logger = logging.getLogger("otcfinder.resolver")


class NameResolver:
    """
    Free-text query → one canonical record, or None.

    Exact match first (name, brand, ingredient). Only a remote catalog gets the
    best-effort fallback of taking its first search hit.
    """
    def __init__(self, catalog: CatalogPort, *, min_query_length: int = 2, fallback_limit: int = 5):
        self.catalog = catalog
        self.min_query_length = min_query_length
        self.fallback_limit = fallback_limit

    async def resolve(self, query: str, prefer_country: Optional[str] = None) -> Optional[MedicationRecord]:
        q = normalize_query(query)
        if len(q) < self.min_query_length:
            logger.info("[resolve] rejected short query=%r", query)
            return None

        rec = await self.catalog.lookup_by_exact_name(q, prefer_country)
        if rec is not None:
            logger.info("[resolve] exact query=%r -> id=%s", q, rec.id)
            return rec

        if not self.catalog.is_remote:
            logger.info("[resolve] no match query=%r", q)
            return None

        hits = await self.catalog.search(q, limit=self.fallback_limit)
        if not hits:
            logger.info("[resolve] no remote match query=%r", q)
            return None
        logger.info("[resolve] best-effort query=%r -> id=%s", q, hits[0].id)
        return hits[0]
