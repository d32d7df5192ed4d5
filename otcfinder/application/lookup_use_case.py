# otcfinder/application/lookup_use_case.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from otcfinder.config import Settings
from otcfinder.domain.models import Availability
from otcfinder.domain.normalizers import normalize_country
from otcfinder.domain.ports import CatalogPort
from otcfinder.services.name_resolver import NameResolver

logger = logging.getLogger("otcfinder.lookup")


class CatalogLookupUseCase:
    """Single-record questions that do not need analogue matching."""

    def __init__(self, catalog: CatalogPort, settings: Settings | None = None, resolver: NameResolver | None = None):
        self.catalog = catalog
        self.settings = settings or Settings()
        self.resolver = resolver or NameResolver(catalog, min_query_length=self.settings.min_query_length)

    async def check_availability(self, name: str, country: str) -> Availability:
        country = normalize_country(country)
        rec = await self.resolver.resolve(name, prefer_country=country)
        if rec is None or rec.country != country:
            return Availability.UNAVAILABLE
        return rec.availability

    async def get_interactions(self, name: str) -> List[str]:
        rec = await self.resolver.resolve(name)
        return list(rec.interactions) if rec else []

    async def status(self) -> Dict[str, Any]:
        ok = await self.catalog.ping()
        return {
            "using_mock": self.settings.uses_mock_catalog,
            "source": self.catalog.source_label,
            "status": "active" if ok else "degraded",
        }
