# otcfinder/services/ingredient_matcher.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from otcfinder.domain.errors import EmptyIngredientError
from otcfinder.domain.models import MatchOrigin, MedicationRecord
from otcfinder.domain.normalizers import normalize_country, unique_ids
from otcfinder.domain.ports import CatalogPort

logger = logging.getLogger("otcfinder.matcher")


@dataclass(frozen=True)
class MatchStrategy:
    """One row of the remote fallback policy: what to query and how."""
    name: str
    priority: int
    capability: str            # "ingredient" → search_by_ingredient, "search" → search
    source_attr: str           # attribute of the original record used as the term
    field: Optional[str] = None


# Tried in priority order; the first one yielding a usable hit wins.
MATCH_STRATEGIES = (
    MatchStrategy("ingredient_field", 10, "ingredient", "active_ingredient"),
    MatchStrategy("generic_name",     20, "search",     "generic_name",      "generic_name"),
    MatchStrategy("substance_name",   30, "search",     "active_ingredient", "substance_name"),
    MatchStrategy("broad_text",       40, "search",     "active_ingredient"),
)


@dataclass(frozen=True)
class Candidate:
    record: MedicationRecord
    origin: MatchOrigin


class IngredientMatcher:
    def __init__(
        self,
        catalog: CatalogPort,
        *,
        include_analogue_refs: bool = True,
        strategies: Sequence[MatchStrategy] = MATCH_STRATEGIES,
        limit: int = 10,
    ):
        self.catalog = catalog
        self.include_analogue_refs = include_analogue_refs
        self.strategies = tuple(sorted(strategies, key=lambda s: s.priority))
        self.limit = limit

    async def match(self, original: MedicationRecord, country: str) -> List[Candidate]:
        """
        Candidates for one destination country: ingredient matches unioned with
        the original's analogue_refs. Not deduplicated, not filtered to otc.
        """
        if not original.active_ingredient:
            raise EmptyIngredientError(original.id)
        country = normalize_country(country)

        if self.catalog.is_remote:
            if self.catalog.serves(country):
                by_ingredient = await self._run_strategies(original, country)
            else:
                logger.debug("[match] country=%s not served by %s", country, self.catalog.source_label)
                by_ingredient = []
        else:
            by_ingredient = await self.catalog.find_by_ingredient_and_country(original.active_ingredient, country)

        refs: List[MedicationRecord] = []
        if self.include_analogue_refs and original.analogue_refs:
            refs = [r for r in await self.catalog.find_by_ids(unique_ids(original.analogue_refs)) if r.country == country]

        ref_ids = {r.id for r in refs}
        out = [
            Candidate(r, MatchOrigin.REFERENCE if r.id in ref_ids else MatchOrigin.INGREDIENT)
            for r in by_ingredient
        ]
        seen = {r.id for r in by_ingredient}
        out += [Candidate(r, MatchOrigin.REFERENCE) for r in refs if r.id not in seen]

        logger.info("[match] id=%s country=%s ingredient_hits=%d ref_hits=%d",
                    original.id, country, len(by_ingredient), len(refs))
        return out

    async def match_many(self, original: MedicationRecord, countries: Sequence[str]) -> List[Candidate]:
        # concurrent per country; merged in the order countries were given
        batches = await asyncio.gather(*(self.match(original, c) for c in countries))
        return [c for batch in batches for c in batch]

    async def _run_strategies(self, original: MedicationRecord, country: str) -> List[MedicationRecord]:
        ingredient = original.active_ingredient
        for s in self.strategies:
            term = getattr(original, s.source_attr, None)
            if not term:
                continue
            try:
                if s.capability == "ingredient":
                    hits = await self.catalog.search_by_ingredient(term, self.limit)
                else:
                    hits = await self.catalog.search(term, self.limit, field=s.field)
            except Exception as e:
                logger.warning("[match] strategy=%s failed term=%r: %s", s.name, term, e)
                hits = []

            usable = [h for h in hits if h.country == country and h.active_ingredient == ingredient]
            if usable:
                logger.info("[match] strategy=%s term=%r -> %d", s.name, term, len(usable))
                return usable
            logger.debug("[match] strategy=%s term=%r -> 0", s.name, term)
        return []
