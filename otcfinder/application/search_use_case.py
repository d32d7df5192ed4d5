# otcfinder/application/search_use_case.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from otcfinder.config import Settings
from otcfinder.domain.confidence import result_confidence
from otcfinder.domain.errors import UnknownCountryError
from otcfinder.domain.models import MedicationRecord, SearchResult
from otcfinder.domain.normalizers import normalize_country
from otcfinder.domain.ports import CatalogPort
from otcfinder.services.ingredient_matcher import IngredientMatcher
from otcfinder.services.name_resolver import NameResolver
from otcfinder.services.ranker import AnalogueRanker

from .commands import SearchMedicationCommand

logger = logging.getLogger("otcfinder.search")

NOT_FOUND_MESSAGE = "No medication found"

AMBIGUOUS_INGREDIENT_MESSAGE = (
    "Unable to identify the active ingredient for {name}, so equivalent products "
    "cannot be matched.\n\n"
    "Please consult a healthcare provider or pharmacist for medication alternatives."
)

NO_ANALOGUES_MESSAGE = (
    "No analogues found for {name} ({ingredient}) in {countries}. This could be due to:\n\n"
    "• Different regulatory approval status\n"
    "• Different brand names or formulations\n"
    "• Limited data availability\n"
    "• Regional restrictions\n\n"
    "Please consult a healthcare provider or pharmacist for medication alternatives."
)


class SearchState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    MATCHING = "matching"
    RANKING = "ranking"
    DONE = "done"


@dataclass
class SearchRun:
    """Per-query state. Created fresh for every call, never stored."""
    query: str
    state: SearchState = SearchState.IDLE
    trail: List[SearchState] = field(default_factory=lambda: [SearchState.IDLE])

    def advance(self, state: SearchState) -> None:
        logger.debug("[search] query=%r %s -> %s", self.query, self.state.value, state.value)
        self.state = state
        self.trail.append(state)


class SearchOrchestrator:
    """
    Facade over resolve → match (per destination, concurrently) → rank.

    Returns None when the query resolves to nothing; every other outcome is a
    well-formed SearchResult.
    """
    def __init__(
        self,
        catalog: CatalogPort,
        settings: Optional[Settings] = None,
        *,
        resolver: Optional[NameResolver] = None,
        matcher: Optional[IngredientMatcher] = None,
        ranker: Optional[AnalogueRanker] = None,
    ):
        self.catalog = catalog
        self.settings = settings or Settings()
        s = self.settings
        self.resolver = resolver or NameResolver(catalog, min_query_length=s.min_query_length)
        self.matcher = matcher or IngredientMatcher(
            catalog, include_analogue_refs=s.include_analogue_refs, limit=s.strategy_limit,
        )
        self.ranker = ranker or AnalogueRanker(s.confidence, limit=s.result_limit, tie_break=s.tie_break_field)

    async def execute(self, cmd: SearchMedicationCommand) -> Optional[SearchResult]:
        return await self.search(
            cmd.query,
            source_country=cmd.source_country,
            destination_countries=cmd.destination_countries,
            limit=cmd.limit,
        )

    async def search(
        self,
        query: str,
        *,
        source_country: Optional[str] = None,
        destination_countries: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> Optional[SearchResult]:
        run = SearchRun(query=query)
        source = self._check_country(source_country) if source_country else None
        explicit = [self._check_country(c) for c in (destination_countries or [])]

        run.advance(SearchState.RESOLVING)
        original = await self.resolver.resolve(query, prefer_country=source)
        if original is None:
            run.advance(SearchState.DONE)
            logger.info("[search] query=%r -> not found", query)
            return None

        destinations = explicit or self._default_destinations(original)
        policy = self.settings.confidence

        if not original.active_ingredient:
            run.advance(SearchState.DONE)
            logger.info("[search] query=%r id=%s -> no active ingredient", query, original.id)
            return self._result(
                original, [], policy.ambiguous_ingredient, destinations,
                fallback=AMBIGUOUS_INGREDIENT_MESSAGE.format(name=original.display_name),
            )

        run.advance(SearchState.MATCHING)
        candidates = await self.matcher.match_many(original, destinations)

        run.advance(SearchState.RANKING)
        analogues = self.ranker.rank(original, candidates, limit=limit)

        run.advance(SearchState.DONE)
        if not analogues:
            logger.info("[search] query=%r id=%s candidates=%d -> no analogues",
                        query, original.id, len(candidates))
            return self._result(
                original, [], policy.no_analogues, destinations,
                fallback=NO_ANALOGUES_MESSAGE.format(
                    name=original.display_name,
                    ingredient=original.active_ingredient,
                    countries=", ".join(destinations) or "other countries",
                ),
            )

        confidence = result_confidence(analogues[0].confidence, policy)
        logger.info("[search] query=%r id=%s dest=%s candidates=%d analogues=%d conf=%.2f",
                    query, original.id, ",".join(destinations), len(candidates), len(analogues), confidence)
        return self._result(original, analogues, confidence, destinations)

    # ── helpers ─────────────────────────────────────────────────────
    def _check_country(self, country: str) -> str:
        c = normalize_country(country)
        if c not in self.settings.supported_countries:
            raise UnknownCountryError(country, self.settings.supported_countries)
        return c

    def _default_destinations(self, original: MedicationRecord) -> List[str]:
        return [c for c in self.settings.supported_countries if c != original.country]

    def _result(self, original, analogues, confidence, destinations, fallback: Optional[str] = None) -> SearchResult:
        return SearchResult(
            original_medication=original,
            analogues=analogues,
            confidence=confidence,
            warnings=list(self.settings.warnings),
            no_analogues_found=not analogues,
            fallback_message=fallback if not analogues else None,
            destination_countries=list(destinations),
            api_source=self.catalog.source_label,
        )
