# otcfinder/services/ranker.py
from __future__ import annotations

from typing import List, Sequence, Tuple

from otcfinder.domain.confidence import ConfidencePolicy, score_candidate
from otcfinder.domain.models import Analogue, MedicationRecord
from otcfinder.services.ingredient_matcher import Candidate

TIE_BREAK_FIELDS = ("name", "country", "brand_name", "generic_name", "manufacturer", "id")


class AnalogueRanker:
    """
    Filter → dedupe → score → sort → truncate. Pure; the same candidates
    always give the same list.
    """
    def __init__(self, policy: ConfidencePolicy | None = None, *, limit: int = 10, tie_break: str = "name"):
        if tie_break not in TIE_BREAK_FIELDS:
            raise ValueError(f"tie_break must be one of {TIE_BREAK_FIELDS}, got {tie_break!r}")
        self.policy = policy or ConfidencePolicy()
        self.limit = limit
        self.tie_break = tie_break

    def rank(self, original: MedicationRecord, candidates: Sequence[Candidate], limit: int | None = None) -> List[Analogue]:
        pair = (original.brand_name, original.generic_name)
        check_pair = any(pair)

        seen: set[Tuple[str, str]] = set()
        kept: List[Analogue] = []
        for c in candidates:
            r = c.record
            if r.id == original.id:
                continue
            # same product under another id
            if check_pair and (r.brand_name, r.generic_name) == pair:
                continue
            if not r.is_otc:
                continue
            key = (r.name, r.country)
            if key in seen:
                continue
            seen.add(key)
            kept.append(Analogue(
                **r.model_dump(),
                confidence=score_candidate(r, c.origin, self.policy),
                match_origin=c.origin,
            ))

        kept.sort(key=self._sort_key)
        return kept[: (limit or self.limit)]

    def _sort_key(self, a: Analogue):
        primary = (getattr(a, self.tie_break, None) or "").lower()
        return (-a.confidence, primary, a.country, a.id)
