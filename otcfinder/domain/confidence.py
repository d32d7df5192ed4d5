# otcfinder/domain/confidence.py
import os
from dataclasses import dataclass

from .models import MatchOrigin, MedicationRecord


def clamp(x: float, lo=0.0, hi=1.0) -> float:
    return max(lo, min(hi, x))


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return clamp(float(raw))


@dataclass(frozen=True)
class ConfidencePolicy:
    """Heuristic match-quality constants, not probabilities."""
    ambiguous_ingredient: float = 0.2
    no_analogues: float = 0.3
    base: float = 0.7
    complete_record: float = 0.8   # generic name + active ingredient present
    curated: float = 0.9           # reached through analogue_refs
    matched_floor: float = 0.8

    @classmethod
    def from_env(cls) -> "ConfidencePolicy":
        d = cls()
        return cls(
            ambiguous_ingredient=_env_float("CONFIDENCE_AMBIGUOUS", d.ambiguous_ingredient),
            no_analogues=_env_float("CONFIDENCE_NO_ANALOGUES", d.no_analogues),
            base=_env_float("CONFIDENCE_BASE", d.base),
            complete_record=_env_float("CONFIDENCE_COMPLETE", d.complete_record),
            curated=_env_float("CONFIDENCE_CURATED", d.curated),
            matched_floor=_env_float("CONFIDENCE_MATCHED_FLOOR", d.matched_floor),
        )


def score_candidate(rec: MedicationRecord, origin: MatchOrigin, policy: ConfidencePolicy) -> float:
    if origin == MatchOrigin.REFERENCE:
        return policy.curated
    if rec.generic_name and rec.active_ingredient:
        return policy.complete_record
    return policy.base


def result_confidence(top_analogue: float, policy: ConfidencePolicy) -> float:
    return clamp(max(top_analogue, policy.matched_floor))
