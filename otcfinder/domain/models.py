# otcfinder/domain/models.py
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .normalizers import normalize_country, normalize_ingredient


class Availability(str, Enum):
    OTC = "otc"
    PRESCRIPTION = "prescription"
    UNAVAILABLE = "unavailable"


class MatchOrigin(str, Enum):
    INGREDIENT = "ingredient"   # inferred from active ingredient equality
    REFERENCE = "reference"     # curated via analogue_refs


class MedicationRecord(BaseModel):
    """
    One product in one jurisdiction. Immutable once loaded.

    `active_ingredient` is stored upper-cased; an empty value means the record
    can be resolved but not used for matching.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    brand_name: Optional[str] = None
    generic_name: Optional[str] = None
    active_ingredient: str = ""
    dosage_form: str = ""
    strength: str = ""
    country: str
    availability: Availability = Availability.UNAVAILABLE
    manufacturer: str = ""
    warnings: Tuple[str, ...] = ()
    interactions: Tuple[str, ...] = ()
    description: Optional[str] = None
    last_updated: Optional[date] = None
    analogue_refs: Tuple[str, ...] = ()

    @field_validator("active_ingredient", mode="before")
    @classmethod
    def _norm_ingredient(cls, v):
        return normalize_ingredient(v)

    @field_validator("country", mode="before")
    @classmethod
    def _norm_country(cls, v):
        return normalize_country(v)

    @field_validator("brand_name", "generic_name", "description", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @model_validator(mode="after")
    def _require_a_name(self):
        if not (self.name.strip() or self.brand_name or self.generic_name):
            raise ValueError(f"record {self.id!r} needs one of name/brand_name/generic_name")
        return self

    @property
    def display_name(self) -> str:
        return self.name or self.brand_name or self.generic_name or ""

    @property
    def is_otc(self) -> bool:
        return self.availability == Availability.OTC


class Analogue(MedicationRecord):
    confidence: float = Field(..., ge=0.0, le=1.0)
    match_origin: MatchOrigin = MatchOrigin.INGREDIENT


class SearchResult(BaseModel):
    original_medication: MedicationRecord
    analogues: List[Analogue] = []
    confidence: float = Field(..., ge=0.0, le=1.0)
    warnings: List[str]
    no_analogues_found: bool = False
    fallback_message: Optional[str] = None
    destination_countries: List[str] = []
    api_source: str = ""


class SuggestionItem(BaseModel):
    name: str
    brand_name: Optional[str] = None
    generic_name: Optional[str] = None
    active_ingredient: str
    country: str
    match_type: str   # "brand" | "generic" | "ingredient"
    match_text: str
