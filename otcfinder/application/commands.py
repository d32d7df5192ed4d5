# otcfinder/application/commands.py
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from otcfinder.domain.normalizers import normalize_country


class SearchMedicationCommand(BaseModel):
    query: str
    source_country: Optional[str] = None
    destination_countries: List[str] = Field(default_factory=list)
    limit: Optional[int] = Field(None, ge=1, le=50)

    @field_validator("source_country", mode="before")
    @classmethod
    def _norm_source(cls, v):
        return normalize_country(v) or None

    @field_validator("destination_countries", mode="before")
    @classmethod
    def _norm_destinations(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        out = []
        for c in v:
            c = normalize_country(c)
            if c and c not in out:
                out.append(c)
        return out
