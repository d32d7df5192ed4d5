# otcfinder/presentation/schemas.py
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from otcfinder.domain.models import Availability, SearchResult, SuggestionItem

# ── SEARCH ────────────────────────────────────────────────────────
class SearchRequest(BaseModel):
    query: str = Field(..., description="Brand, generic or ingredient name as the traveler knows it")
    source_country: Optional[str] = Field(None, description="Where the traveler knows the product from (hint)")
    destination_countries: List[str] = Field(default_factory=list, description="Empty → every other supported country")
    limit: Optional[int] = Field(None, ge=1, le=50, description="Max analogues returned")

class SearchResponse(BaseModel):
    status: Literal["found", "not_found"]
    message: str
    result: Optional[SearchResult] = None

# ── SUGGESTIONS ───────────────────────────────────────────────────
class SuggestionsResponse(BaseModel):
    items: List[SuggestionItem]

# ── LOOKUPS ───────────────────────────────────────────────────────
class AvailabilityResponse(BaseModel):
    name: str
    country: str
    availability: Availability

class InteractionsResponse(BaseModel):
    name: str
    interactions: List[str]

class StatusResponse(BaseModel):
    using_mock: bool
    source: str
    status: Literal["active", "degraded"]
