# otcfinder/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from otcfinder.domain.confidence import ConfidencePolicy

DEFAULT_COUNTRIES = ("US", "EU", "CA")

FIXED_WARNINGS = (
    "This information is for educational purposes only",
    "Always consult with a healthcare provider before taking any medication",
    "Dosage and availability may vary by country",
    "Only over-the-counter medications are included",
    "Drug interactions and contraindications may differ",
    "Regulations and approval status vary by country",
)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _csv(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(c.strip().upper() for c in raw.split(",") if c.strip())


@dataclass(frozen=True)
class Settings:
    """
    Everything a search needs to know about its environment. Built once by the
    container and passed down; nothing reads mutable globals at query time.
    """
    catalog_backend: str = "static"               # "static" | "openfda"
    catalog_path: Optional[str] = None            # None → bundled otc_medications.json
    supported_countries: Tuple[str, ...] = DEFAULT_COUNTRIES
    result_limit: int = 10
    min_query_length: int = 2
    tie_break_field: str = "name"
    include_analogue_refs: bool = True
    confidence: ConfidencePolicy = field(default_factory=ConfidencePolicy)
    warnings: Tuple[str, ...] = FIXED_WARNINGS

    # remote catalog
    openfda_base_url: str = "https://api.fda.gov/drug/label.json"
    openfda_api_key: Optional[str] = None
    openfda_country: str = "US"
    openfda_timeout: float = 10.0
    strategy_limit: int = 10

    # X-Api-Key on /v1
    require_api_key: bool = True
    service_api_keys: Tuple[str, ...] = ()

    # response cache for the remote catalog
    cache_enabled: bool = False
    cache_ttl: int = 43200
    redis_url: str = "redis://localhost:6379/0"

    @property
    def uses_mock_catalog(self) -> bool:
        return self.catalog_backend != "openfda"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            catalog_backend=os.getenv("CATALOG_BACKEND", "static").strip().lower(),
            catalog_path=os.getenv("CATALOG_PATH") or None,
            supported_countries=_csv("SUPPORTED_COUNTRIES", DEFAULT_COUNTRIES),
            result_limit=int(os.getenv("RESULT_LIMIT", "10")),
            min_query_length=int(os.getenv("MIN_QUERY_LENGTH", "2")),
            tie_break_field=os.getenv("TIE_BREAK_FIELD", "name"),
            include_analogue_refs=_flag("INCLUDE_ANALOGUE_REFS", "1"),
            confidence=ConfidencePolicy.from_env(),
            openfda_base_url=os.getenv("OPENFDA_BASE_URL", "https://api.fda.gov/drug/label.json"),
            openfda_api_key=os.getenv("OPENFDA_API_KEY") or None,
            openfda_country=os.getenv("OPENFDA_COUNTRY", "US").strip().upper(),
            openfda_timeout=float(os.getenv("OPENFDA_TIMEOUT", "10")),
            strategy_limit=int(os.getenv("STRATEGY_LIMIT", "10")),
            cache_enabled=_flag("CATALOG_CACHE_ENABLED", "0"),
            cache_ttl=int(os.getenv("CATALOG_CACHE_TTL", "43200")),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            require_api_key=_flag("REQUIRE_API_KEY", "1"),
            service_api_keys=tuple(k.strip() for k in os.getenv("SERVICE_API_KEY", "").split(",") if k.strip()),
        )
