# otcfinder/container.py
from functools import lru_cache
from typing import Optional

from otcfinder.config import Settings
from otcfinder.domain.ports import CachePort, CatalogPort
from otcfinder.infra.cache.redis_cache import RedisCache
from otcfinder.infra.catalog.openfda_catalog import OpenFdaCatalog
from otcfinder.infra.catalog.static_catalog import StaticCatalog

from otcfinder.services.suggestions import SuggestionService
from otcfinder.application.search_use_case import SearchOrchestrator
from otcfinder.application.lookup_use_case import CatalogLookupUseCase

@lru_cache
def _settings() -> Settings: return Settings.from_env()

@lru_cache
def _cache() -> Optional[CachePort]:
    s = _settings()
    return RedisCache.from_url(s.redis_url) if s.cache_enabled else None

def build_catalog(settings: Settings, cache: Optional[CachePort] = None) -> CatalogPort:
    if settings.catalog_backend == "openfda":
        return OpenFdaCatalog(
            base_url=settings.openfda_base_url,
            country=settings.openfda_country,
            api_key=settings.openfda_api_key,
            timeout=settings.openfda_timeout,
            cache=cache,
            cache_ttl=settings.cache_ttl,
        )
    if settings.catalog_backend == "static":
        return StaticCatalog.from_json(settings.catalog_path)
    raise ValueError(f"unknown CATALOG_BACKEND {settings.catalog_backend!r} (expected 'static' or 'openfda')")

@lru_cache
def _catalog() -> CatalogPort: return build_catalog(_settings(), _cache())

@lru_cache
def _orchestrator() -> SearchOrchestrator:
    return SearchOrchestrator(_catalog(), _settings())

@lru_cache
def _lookups() -> CatalogLookupUseCase:
    return CatalogLookupUseCase(_catalog(), _settings())

@lru_cache
def _suggestions() -> SuggestionService:
    return SuggestionService(_catalog(), min_query_length=_settings().min_query_length)

def get_settings() -> Settings: return _settings()
def get_catalog() -> CatalogPort: return _catalog()
def get_cache() -> Optional[CachePort]: return _cache()
def get_search_orchestrator() -> SearchOrchestrator: return _orchestrator()
def get_lookup_use_case() -> CatalogLookupUseCase: return _lookups()
def get_suggestion_service() -> SuggestionService: return _suggestions()
