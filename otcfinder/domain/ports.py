# otcfinder/domain/ports.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from .models import MedicationRecord


class CatalogPort(ABC):
    """
    Read-only medication catalog. Backends: static table or remote drug API.

    Collaborator failures (network, parse) must surface as empty results,
    never as exceptions.
    """
    is_remote: bool = False
    source_label: str = "unknown"

    def serves(self, country: str) -> bool:
        """Whether this backend can hold records for `country` at all."""
        return True

    @abstractmethod
    async def lookup_by_exact_name(self, name: str, prefer_country: Optional[str] = None) -> Optional[MedicationRecord]: ...

    @abstractmethod
    async def find_by_ingredient_and_country(self, ingredient: str, country: str) -> List[MedicationRecord]: ...

    @abstractmethod
    async def find_by_ids(self, ids: Sequence[str]) -> List[MedicationRecord]: ...

    @abstractmethod
    async def search(self, query: str, limit: int = 10, field: Optional[str] = None) -> List[MedicationRecord]: ...

    @abstractmethod
    async def search_by_ingredient(self, ingredient: str, limit: int = 10) -> List[MedicationRecord]: ...

    @abstractmethod
    async def ping(self) -> bool: ...


class CachePort(ABC):
    @abstractmethod
    async def get_json(self, key: str) -> Optional[Any]: ...
    @abstractmethod
    async def set_json(self, key: str, value: Any, ttl: int = 3600): ...
