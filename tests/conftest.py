from typing import List, Optional, Sequence

import pytest

from otcfinder.domain.models import MedicationRecord
from otcfinder.domain.ports import CatalogPort
from otcfinder.infra.catalog.static_catalog import StaticCatalog


def make_record(id: str, country: str = "US", ingredient: str = "IBUPROFEN", **kw) -> MedicationRecord:
    data = {
        "id": id,
        "name": kw.pop("name", id),
        "country": country,
        "active_ingredient": ingredient,
        "availability": kw.pop("availability", "otc"),
    }
    data.update(kw)
    return MedicationRecord(**data)


class FakeRemoteCatalog(CatalogPort):
    """Scriptable remote backend: every call is recorded, responses come from dicts."""
    is_remote = True
    source_label = "Fake Remote"

    def __init__(self, *, exact=None, search_hits=None, ingredient_hits=None, fail_ingredient=False, served=None):
        self.exact = exact
        self.search_hits = search_hits or {}          # field → list
        self.ingredient_hits = ingredient_hits or []
        self.fail_ingredient = fail_ingredient
        self.served = served                          # None → every country
        self.calls: List[tuple] = []

    def serves(self, country):
        return self.served is None or country in self.served

    async def lookup_by_exact_name(self, name, prefer_country=None):
        self.calls.append(("exact", name))
        return self.exact

    async def find_by_ingredient_and_country(self, ingredient, country):
        self.calls.append(("ingredient_country", ingredient, country))
        return []

    async def find_by_ids(self, ids: Sequence[str]):
        self.calls.append(("ids", tuple(ids)))
        return []

    async def search(self, query, limit=10, field: Optional[str] = None):
        self.calls.append(("search", query, field))
        return list(self.search_hits.get(field, []))

    async def search_by_ingredient(self, ingredient, limit=10):
        self.calls.append(("search_by_ingredient", ingredient))
        if self.fail_ingredient:
            raise RuntimeError("registry unreachable")
        return list(self.ingredient_hits)

    async def ping(self):
        return True


@pytest.fixture
def catalog() -> StaticCatalog:
    return StaticCatalog.from_json()
