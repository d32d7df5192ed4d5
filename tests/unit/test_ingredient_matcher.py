import asyncio

import pytest

from otcfinder.domain.errors import EmptyIngredientError
from otcfinder.domain.models import MatchOrigin
from otcfinder.infra.catalog.static_catalog import StaticCatalog
from otcfinder.services.ingredient_matcher import MATCH_STRATEGIES, IngredientMatcher

from conftest import FakeRemoteCatalog, make_record


def _by_id(cands):
    return {c.record.id: c.origin for c in cands}

def test_strategy_table_order():
    assert [s.name for s in MATCH_STRATEGIES] == ["ingredient_field", "generic_name", "substance_name", "broad_text"]
    assert [s.priority for s in MATCH_STRATEGIES] == sorted(s.priority for s in MATCH_STRATEGIES)

def test_static_union_of_ingredient_and_refs(catalog):
    original = asyncio.run(catalog.lookup_by_exact_name("Ibuprofen"))
    got = _by_id(asyncio.run(IngredientMatcher(catalog).match(original, "EU")))
    # ingredient matches, with the curated one tagged as reference; not yet otc-filtered
    assert got == {"eu-ibuprofen": MatchOrigin.REFERENCE, "eu-ibuprofen-800": MatchOrigin.INGREDIENT}

def test_refs_reach_other_ingredient_names(catalog):
    original = asyncio.run(catalog.lookup_by_exact_name("Tylenol"))
    got = _by_id(asyncio.run(IngredientMatcher(catalog).match(original, "EU")))
    assert got == {"eu-paracetamol": MatchOrigin.REFERENCE}

def test_refs_can_be_disabled(catalog):
    original = asyncio.run(catalog.lookup_by_exact_name("Tylenol"))
    m = IngredientMatcher(catalog, include_analogue_refs=False)
    assert asyncio.run(m.match(original, "EU")) == []

def test_empty_ingredient_is_an_error(catalog):
    original = asyncio.run(catalog.lookup_by_exact_name("NightCalm"))
    with pytest.raises(EmptyIngredientError):
        asyncio.run(IngredientMatcher(catalog).match(original, "EU"))

def test_remote_strategies_fall_through_failures():
    original = make_record("us-orig", name="Advil", generic_name="Ibuprofen")
    good = make_record("us-other", name="Midol IB", generic_name="Ibuprofen")
    wrong = make_record("us-wrong", name="Aleve", ingredient="NAPROXEN SODIUM")
    cat = FakeRemoteCatalog(
        fail_ingredient=True,
        search_hits={"generic_name": [wrong], "substance_name": [good]},
    )
    got = asyncio.run(IngredientMatcher(cat).match(original, "US"))
    assert [c.record.id for c in got] == ["us-other"]
    searched = [c for c in cat.calls if c[0] in ("search_by_ingredient", "search")]
    assert searched == [
        ("search_by_ingredient", "IBUPROFEN"),
        ("search", "Ibuprofen", "generic_name"),
        ("search", "IBUPROFEN", "substance_name"),
    ]

def test_remote_exhausted_strategies_give_nothing():
    original = make_record("us-orig", name="Advil", generic_name="Ibuprofen")
    cat = FakeRemoteCatalog()
    assert asyncio.run(IngredientMatcher(cat).match(original, "US")) == []
    assert len([c for c in cat.calls if c[0] in ("search_by_ingredient", "search")]) == 4

def test_remote_hits_outside_destination_are_ignored():
    original = make_record("us-orig", name="Advil")
    ca_hit = make_record("ca-1", country="CA", name="Advil")
    cat = FakeRemoteCatalog(ingredient_hits=[ca_hit])
    assert asyncio.run(IngredientMatcher(cat).match(original, "US")) == []

def test_remote_skips_countries_the_backend_does_not_serve():
    original = make_record("us-orig", name="Advil", generic_name="Ibuprofen")
    cat = FakeRemoteCatalog(served={"US"}, ingredient_hits=[make_record("us-other", name="Midol IB")])
    got = asyncio.run(IngredientMatcher(cat).match_many(original, ["EU", "US", "CA"]))
    assert [c.record.id for c in got] == ["us-other"]
    searched = [c for c in cat.calls if c[0] in ("search_by_ingredient", "search")]
    assert searched == [("search_by_ingredient", "IBUPROFEN")]

class _SlowCatalog(StaticCatalog):
    async def find_by_ingredient_and_country(self, ingredient, country):
        # first country answers last
        await asyncio.sleep(0.05 if country == "EU" else 0)
        return await super().find_by_ingredient_and_country(ingredient, country)

def test_fan_out_merges_in_destination_order():
    cat = _SlowCatalog([
        make_record("us-1"), make_record("eu-1", country="EU"), make_record("ca-1", country="CA"),
    ])
    original = asyncio.run(cat.lookup_by_exact_name("us-1"))
    got = asyncio.run(IngredientMatcher(cat).match_many(original, ["EU", "CA"]))
    assert [c.record.id for c in got] == ["eu-1", "ca-1"]
