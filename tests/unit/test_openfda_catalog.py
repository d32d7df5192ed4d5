import asyncio
import datetime as dt

import httpx

from otcfinder.domain.models import Availability
from otcfinder.domain.ports import CachePort
from otcfinder.infra.catalog.openfda_catalog import OpenFdaCatalog, label_to_record


def label(set_id, brand, generic, substances, product_type="HUMAN OTC DRUG"):
    return {
        "set_id": set_id,
        "effective_time": "20240115",
        "active_ingredient": [f"Active ingredient (in each tablet) {generic} 200 mg"],
        "warnings": ["Stomach bleeding warning"],
        "drug_interactions": ["Blood thinners"],
        "purpose": ["Pain reliever/fever reducer"],
        "openfda": {
            "brand_name": [brand],
            "generic_name": [generic],
            "substance_name": substances,
            "product_type": [product_type],
            "manufacturer_name": ["Acme Labs"],
        },
    }


class Registry:
    """httpx.MockTransport handler keyed by the openFDA `search` expression."""
    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        search = request.url.params.get("search")
        self.calls.append(search)
        result = self.routes.get(search)
        if result is None:
            return httpx.Response(404, json={"error": {"code": "NOT_FOUND"}})
        if isinstance(result, Exception):
            raise result
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json={"results": result})


class DictCache(CachePort):
    def __init__(self):
        self.data = {}
    async def get_json(self, key):
        return self.data.get(key)
    async def set_json(self, key, value, ttl=3600):
        self.data[key] = value


def make(routes, **kw):
    reg = Registry(routes)
    return OpenFdaCatalog(transport=httpx.MockTransport(reg), **kw), reg


ADVIL = label("set-advil", "Advil", "IBUPROFEN", ["IBUPROFEN"])
MOTRIN = label("set-motrin", "Motrin IB", "IBUPROFEN", ["IBUPROFEN"])


def test_label_to_record_maps_fields():
    rec = label_to_record(ADVIL, "us")
    assert rec.id == "us-set-advil"
    assert rec.name == "Advil" and rec.brand_name == "Advil" and rec.generic_name == "IBUPROFEN"
    assert rec.active_ingredient == "IBUPROFEN"
    assert rec.strength == "200mg"
    assert rec.country == "US"
    assert rec.availability == Availability.OTC
    assert rec.manufacturer == "Acme Labs"
    assert rec.interactions == ("Blood thinners",)
    assert rec.last_updated == dt.date(2024, 1, 15)

def test_label_product_types_and_combinations():
    rx = label_to_record(label("s1", "Motrin", "IBUPROFEN", ["IBUPROFEN"], "HUMAN PRESCRIPTION DRUG"), "US")
    assert rx.availability == Availability.PRESCRIPTION
    odd = label_to_record(label("s2", "X", "Y", ["Y"], "BULK INGREDIENT"), "US")
    assert odd.availability == Availability.UNAVAILABLE
    combo = label_to_record(label("s3", "Advil PM", "IBUPROFEN AND DIPHENHYDRAMINE",
                                  ["ibuprofen", "DIPHENHYDRAMINE CITRATE"]), "US")
    assert combo.active_ingredient == "DIPHENHYDRAMINE CITRATE + IBUPROFEN"

def test_label_without_names_is_skipped():
    doc = label("s", "", "", ["IBUPROFEN"])
    doc["openfda"]["brand_name"] = []
    doc["openfda"]["generic_name"] = []
    assert label_to_record(doc, "US") is None

def test_search_by_ingredient_and_fields():
    cat, reg = make({
        'active_ingredient:"IBUPROFEN"': [ADVIL, MOTRIN],
        'openfda.brand_name:"advil"': [ADVIL],
    })
    hits = asyncio.run(cat.search_by_ingredient("ibuprofen"))
    assert [r.id for r in hits] == ["us-set-advil", "us-set-motrin"]
    assert [r.id for r in asyncio.run(cat.search("advil", field="brand_name"))] == ["us-set-advil"]

def test_collaborator_failures_become_empty_results():
    cat, _ = make({
        "boom": httpx.ConnectError("unreachable"),
        "server": httpx.Response(500, json={"error": "oops"}),
        "garbled": httpx.Response(200, text="<html>not json</html>"),
        "shape": httpx.Response(200, json={"meta": {}}),
    })
    for q in ("boom", "server", "garbled", "shape", "nothing-here"):
        assert asyncio.run(cat.search(q)) == []

def test_odd_label_shapes_are_skipped_not_raised():
    broken = {"set_id": "x", "openfda": ["oops"]}
    assert label_to_record(broken, "US") is None
    cat, _ = make({
        'openfda.brand_name:"advil"': [broken, "not-a-label", ADVIL],
        "noise": [{"set_id": "y", "openfda": "text"}],
    })
    assert [r.id for r in asyncio.run(cat.search("advil", field="brand_name"))] == ["us-set-advil"]
    assert asyncio.run(cat.search("noise")) == []
    assert asyncio.run(cat.lookup_by_exact_name("advil")).id == "us-set-advil"

def test_bare_string_fields_are_not_split_into_characters():
    doc = label("s", "Advil", "IBUPROFEN", "IBUPROFEN")
    doc["warnings"] = "Stomach bleeding warning"
    doc["drug_interactions"] = "Blood thinners"
    rec = label_to_record(doc, "US")
    assert rec.active_ingredient == "IBUPROFEN"
    assert rec.warnings == ("Stomach bleeding warning",)
    assert rec.interactions == ("Blood thinners",)

def test_exact_lookup_uses_brand_then_generic():
    cat, reg = make({'openfda.brand_name:"advil"': [ADVIL, MOTRIN]})
    rec = asyncio.run(cat.lookup_by_exact_name("advil"))
    assert rec.id == "us-set-advil"
    assert reg.calls == ['openfda.brand_name:"advil"', 'openfda.generic_name:"advil"']

def test_find_by_ingredient_and_country_only_serves_own_country():
    cat, reg = make({'openfda.substance_name:"IBUPROFEN"': [ADVIL]})
    assert asyncio.run(cat.find_by_ingredient_and_country("IBUPROFEN", "EU")) == []
    assert reg.calls == []
    assert [r.id for r in asyncio.run(cat.find_by_ingredient_and_country("ibuprofen", "US"))] == ["us-set-advil"]

def test_serves_only_its_jurisdiction():
    cat, _ = make({}, country="us")
    assert cat.serves("US") and cat.serves(" us ")
    assert not cat.serves("EU")

def test_find_by_ids():
    cat, _ = make({'set_id:"set-advil"': [ADVIL]})
    assert [r.id for r in asyncio.run(cat.find_by_ids(["us-set-advil", "eu-whatever"]))] == ["us-set-advil"]

def test_responses_are_cached():
    cache = DictCache()
    cat, reg = make({'active_ingredient:"IBUPROFEN"': [ADVIL]}, cache=cache)
    first = asyncio.run(cat.search_by_ingredient("IBUPROFEN"))
    second = asyncio.run(cat.search_by_ingredient("IBUPROFEN"))
    assert first == second
    assert len(reg.calls) == 1
    assert len(cache.data) == 1

def test_ping():
    ok, _ = make({None: [ADVIL]})
    assert asyncio.run(ok.ping()) is True
    def unreachable(request):
        raise httpx.ConnectError("unreachable", request=request)
    down = OpenFdaCatalog(transport=httpx.MockTransport(unreachable))
    assert asyncio.run(down.ping()) is False
