import pytest

from otcfinder.domain.confidence import ConfidencePolicy
from otcfinder.domain.models import MatchOrigin
from otcfinder.services.ingredient_matcher import Candidate
from otcfinder.services.ranker import AnalogueRanker

from conftest import make_record

ORIG = make_record("us-orig", name="Ibuprofen", brand_name="Advil", generic_name="Ibuprofen")


def C(rec, origin=MatchOrigin.INGREDIENT):
    return Candidate(rec, origin)

def test_drops_self_same_product_and_non_otc():
    cands = [
        C(ORIG),
        C(make_record("eu-same", country="EU", name="Advil", brand_name="Advil", generic_name="Ibuprofen")),
        C(make_record("eu-rx", country="EU", name="Brufen", availability="prescription")),
        C(make_record("eu-gone", country="EU", name="Gone", availability="unavailable")),
        C(make_record("eu-ok", country="EU", name="Nurofen", brand_name="Nurofen", generic_name="Ibuprofen")),
    ]
    out = AnalogueRanker().rank(ORIG, cands)
    assert [a.id for a in out] == ["eu-ok"]

def test_dedupes_by_name_and_country_first_wins():
    cands = [
        C(make_record("eu-a", country="EU", name="Ibuprofen", manufacturer="First")),
        C(make_record("eu-b", country="EU", name="Ibuprofen", manufacturer="Second")),
        C(make_record("ca-a", country="CA", name="Ibuprofen")),
    ]
    out = AnalogueRanker().rank(ORIG, cands)
    assert sorted(a.id for a in out) == ["ca-a", "eu-a"]

def test_confidence_tiers():
    cands = [
        C(make_record("eu-bare", country="EU", name="Bare")),
        C(make_record("eu-full", country="EU", name="Full", generic_name="Ibuprofen")),
        C(make_record("eu-ref", country="EU", name="Curated"), MatchOrigin.REFERENCE),
    ]
    out = AnalogueRanker().rank(ORIG, cands)
    assert [(a.id, a.confidence) for a in out] == [("eu-ref", 0.9), ("eu-full", 0.8), ("eu-bare", 0.7)]
    assert out[0].match_origin == MatchOrigin.REFERENCE

def test_ties_break_on_display_field():
    cands = [
        C(make_record("ca-z", country="CA", name="Zed", generic_name="Ibuprofen")),
        C(make_record("eu-a", country="EU", name="Alpha", generic_name="Ibuprofen")),
    ]
    assert [a.id for a in AnalogueRanker().rank(ORIG, cands)] == ["eu-a", "ca-z"]
    by_country = AnalogueRanker(tie_break="country").rank(ORIG, cands)
    assert [a.id for a in by_country] == ["ca-z", "eu-a"]

def test_truncates_to_limit():
    cands = [C(make_record(f"eu-{i}", country="EU", name=f"P{i:02d}")) for i in range(30)]
    assert len(AnalogueRanker(limit=10).rank(ORIG, cands)) == 10
    assert len(AnalogueRanker(limit=10).rank(ORIG, cands, limit=3)) == 3

def test_custom_policy():
    policy = ConfidencePolicy(base=0.5, complete_record=0.6, curated=0.65)
    out = AnalogueRanker(policy).rank(ORIG, [C(make_record("eu-x", country="EU", name="X"))])
    assert out[0].confidence == 0.5

def test_unknown_tie_break_rejected():
    with pytest.raises(ValueError):
        AnalogueRanker(tie_break="price")
