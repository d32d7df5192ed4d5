# otcfinder/infra/catalog/openfda_catalog.py
from __future__ import annotations

import datetime as dt
import hashlib
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from otcfinder.domain.models import Availability, MedicationRecord
from otcfinder.domain.normalizers import normalize_country, normalize_ingredient, pick_exact
from otcfinder.domain.ports import CachePort, CatalogPort

logger = logging.getLogger("otcfinder.catalog")

BASE = "https://api.fda.gov/drug/label.json"

# search field → openFDA query field
FIELD_MAP = {
    "brand_name": "openfda.brand_name",
    "generic_name": "openfda.generic_name",
    "substance_name": "openfda.substance_name",
}

PRODUCT_TYPES = {
    "HUMAN OTC DRUG": Availability.OTC,
    "HUMAN PRESCRIPTION DRUG": Availability.PRESCRIPTION,
}

STRENGTH_PAT = re.compile(r"(\d+(?:\.\d+)?\s?(?:mg|mcg|g|ml|%|iu)(?:\s?/\s?\d*\s?(?:ml|g))?)", re.IGNORECASE)
_SLUG = re.compile(r"\s+")


def _first(xs: Any) -> str:
    if isinstance(xs, list):
        return str(xs[0]).strip() if xs else ""
    return str(xs or "").strip()


def _list(xs: Any) -> List[Any]:
    # openFDA fields are arrays, but a bare string shows up now and then
    if xs is None:
        return []
    if isinstance(xs, (list, tuple)):
        return list(xs)
    return [xs]


def _parse_strength(text: str) -> str:
    m = STRENGTH_PAT.search(text or "")
    return m.group(1).replace(" ", "") if m else ""


def _parse_effective_time(raw: str) -> Optional[dt.date]:
    try:
        return dt.datetime.strptime(raw[:8], "%Y%m%d").date()
    except (TypeError, ValueError):
        return None


def _quote(term: str) -> str:
    return '"' + term.replace('"', " ").strip() + '"'


def label_to_record(doc: Dict[str, Any], country: str) -> Optional[MedicationRecord]:
    """
    Map one openFDA drug label to a MedicationRecord, or None when the label
    has neither brand nor generic name.
    """
    o = doc.get("openfda") or {}
    if not isinstance(o, dict):
        return None
    brand = _first(o.get("brand_name"))
    generic = _first(o.get("generic_name"))
    if not (brand or generic):
        return None

    substances = sorted({normalize_ingredient(s) for s in _list(o.get("substance_name")) if s})
    ingredient = " + ".join(substances)
    product_type = _first(o.get("product_type")).upper()
    country = normalize_country(country)

    stable = doc.get("set_id") or doc.get("id")
    if stable:
        rid = f"{country}-{stable}".lower()
    else:
        rid = _SLUG.sub("-", f"{country}-{brand}-{generic}".lower())

    try:
        return MedicationRecord(
            id=rid,
            name=brand or generic,
            brand_name=brand or None,
            generic_name=generic or None,
            active_ingredient=ingredient,
            dosage_form=_first(o.get("dosage_form")),
            strength=_parse_strength(_first(doc.get("active_ingredient"))),
            country=country,
            availability=PRODUCT_TYPES.get(product_type, Availability.UNAVAILABLE),
            manufacturer=_first(o.get("manufacturer_name")),
            warnings=tuple(str(w) for w in _list(doc.get("warnings"))),
            interactions=tuple(str(i) for i in _list(doc.get("drug_interactions") or doc.get("ask_doctor_or_pharmacist"))),
            description=_first(doc.get("description") or doc.get("purpose")) or None,
            last_updated=_parse_effective_time(_first(doc.get("effective_time"))),
        )
    except ValidationError as e:
        logger.warning("[openfda] skip malformed label id=%s: %s", rid, e.errors()[:1])
        return None


class OpenFdaCatalog(CatalogPort):
    """
    Remote catalog over the openFDA drug label endpoint.

    Every record is tagged with the one jurisdiction this registry covers.
    Network errors, non-2xx responses and malformed payloads are logged and
    turned into empty results.
    """
    is_remote = True
    source_label = "OpenFDA API"

    def __init__(
        self,
        *,
        base_url: str = BASE,
        country: str = "US",
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        cache: Optional[CachePort] = None,
        cache_ttl: int = 43200,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.country = normalize_country(country)
        self.api_key = api_key
        self.timeout = timeout
        self.cache = cache
        self.cache_ttl = cache_ttl
        self._transport = transport

    # ── HTTP ────────────────────────────────────────────────────────
    def _cache_key(self, params: Dict[str, Any]) -> str:
        raw = self.base_url + "?" + json.dumps(params, sort_keys=True)
        return "openfda:" + hashlib.sha1(raw.encode("utf-8")).hexdigest()

    async def _cache_get(self, key: str) -> Optional[List[Dict[str, Any]]]:
        if self.cache is None:
            return None
        try:
            return await self.cache.get_json(key)
        except Exception as e:
            logger.warning("[openfda] cache read failed key=%s: %s", key, e)
            return None

    async def _cache_set(self, key: str, value: List[Dict[str, Any]]) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.set_json(key, value, ttl=self.cache_ttl)
        except Exception as e:
            logger.warning("[openfda] cache write failed key=%s: %s", key, e)

    async def _fetch(self, search: str, limit: int) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"search": search, "limit": max(1, min(int(limit), 100))}
        key = self._cache_key(params)
        cached = await self._cache_get(key)
        if cached is not None:
            return cached

        if self.api_key:
            params["api_key"] = self.api_key
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as c:
                res = await c.get(self.base_url, params=params)
            if res.status_code == 404:
                # openFDA answers "no matches" with 404
                logger.debug("[openfda] no matches search=%s", search)
                return []
            res.raise_for_status()
            body = res.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("[openfda] request failed search=%s: %s", search, e)
            return []

        results = body.get("results") if isinstance(body, dict) else None
        if not isinstance(results, list):
            logger.warning("[openfda] malformed payload search=%s", search)
            return []
        await self._cache_set(key, results)
        return results

    def _to_records(self, docs: List[Dict[str, Any]]) -> List[MedicationRecord]:
        out: List[MedicationRecord] = []
        for d in docs:
            if not isinstance(d, dict):
                continue
            try:
                rec = label_to_record(d, self.country)
            except (AttributeError, TypeError) as e:
                logger.warning("[openfda] skip unreadable label set_id=%s: %s", d.get("set_id"), e)
                continue
            if rec is not None:
                out.append(rec)
        return out

    # ── CatalogPort ─────────────────────────────────────────────────
    def serves(self, country: str) -> bool:
        return normalize_country(country) == self.country

    async def search(self, query: str, limit: int = 10, field: Optional[str] = None) -> List[MedicationRecord]:
        q = (query or "").strip()
        if not q:
            return []
        if field in FIELD_MAP:
            expr = f"{FIELD_MAP[field]}:{_quote(q)}"
        else:
            expr = q
        return self._to_records(await self._fetch(expr, limit))

    async def search_by_ingredient(self, ingredient: str, limit: int = 10) -> List[MedicationRecord]:
        ing = normalize_ingredient(ingredient)
        if not ing:
            return []
        return self._to_records(await self._fetch(f"active_ingredient:{_quote(ing)}", limit))

    async def lookup_by_exact_name(self, name: str, prefer_country: Optional[str] = None) -> Optional[MedicationRecord]:
        hits = await self.search(name, limit=25, field="brand_name")
        hits += await self.search(name, limit=25, field="generic_name")
        return pick_exact(hits, name, prefer_country)

    async def find_by_ingredient_and_country(self, ingredient: str, country: str) -> List[MedicationRecord]:
        if not self.serves(country):
            return []
        ing = normalize_ingredient(ingredient)
        hits = await self.search(ing, limit=25, field="substance_name")
        return [r for r in hits if r.active_ingredient == ing]

    async def find_by_ids(self, ids: Sequence[str]) -> List[MedicationRecord]:
        prefix = self.country.lower() + "-"
        out: List[MedicationRecord] = []
        for rid in ids:
            if not rid.startswith(prefix):
                continue
            set_id = rid[len(prefix):]
            out += [r for r in self._to_records(await self._fetch(f"set_id:{_quote(set_id)}", 1)) if r.id == rid]
        return out

    async def ping(self) -> bool:
        params: Dict[str, Any] = {"limit": 1}
        if self.api_key:
            params["api_key"] = self.api_key
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as c:
                res = await c.get(self.base_url, params=params)
            return res.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("[openfda] ping failed: %s", e)
            return False
