# otcfinder/presentation/routers.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from otcfinder.infra.api.security import require_api_key

from otcfinder.presentation.schemas import (
    SearchRequest, SearchResponse,
    SuggestionsResponse,
    AvailabilityResponse, InteractionsResponse, StatusResponse,
)

from otcfinder.container import (
    get_search_orchestrator, get_lookup_use_case, get_suggestion_service,
)

from otcfinder.application.commands import SearchMedicationCommand
from otcfinder.application.search_use_case import SearchOrchestrator, NOT_FOUND_MESSAGE
from otcfinder.application.lookup_use_case import CatalogLookupUseCase
from otcfinder.domain.errors import UnknownCountryError
from otcfinder.services.suggestions import SuggestionService


logger = logging.getLogger(__name__)


def _preview(s: str | None, n: int = 80) -> str:
    s = (s or "").strip()
    return s if len(s) <= n else s[:n] + "…"


# every endpoint below sits under /v1 behind the API key
router = APIRouter(prefix="/v1", dependencies=[Depends(require_api_key)])

# ── SEARCH ────────────────────────────────────────────────────────
@router.post("/search", response_model=SearchResponse)
async def search_analogues(
    req: SearchRequest,
    request: Request,
    uc: SearchOrchestrator = Depends(get_search_orchestrator),
):
    """
    Resolve the query and list OTC analogues in the destination countries.
    "Not found" is a normal outcome and answers 200.
    """
    try:
        cmd = SearchMedicationCommand(**req.model_dump())
        result = await uc.execute(cmd)
    except UnknownCountryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("[search] failed query=%s", _preview(req.query))
        raise HTTPException(status_code=500, detail=str(e))

    logger.info("[search] query=%s found=%s ua=%s",
                _preview(req.query), result is not None, request.headers.get("user-agent"))

    if result is None:
        return SearchResponse(status="not_found", message=NOT_FOUND_MESSAGE, result=None)
    message = result.fallback_message or f"{len(result.analogues)} analogue(s) found"
    return SearchResponse(status="found", message=message, result=result)

# ── SUGGESTIONS ───────────────────────────────────────────────────
@router.get("/suggestions", response_model=SuggestionsResponse)
async def suggestions(
    q: str = Query(..., description="Partial medication name"),
    limit: int = Query(10, ge=1, le=50),
    svc: SuggestionService = Depends(get_suggestion_service),
):
    try:
        items = await svc.suggest(q, limit=limit)
    except Exception as e:
        logger.exception("[suggestions] failed q=%s", _preview(q))
        raise HTTPException(status_code=500, detail=str(e))
    return SuggestionsResponse(items=items)

# ── LOOKUPS ───────────────────────────────────────────────────────
@router.get("/availability", response_model=AvailabilityResponse)
async def availability(
    name: str = Query(...),
    country: str = Query(...),
    uc: CatalogLookupUseCase = Depends(get_lookup_use_case),
):
    c = country.strip().upper()
    if c not in uc.settings.supported_countries:
        raise HTTPException(status_code=400, detail=str(UnknownCountryError(country, uc.settings.supported_countries)))
    return AvailabilityResponse(name=name, country=c, availability=await uc.check_availability(name, c))

@router.get("/interactions/{name}", response_model=InteractionsResponse)
async def interactions(name: str, uc: CatalogLookupUseCase = Depends(get_lookup_use_case)):
    return InteractionsResponse(name=name, interactions=await uc.get_interactions(name))

@router.get("/status", response_model=StatusResponse)
async def catalog_status(uc: CatalogLookupUseCase = Depends(get_lookup_use_case)):
    return StatusResponse(**(await uc.status()))
