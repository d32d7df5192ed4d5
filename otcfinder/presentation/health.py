# otcfinder/presentation/health.py
from fastapi import APIRouter, Depends
from otcfinder.container import get_cache, get_catalog

router = APIRouter()

@router.get("/healthz")
async def healthz():
    # Liveness: process is up
    return {"ok": True}

@router.get("/readyz")
async def readyz(catalog = Depends(get_catalog), cache = Depends(get_cache)):
    checks = {}; ok = True
    # Catalog backend
    try:
        checks["catalog"] = bool(await catalog.ping())
        checks["catalog_source"] = catalog.source_label
        ok = ok and checks["catalog"]
    except Exception as e:
        checks["catalog"] = False; checks["catalog_error"] = str(e); ok = False
    # Redis (only when the remote catalog cache is enabled)
    if cache is not None:
        try:
            pong = await cache.ping() if hasattr(cache, "ping") else True
            checks["redis"] = bool(pong); ok = ok and bool(pong)
        except Exception as e:
            checks["redis"] = False; checks["redis_error"] = str(e); ok = False
    return {"ok": ok, **checks}
