# otcfinder/infra/api/security.py
import hmac
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security.api_key import APIKeyHeader

from otcfinder.config import Settings
from otcfinder.container import get_settings

log = logging.getLogger("api")

API_KEY_NAME = "X-Api-Key"
_api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


def key_matches(candidate: str, keys) -> bool:
    # several keys may be live while one is being rotated out
    return any(hmac.compare_digest(candidate.encode(), k.encode()) for k in keys)


async def require_api_key(
    api_key: str = Depends(_api_key_header),
    settings: Settings = Depends(get_settings),
):
    if not settings.require_api_key:
        return
    if not settings.service_api_keys:
        log.warning("Auth fail: SERVICE_API_KEY not configured")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service key not configured")
    if not api_key or not key_matches(api_key, settings.service_api_keys):
        log.info("Auth fail: invalid X-Api-Key")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
