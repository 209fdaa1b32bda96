"""
Health check endpoint.
"""
import datetime
from fastapi import APIRouter, Depends

from ..services import RelayServices, get_services

router = APIRouter()


@router.get("/api/health")
async def health_check(services: RelayServices = Depends(get_services)):
    """Health check endpoint"""
    now = datetime.datetime.now(datetime.timezone.utc)
    return {
        "status": "ok",
        "timestamp": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "authenticated": services.token_manager.is_authenticated(),
        "tokenExpired": services.token_manager.is_token_expired(),
    }
