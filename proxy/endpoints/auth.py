"""
OAuth login, callback, logout and status endpoints.
"""
import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from ..models import LogoutResponse
from ..services import RelayServices, get_services

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth")


@router.get("/status")
async def auth_status(services: RelayServices = Depends(get_services)):
    """Get session status without exposing secrets"""
    return services.token_manager.status()


@router.get("/login")
async def login(services: RelayServices = Depends(get_services)):
    """Start the OAuth flow by redirecting to the provider"""
    return RedirectResponse(services.auth_flow.begin_login(), status_code=302)


@router.get("/callback")
async def callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
    services: RelayServices = Depends(get_services),
):
    """Provider redirect target; finishes the login and returns to the app"""
    outcome = await services.auth_flow.handle_callback(code, state, error, error_description)
    if outcome.ok:
        return RedirectResponse("/?auth_success=true", status_code=302)
    return RedirectResponse(f"/?auth_error={quote(outcome.message, safe='')}", status_code=302)


@router.post("/logout", response_model=LogoutResponse)
async def logout(services: RelayServices = Depends(get_services)):
    """Revoke the token upstream (best effort) and clear the session"""
    await services.auth_flow.logout()
    return LogoutResponse()
