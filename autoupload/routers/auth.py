"""
Auth Router - YouTube OAuth consent URL, callback and status
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse

from ..config import Settings, get_settings
from ..dependencies import get_client_factory, get_credential_store
from ..models.schemas import AuthStatusResponse, AuthUrlResponse, ErrorResponse
from ..services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get(
    "/url",
    response_model=AuthUrlResponse,
    response_model_by_alias=True,
    responses={500: {"model": ErrorResponse}}
)
async def get_auth_url(
    settings: Settings = Depends(get_settings),
    client_factory=Depends(get_client_factory)
):
    """Return the Google consent-screen URL"""
    try:
        client = client_factory(settings, None)
        return AuthUrlResponse(auth_url=client.get_auth_url())
    except Exception as e:
        logger.error(f"Error generating auth URL: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate auth URL")


@router.get(
    "/callback",
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse}
    }
)
async def auth_callback(
    code: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
    credential_store: CredentialStore = Depends(get_credential_store),
    client_factory=Depends(get_client_factory)
):
    """
    OAuth redirect target

    Exchanges the authorization code, stores the tokens and redirects home.
    """
    if not code:
        raise HTTPException(status_code=400, detail="Authorization code not found")

    try:
        client = client_factory(settings, None)
        credential = client.exchange_code(code)
        credential_store.save(credential)
    except Exception as e:
        logger.error(f"Error in OAuth callback: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Authentication failed")

    return RedirectResponse(url="/", status_code=307)


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(credential_store: CredentialStore = Depends(get_credential_store)):
    """Whether a usable token pair is stored"""
    try:
        return AuthStatusResponse(authenticated=credential_store.is_authenticated())
    except Exception as e:
        logger.error(f"Error checking auth status: {e}", exc_info=True)
        return AuthStatusResponse(authenticated=False)
