"""
Authentication routes - Google consent URL, OAuth callback, status, logout.

What the callback does depends on GOOGLE_AUTH_MODE:
- refresh_token: show the refresh token so it can be put in GOOGLE_REFRESH_TOKEN
- session: keep the tokens server-side and set a signed session cookie
"""
import html
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from api.dependencies import (
    get_logger, get_oauth_client, get_provider, get_session_id, get_settings,
)
from api.models import AuthStatusResponse, AuthUrlResponse, ErrorResponse, MessageResponse
from auth_providers.session_store import SessionTokens

router = APIRouter()


@router.get(
    "/url",
    response_model=AuthUrlResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Get the Google consent URL",
)
async def auth_url(oauth_client=Depends(get_oauth_client)):
    return AuthUrlResponse(url=oauth_client.authorization_url())


@router.get("/init", summary="Redirect to the Google consent screen")
async def auth_init(oauth_client=Depends(get_oauth_client)):
    return RedirectResponse(oauth_client.authorization_url(), status_code=302)


@router.get(
    "/callback",
    responses={500: {"model": ErrorResponse}},
    summary="OAuth callback",
)
async def auth_callback(
    request: Request,
    code: Optional[str] = None,
    error: Optional[str] = None,
    settings=Depends(get_settings),
    oauth_client=Depends(get_oauth_client),
    logger=Depends(get_logger),
):
    """
    Exchange the authorization code for tokens.
    """
    if error:
        return JSONResponse(status_code=400, content={"error": f"Google authorization denied: {error}"})

    tokens = await run_in_threadpool(oauth_client.exchange_code, code)
    logger.info(f"OAuth code exchanged (mode={settings.auth_mode})", component="Auth")

    if settings.auth_mode == "session":
        expiry = None
        if tokens.get("expires_in"):
            expiry = datetime.now(timezone.utc) + timedelta(seconds=int(tokens["expires_in"]))
        store = request.app.state.session_store
        session_id = store.create(SessionTokens(
            access_token=tokens["access_token"],
            refresh_token=tokens.get("refresh_token", ""),
            expiry=expiry,
            scopes=tuple((tokens.get("scope") or "").split()),
        ))
        response = RedirectResponse("/", status_code=302)
        response.set_cookie(
            settings.session_cookie_name,
            request.app.state.cookie_signer.sign(session_id),
            max_age=settings.session_ttl_minutes * 60,
            httponly=True,
            samesite="lax",
            secure=settings.base_url.startswith("https://"),
        )
        return response

    refresh_token = tokens.get("refresh_token")
    if not refresh_token:
        body = (
            "<h1>No refresh token returned</h1>"
            "<p>Revoke this app's access in your Google account and try again.</p>"
        )
        return HTMLResponse(body, status_code=400)

    body = (
        "<h1>Authorization successful</h1>"
        "<p>Set this value as <code>GOOGLE_REFRESH_TOKEN</code> and restart the service:</p>"
        f"<pre>{html.escape(refresh_token)}</pre>"
    )
    return HTMLResponse(body)


@router.get(
    "/status",
    response_model=AuthStatusResponse,
    response_model_by_alias=True,
    summary="Is the caller authorized with Google?",
)
async def auth_status(
    provider=Depends(get_provider),
    session_id: Optional[str] = Depends(get_session_id),
):
    return AuthStatusResponse(is_authenticated=provider.is_authenticated(session_id), mode=provider.mode)


@router.post("/logout", response_model=MessageResponse, summary="Clear the session")
async def auth_logout(
    request: Request,
    settings=Depends(get_settings),
    session_id: Optional[str] = Depends(get_session_id),
):
    store = getattr(request.app.state, "session_store", None)
    if store is not None:
        store.delete(session_id)
    response = JSONResponse(content={"success": True, "message": "Logged out"})
    response.delete_cookie(settings.session_cookie_name)
    return response
