"""
FastAPI dependencies.
Everything request handlers need is built once in create_app and stored on
app.state; these functions hand it out and can be overridden in tests.
"""
from typing import Optional

from fastapi import Request


def get_settings(request: Request):
    return request.app.state.settings


def get_logger(request: Request):
    return request.app.state.logger


def get_provider(request: Request):
    return request.app.state.provider


def get_orchestrator(request: Request):
    return request.app.state.orchestrator


def get_extractor(request: Request):
    """Build the Gemini extractor lazily so a missing key only fails extraction."""
    from repair.extraction import DocumentExtractor

    extractor = getattr(request.app.state, "extractor", None)
    if extractor is None:
        settings = request.app.state.settings
        extractor = DocumentExtractor(settings.google_api_key, settings.gemini_model)
        request.app.state.extractor = extractor
    return extractor


def get_oauth_client(request: Request):
    from auth_providers.oauth import GoogleOAuthClient

    oauth_client = getattr(request.app.state, "oauth_client", None)
    if oauth_client is None:
        settings = request.app.state.settings
        oauth_client = GoogleOAuthClient(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=settings.redirect_uri,
            scopes=request.app.state.provider.scopes,
        )
        request.app.state.oauth_client = oauth_client
    return oauth_client


def get_session_id(request: Request) -> Optional[str]:
    """Session id from the signed cookie, or None outside session mode."""
    signer = getattr(request.app.state, "cookie_signer", None)
    if signer is None:
        return None
    settings = request.app.state.settings
    return signer.verify(request.cookies.get(settings.session_cookie_name))
