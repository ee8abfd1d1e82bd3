"""
Google authorization strategies. The strategy is chosen once at startup
from GOOGLE_AUTH_MODE; request handling only calls ``get_client``.
"""
from auth_providers.base import AuthorizedClient, AuthorizedClientProvider, get_scopes
from auth_providers.service_account import ServiceAccountProvider
from auth_providers.session_store import SessionCookieSigner, SessionStore, SessionTokens
from auth_providers.token_providers import RefreshTokenProvider, SessionTokenProvider
from repair.errors import ConfigurationError


def build_provider(settings, session_store=None) -> AuthorizedClientProvider:
    """Create the provider for ``settings.auth_mode``."""
    scopes = get_scopes(settings.use_full_drive_scope)
    if settings.auth_mode == "service_account":
        return ServiceAccountProvider(settings, scopes=scopes)
    if settings.auth_mode == "refresh_token":
        return RefreshTokenProvider(settings, scopes=scopes)
    if settings.auth_mode == "session":
        if session_store is None:
            session_store = SessionStore(ttl_minutes=settings.session_ttl_minutes)
        return SessionTokenProvider(settings, session_store, scopes=scopes)
    raise ConfigurationError(f"Unknown GOOGLE_AUTH_MODE: {settings.auth_mode}")


__all__ = [
    "AuthorizedClient",
    "AuthorizedClientProvider",
    "RefreshTokenProvider",
    "ServiceAccountProvider",
    "SessionCookieSigner",
    "SessionStore",
    "SessionTokenProvider",
    "SessionTokens",
    "build_provider",
    "get_scopes",
]
