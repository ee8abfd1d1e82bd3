"""
OAuth user-credential providers: a long-lived refresh token from config,
or per-session tokens obtained through the browser consent flow.
"""
from __future__ import annotations

from typing import Optional

from google.oauth2.credentials import Credentials

from auth_providers.base import AuthorizedClientProvider, require
from auth_providers.oauth import GOOGLE_TOKEN_ENDPOINT
from auth_providers.session_store import SessionStore
from repair.errors import AuthorizationError


class RefreshTokenProvider(AuthorizedClientProvider):
    """Uses GOOGLE_REFRESH_TOKEN obtained once via /api/auth/url."""

    mode = "refresh_token"

    def __init__(self, settings, scopes=None):
        super().__init__(scopes)
        self.settings = settings

    def load_credentials(self, session_id: Optional[str] = None):
        s = self.settings
        return Credentials(
            token=None,
            refresh_token=require(s.refresh_token, "GOOGLE_REFRESH_TOKEN"),
            client_id=require(s.client_id, "GOOGLE_CLIENT_ID"),
            client_secret=require(s.client_secret, "GOOGLE_CLIENT_SECRET"),
            token_uri=GOOGLE_TOKEN_ENDPOINT,
            scopes=self.scopes,
        )

    def is_authenticated(self, session_id: Optional[str] = None) -> bool:
        return bool(self.settings.refresh_token)


class SessionTokenProvider(AuthorizedClientProvider):
    """Looks up the caller's tokens in the session store."""

    mode = "session"

    def __init__(self, settings, session_store: SessionStore, scopes=None):
        super().__init__(scopes)
        self.settings = settings
        self.session_store = session_store

    def load_credentials(self, session_id: Optional[str] = None):
        tokens = self.session_store.get(session_id)
        if tokens is None:
            raise AuthorizationError("Not authenticated with Google. Please sign in again.")
        # google-auth compares expiry against naive UTC
        expiry = tokens.expiry.replace(tzinfo=None) if tokens.expiry else None
        return Credentials(
            token=tokens.access_token,
            refresh_token=tokens.refresh_token or None,
            client_id=self.settings.client_id,
            client_secret=self.settings.client_secret,
            token_uri=GOOGLE_TOKEN_ENDPOINT,
            scopes=list(tokens.scopes) or self.scopes,
            expiry=expiry,
        )

    def after_refresh(self, credentials, session_id: Optional[str] = None):
        if session_id:
            self.session_store.update_access_token(session_id, credentials.token, credentials.expiry)

    def is_authenticated(self, session_id: Optional[str] = None) -> bool:
        return self.session_store.get(session_id) is not None
