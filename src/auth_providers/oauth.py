"""
Google OAuth 2.0 web flow: consent URL and authorization-code exchange.
"""
from __future__ import annotations

from typing import Dict, List, Optional
from urllib.parse import urlencode

import requests

from repair.errors import AuthorizationError, ConfigurationError

GOOGLE_AUTH_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"


class GoogleOAuthClient:
    """Builds consent URLs and exchanges authorization codes for tokens."""

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str,
                 scopes: List[str], timeout: float = 30.0, http=None):
        if not client_id or not client_secret:
            raise ConfigurationError("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be set")
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes
        self.timeout = timeout
        self.http = http or requests

    def authorization_url(self, state: Optional[str] = None) -> str:
        # offline + consent so Google always returns a refresh token
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "access_type": "offline",
            "prompt": "consent",
            "include_granted_scopes": "true",
        }
        if state:
            params["state"] = state
        return f"{GOOGLE_AUTH_ENDPOINT}?{urlencode(params)}"

    def exchange_code(self, code: str) -> Dict:
        """
        Exchange an authorization code for tokens.

        Returns:
            Token response dict (access_token, refresh_token, expires_in, ...).

        Raises:
            AuthorizationError: Google rejected the code or was unreachable.
        """
        if not code:
            raise AuthorizationError("Missing authorization code")
        try:
            response = self.http.post(
                GOOGLE_TOKEN_ENDPOINT,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthorizationError(f"Token exchange failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code != 200 or "access_token" not in payload:
            detail = payload.get("error_description") or payload.get("error") or response.text
            raise AuthorizationError(f"Token exchange failed: {detail}")
        return payload
