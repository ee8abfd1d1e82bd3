"""
Authorized Google clients for Drive and Sheets.

A provider turns whatever credentials are configured into an
AuthorizedClient. Business logic only ever sees the client.
"""
from __future__ import annotations

from typing import List, Optional

import gspread
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from googleapiclient.discovery import build

from repair.errors import AuthorizationError, ConfigurationError

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
DRIVE_FILE_SCOPE = "https://www.googleapis.com/auth/drive.file"
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"


def get_scopes(use_full_drive_scope: bool = False) -> List[str]:
    scopes = [SHEETS_SCOPE, DRIVE_FILE_SCOPE]
    if use_full_drive_scope:
        scopes.append(DRIVE_SCOPE)
    return scopes


class AuthorizedClient:
    """Drive v3 service and gspread client sharing one set of credentials."""

    def __init__(self, credentials, drive=None, sheets=None):
        self.credentials = credentials
        self._drive = drive
        self._sheets = sheets

    @property
    def drive(self):
        if self._drive is None:
            self._drive = build("drive", "v3", credentials=self.credentials, cache_discovery=False)
        return self._drive

    @property
    def sheets(self):
        if self._sheets is None:
            self._sheets = gspread.authorize(self.credentials)
        return self._sheets


class AuthorizedClientProvider:
    """Base class for the configured authorization strategy."""

    mode = ""

    def __init__(self, scopes: Optional[List[str]] = None):
        self.scopes = scopes or get_scopes()

    def load_credentials(self, session_id: Optional[str] = None):
        """Return google-auth credentials. Implemented by each variant."""
        raise NotImplementedError

    def is_authenticated(self, session_id: Optional[str] = None) -> bool:
        return True

    def get_client(self, session_id: Optional[str] = None) -> AuthorizedClient:
        """
        Build an AuthorizedClient, refreshing the access token up front so
        a bad credential fails here rather than halfway through a save.

        Raises:
            ConfigurationError: credentials are missing.
            AuthorizationError: credentials were rejected.
        """
        credentials = self.load_credentials(session_id)
        try:
            if not credentials.valid:
                credentials.refresh(Request())
        except GoogleAuthError as e:
            raise AuthorizationError(f"Google authorization failed: {e}") from e
        self.after_refresh(credentials, session_id)
        return AuthorizedClient(credentials)

    def after_refresh(self, credentials, session_id: Optional[str] = None):
        """Hook for variants that persist refreshed tokens."""


def require(value: str, name: str) -> str:
    if not value:
        raise ConfigurationError(f"{name} is not set")
    return value
