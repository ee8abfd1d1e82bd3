"""
Static service-account credentials.

Resolution order:
1. Key file (GOOGLE_SHEETS_CREDENTIALS_FILE or config/credentials.json)
2. JSON string (GOOGLE_SHEETS_CREDENTIALS_JSON)
3. Email + private key pair (GOOGLE_SERVICE_ACCOUNT_EMAIL / _PRIVATE_KEY)
4. Application Default Credentials on Cloud Run / Kubernetes
"""
from __future__ import annotations

import json
import os
from typing import Optional

import google.auth
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account

from auth_providers.base import AuthorizedClientProvider
from repair.errors import AuthorizationError, ConfigurationError

TOKEN_URI = "https://oauth2.googleapis.com/token"


class ServiceAccountProvider(AuthorizedClientProvider):
    mode = "service_account"

    def __init__(self, settings, scopes=None):
        super().__init__(scopes)
        self.settings = settings

    def _build_credentials(self):
        s = self.settings
        try:
            if s.credentials_file:
                if not os.path.exists(s.credentials_file):
                    raise ConfigurationError(f"Google credentials file not found: {s.credentials_file}")
                return service_account.Credentials.from_service_account_file(
                    s.credentials_file, scopes=self.scopes
                )

            if s.credentials_json:
                try:
                    info = json.loads(s.credentials_json)
                except ValueError as e:
                    raise ConfigurationError(f"GOOGLE_SHEETS_CREDENTIALS_JSON is not valid JSON: {e}") from e
                return service_account.Credentials.from_service_account_info(info, scopes=self.scopes)

            if s.service_account_email and s.service_account_private_key:
                info = {
                    "type": "service_account",
                    "client_email": s.service_account_email,
                    "private_key": s.service_account_private_key,
                    "token_uri": TOKEN_URI,
                }
                return service_account.Credentials.from_service_account_info(info, scopes=self.scopes)

            if s.runtime_environment in ("cloud_run", "kubernetes"):
                credentials, _ = google.auth.default(scopes=self.scopes)
                return credentials

        except (GoogleAuthError, ValueError) as e:
            raise AuthorizationError(f"Invalid service account credentials: {e}") from e

        raise ConfigurationError("Google Service Account credentials not configured.")

    def load_credentials(self, session_id: Optional[str] = None):
        # Built per request
        return self._build_credentials()
