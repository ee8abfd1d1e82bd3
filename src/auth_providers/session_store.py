"""
Request-scoped Google tokens for the session authorization mode.

Tokens live in a SessionStore keyed by a random session id. The browser only
holds a signed cookie (PyJWT, HS256) carrying that id and its expiry.
"""
from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt


@dataclass(frozen=True)
class SessionTokens:
    access_token: str
    refresh_token: str = ""
    expiry: Optional[datetime] = None
    scopes: tuple = ()


@dataclass
class SessionEntry:
    tokens: SessionTokens
    expires_at: float
    created_at: float = field(default_factory=time.time)


class SessionStore:
    """In-memory, thread-safe session store with per-entry expiry."""

    def __init__(self, ttl_minutes: int = 480, clock=time.time):
        self.ttl_seconds = ttl_minutes * 60
        self._clock = clock
        self._entries: Dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def create(self, tokens: SessionTokens) -> str:
        session_id = secrets.token_urlsafe(32)
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            self._entries[session_id] = SessionEntry(tokens=tokens, expires_at=now + self.ttl_seconds, created_at=now)
        return session_id

    def get(self, session_id: Optional[str]) -> Optional[SessionTokens]:
        if not session_id:
            return None
        now = self._clock()
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            if entry.expires_at <= now:
                del self._entries[session_id]
                return None
            return entry.tokens

    def update_access_token(self, session_id: str, access_token: str, expiry: Optional[datetime]) -> bool:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return False
            entry.tokens = replace(entry.tokens, access_token=access_token, expiry=expiry)
            return True

    def delete(self, session_id: Optional[str]) -> bool:
        if not session_id:
            return False
        with self._lock:
            return self._entries.pop(session_id, None) is not None

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def _purge_expired(self, now: float):
        expired = [sid for sid, entry in self._entries.items() if entry.expires_at <= now]
        for sid in expired:
            del self._entries[sid]


class SessionCookieSigner:
    """Signs and verifies the session cookie."""

    def __init__(self, secret: str, algorithm: str = "HS256", expiry_minutes: int = 480):
        if not secret:
            raise ValueError("SESSION_SECRET must be set for session authorization")
        self.secret = secret
        self.algorithm = algorithm
        self.expiry_minutes = expiry_minutes

    def sign(self, session_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sid": session_id,
            "type": "session",
            "iat": now,
            "exp": now + timedelta(minutes=self.expiry_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Optional[str]:
        """
        Decode a cookie value.

        Returns:
            The session id if the cookie is valid, None if invalid/expired.
        """
        if not token:
            return None
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None
        if payload.get("type") != "session":
            return None
        return payload.get("sid")
