"""
JWT authentication for the API.

The token comes from the ``Authorization: Bearer`` header or, failing that,
from the configured cookie. Access requires a claim ``<name>|<url>|<role>``
matching the configured application claim and one of its roles.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import jwt
from fastapi import Request

from docstore.config import ClaimSettings, SecuritySettings
from docstore.errors import ForbiddenError, RedirectError

logger = logging.getLogger(__name__)


@dataclass
class User:
    username: str
    user_id: str = ""
    display_name: str = ""
    email: str = ""
    roles: List[str] = field(default_factory=list)
    authenticated: bool = True


class TokenCache:
    """Process-wide token → user cache with a fixed time-to-live.

    Expired entries are swept on every ``set``; beyond ``max_entries`` the
    entries closest to expiry make room for the new one.
    """

    def __init__(self, ttl_seconds: float, clock=time.monotonic, max_entries: int = 10000):
        self._ttl = ttl_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._entries: Dict[str, Tuple[float, User]] = {}
        self._lock = threading.Lock()

    def get(self, token: str) -> Optional[User]:
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return None
            expires, user = entry
            if self._clock() >= expires:
                del self._entries[token]
                return None
            return user

    def set(self, token: str, user: User) -> None:
        with self._lock:
            now = self._clock()
            self._entries.pop(token, None)
            self._evict(now)
            self._entries[token] = (now + self._ttl, user)

    def _evict(self, now: float) -> None:
        expired = [t for t, (expires, _) in self._entries.items() if now >= expires]
        for t in expired:
            del self._entries[t]
        overflow = len(self._entries) - self._max_entries + 1
        if overflow > 0:
            oldest = sorted(self._entries, key=lambda t: self._entries[t][0])[:overflow]
            for t in oldest:
                del self._entries[t]
        if expired or overflow > 0:
            logger.debug("token cache evicted %d expired and %d surplus entries", len(expired), max(overflow, 0))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _same_url(a: str, b: str) -> bool:
    return a.rstrip("/").lower() == b.rstrip("/").lower()


def authorize(required: ClaimSettings, claims: List[str]) -> List[str]:
    """Return the granted roles; ``ForbiddenError`` when no claim matches."""
    roles = []
    for claim in claims or []:
        parts = str(claim).split("|")
        if len(parts) != 3:
            continue
        name, url, role = parts
        if name == required.name and _same_url(url, required.url) and role in required.roles:
            roles.append(role)
    if not roles:
        raise ForbiddenError(f"no valid claim for application '{required.name}'")
    return roles


def parse_token(token: str, secret: str, issuer: str) -> dict:
    return jwt.decode(token, secret, algorithms=["HS256"], issuer=issuer)


class Authenticator:
    def __init__(self, settings: SecuritySettings, cache: Optional[TokenCache] = None):
        self.settings = settings
        self.cache = cache or TokenCache(settings.cache_seconds)

    def _token(self, request: Request) -> str:
        header = request.headers.get("Authorization", "")
        if header.lower().startswith("bearer "):
            token = header[7:].strip()
            if token:
                return token
        return request.cookies.get(self.settings.cookie_name, "")

    def authenticate(self, request: Request) -> User:
        token = self._token(request)
        if not token:
            raise RedirectError(
                "Invalid authentication, no JWT token present!", self.settings.login_redirect, 401
            )

        user = self.cache.get(token)
        if user is not None:
            logger.debug("token cache hit")
            return user

        try:
            payload = parse_token(token, self.settings.jwt_secret, self.settings.jwt_issuer)
        except jwt.PyJWTError as e:
            logger.warning("could not decode the JWT token payload: %s", e)
            raise RedirectError(
                f"Invalid authentication, could not parse the JWT token: {e}",
                self.settings.login_redirect,
                401,
            ) from e

        try:
            roles = authorize(self.settings.claim, payload.get("claims", []))
        except ForbiddenError as e:
            logger.warning("insufficient permissions to access the resource: %s", e)
            raise RedirectError(
                f"Invalid authorization: {e}", self.settings.login_redirect, 403
            ) from e

        user = User(
            username=payload.get("username") or payload.get("sub", ""),
            user_id=payload.get("userId", ""),
            display_name=payload.get("displayName", ""),
            email=payload.get("email", ""),
            roles=roles,
        )
        self.cache.set(token, user)
        return user


def current_user(request: Request) -> User:
    """FastAPI dependency guarding the API routes."""
    return request.app.state.authenticator.authenticate(request)
