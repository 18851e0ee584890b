"""Session helpers (issue tokens, cookies, validation).

The authenticated identity is never ambient state: the transport builds a
``SessionContext`` from the request cookie and hands it to
``SessionManager.require`` at the entry of every protected operation.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import logging
import secrets
import threading
import time

from fastapi import Request, Response

from minicrud.core.config import get_settings
from minicrud.core.errors import Unauthorized

SESSION_COOKIE_NAME = "session"

logger = logging.getLogger("minicrud.auth")


@dataclass(frozen=True)
class SessionIdentity:
    display_name: str
    email: str

    def as_dict(self) -> dict:
        return {"display_name": self.display_name, "email": self.email}


@dataclass(frozen=True)
class SessionContext:
    """What the transport knows about the caller: the session token, if any."""

    token: Optional[str] = None


class SessionManager:
    """In-memory token store with expiry.

    Tokens live in this process only; run a single worker process or put a
    sticky balancer in front when scaling out.
    """

    def __init__(self, ttl_seconds: int | None = None) -> None:
        if ttl_seconds is None:
            ttl_seconds = get_settings().session_ttl_seconds
        self.ttl_seconds = max(60, ttl_seconds)
        self._sessions: Dict[str, Tuple[SessionIdentity, float]] = {}
        self._lock = threading.Lock()

    def establish(self, user) -> str:
        """Bind ``{display_name, email}`` of ``user`` to a new token.

        Expired tokens are dropped first, so abandoned sessions do not pile up.
        """
        self.purge_expired()
        identity = SessionIdentity(display_name=user.display_name, email=user.email)
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._sessions[token] = (identity, time.time() + self.ttl_seconds)
        return token

    def current(self, context: SessionContext | None) -> Optional[SessionIdentity]:
        token = context.token if context else None
        if not token:
            return None
        now = time.time()
        with self._lock:
            entry = self._sessions.get(token)
            if not entry:
                return None
            identity, expires_at = entry
            if expires_at < now:
                del self._sessions[token]
                return None
            return identity

    def require(self, context: SessionContext | None) -> SessionIdentity:
        identity = self.current(context)
        if identity is None:
            raise Unauthorized()
        return identity

    def destroy(self, context: SessionContext | None) -> None:
        token = context.token if context else None
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def purge_expired(self) -> int:
        now = time.time()
        with self._lock:
            stale = [token for token, (_, expires_at) in self._sessions.items() if expires_at < now]
            for token in stale:
                del self._sessions[token]
        if stale:
            logger.debug("Purged %d expired session(s)", len(stale))
        return len(stale)


def context_from_request(request: Request) -> SessionContext:
    return SessionContext(token=request.cookies.get(SESSION_COOKIE_NAME) or None)


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    secure_cookie = settings.app_env == "prod"
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=secure_cookie,
        samesite="strict",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
