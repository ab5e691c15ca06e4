"""Session JWT auth middleware."""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

from jose import jwt
from jose.exceptions import JWTError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

DEFAULT_SESSION_COOKIE = "crud-session"
SESSION_TTL = 60 * 60 * 24
_ALGORITHM = "HS256"

_logger = logging.getLogger("crudpage.auth")


def _auth_disabled() -> bool:
    return os.getenv("CRUD_DISABLE_AUTH", "").strip().lower() in ("1", "true", "yes")


def _get_bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def _session_cookie_name() -> str:
    return os.getenv("CRUD_SESSION_COOKIE", DEFAULT_SESSION_COOKIE)


def create_session_token(user_id: str, secret: str, email: str | None = None, role: str | None = None, ttl: int = SESSION_TTL) -> str:
    now = int(time.time())
    claims = {"sub": user_id, "email": email, "role": role, "iat": now, "exp": now + ttl}
    return jwt.encode(claims, secret, algorithm=_ALGORITHM)


def _user_from_claims(claims: dict) -> dict:
    return {
        "id": claims.get("sub"),
        "email": claims.get("email"),
        "role": claims.get("role"),
        "claims": claims,
    }


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Attach the signed-in user (or ``None``) to ``request.state.user``.

    Pages decide what anonymous visitors may do, so a missing or invalid
    token never rejects the request here.
    """

    def __init__(self, app, secret: str | None = None) -> None:
        super().__init__(app)
        self._secret = secret

    def _get_secret(self) -> str:
        return self._secret or os.getenv("CRUD_SECRET_KEY", "").strip()

    async def dispatch(self, request: Request, call_next):
        request.state.user = None
        if _auth_disabled():
            request.state.user = {"id": "dev", "email": None, "role": "admin", "claims": {}}
            return await call_next(request)
        if request.url.path in {"/health"}:
            return await call_next(request)

        token = _get_bearer_token(request) or request.cookies.get(_session_cookie_name())
        if not token:
            return await call_next(request)

        secret = self._get_secret()
        if not secret:
            _logger.warning("auth_missing_secret path=%s", request.url.path)
            return await call_next(request)

        try:
            claims = jwt.decode(token, secret, algorithms=[_ALGORITHM])
        except JWTError as exc:
            _logger.warning("auth_invalid_token path=%s error=%s", request.url.path, exc)
            return await call_next(request)

        if not claims.get("sub"):
            _logger.warning("auth_missing_subject path=%s", request.url.path)
            return await call_next(request)

        request.state.user = _user_from_claims(claims)
        return await call_next(request)
