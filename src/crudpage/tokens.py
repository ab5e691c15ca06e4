"""Scoped anti-forgery tokens signed as HS256 JWTs."""

from __future__ import annotations

import logging
import os
import time
from typing import Any

from jose import jwt
from jose.exceptions import JWTError

from .request import CrudError

TOKEN_FIELD = "crud_token"
DEFAULT_TTL = 60 * 60 * 24

_ALGORITHM = "HS256"
_logger = logging.getLogger("crudpage.tokens")


class TokenError(CrudError):
    pass


def token_scope(action: str, item_id: Any = None) -> str:
    suffix = "" if item_id in (None, "", False) else str(item_id)
    return f"{action}-{suffix}"


def _secret_from_env() -> str:
    secret = os.getenv("CRUD_SECRET_KEY", "").strip()
    if not secret:
        raise TokenError("CRUD_SECRET_KEY is not set")
    return secret


class TokenSigner:
    def __init__(self, secret: str | None = None, ttl: int | None = None) -> None:
        self._secret = secret or _secret_from_env()
        if ttl is None:
            ttl = int(os.getenv("CRUD_TOKEN_TTL", str(DEFAULT_TTL)))
        self._ttl = ttl

    def create(self, scope: str, user_id: str | None = None) -> str:
        now = int(time.time())
        claims = {
            "scope": scope,
            "sub": user_id or "",
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str | None, scope: str, user_id: str | None = None) -> bool:
        if not token:
            return False
        try:
            claims = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
        except JWTError as exc:
            _logger.info("crud_token_rejected scope=%s error=%s", scope, exc)
            return False
        if claims.get("scope") != scope:
            return False
        return claims.get("sub", "") == (user_id or "")
