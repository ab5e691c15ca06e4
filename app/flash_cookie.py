"""Flash messages carried across redirects in an encrypted cookie."""

from __future__ import annotations

import base64
import json
import logging
import os

from cryptography.fernet import Fernet, InvalidToken

from crudpage.flash import FlashMessage, FlashTransport
from crudpage.request import CrudError, PageRequest

DEFAULT_COOKIE_NAME = "crud-message"
COOKIE_MAX_AGE = 60 * 60 * 24

_logger = logging.getLogger("crudpage.flash")


class FlashError(CrudError):
    pass


def _get_fernet(key: str | None = None) -> Fernet:
    key = (key or os.getenv("CRUD_SECRET_KEY", "")).strip()
    if not key:
        raise FlashError("CRUD_SECRET_KEY is not set")
    try:
        # Accept raw 32-byte keys as well as urlsafe base64 Fernet keys
        if len(key) == 32:
            key = base64.urlsafe_b64encode(key.encode("utf-8")).decode("utf-8")
        return Fernet(key.encode("utf-8"))
    except ValueError as exc:
        raise FlashError("Invalid CRUD_SECRET_KEY") from exc


class CookieFlashTransport(FlashTransport):
    def __init__(self, key: str | None = None, cookie_name: str | None = None, max_age: int = COOKIE_MAX_AGE) -> None:
        self._fernet = _get_fernet(key)
        self.cookie_name = cookie_name or os.getenv("CRUD_FLASH_COOKIE", DEFAULT_COOKIE_NAME)
        self.max_age = max_age

    def encode(self, message: FlashMessage) -> str:
        payload = json.dumps(message.to_dict(), separators=(",", ":"))
        return self._fernet.encrypt(payload.encode("utf-8")).decode("utf-8")

    def decode(self, value: str) -> FlashMessage | None:
        try:
            payload = self._fernet.decrypt(value.encode("utf-8"))
            data = json.loads(payload.decode("utf-8"))
        except (InvalidToken, ValueError) as exc:
            _logger.warning("flash_cookie_invalid cookie=%s error=%s", self.cookie_name, exc.__class__.__name__)
            return None
        return FlashMessage.from_dict(data)

    def write(self, request: PageRequest, message: FlashMessage) -> None:
        request.response_cookies.set(self.cookie_name, self.encode(message), max_age=self.max_age)

    def read_and_clear(self, request: PageRequest) -> FlashMessage | None:
        value = request.cookies.get(self.cookie_name)
        if not value:
            return None
        request.response_cookies.delete(self.cookie_name)
        return self.decode(value)
