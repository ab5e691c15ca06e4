"""Read-once flash messages handed from one request to the next."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict

from .request import PageRequest

SUCCESS = "success"
ERROR = "error"
INFO = "info"
MESSAGE_KINDS = (SUCCESS, ERROR, INFO)
DEFAULT_CLIENT_COOKIE = "crud-client"

_logger = logging.getLogger("crudpage.flash")


@dataclass(frozen=True)
class FlashMessage:
    kind: str
    text: str

    def to_dict(self) -> dict:
        return {"type": self.kind, "message": self.text}

    @classmethod
    def from_dict(cls, data: Any) -> "FlashMessage | None":
        if not isinstance(data, dict):
            return None
        text = data.get("message")
        if not isinstance(text, str) or not text:
            return None
        kind = data.get("type")
        if kind not in MESSAGE_KINDS:
            kind = SUCCESS
        return cls(kind=kind, text=text)


class FlashTransport:
    """Carries one message across a redirect.

    ``write`` must complete before the redirect response is sent and
    ``read_and_clear`` hands the message out at most once.
    """

    def write(self, request: PageRequest, message: FlashMessage) -> None:
        raise NotImplementedError

    def read_and_clear(self, request: PageRequest) -> FlashMessage | None:
        raise NotImplementedError


class MemoryFlashTransport(FlashTransport):
    """Server-side store keyed per client.

    The default key is the client cookie, then the signed-in user id. A
    request with neither has no client identity and its messages are dropped.
    """

    def __init__(
        self,
        client_key: Callable[[PageRequest], str | None] | None = None,
        cookie_name: str = DEFAULT_CLIENT_COOKIE,
    ) -> None:
        self.cookie_name = cookie_name
        self._client_key = client_key or self._cookie_or_user_key
        self._messages: Dict[str, FlashMessage] = {}
        self._lock = threading.Lock()

    def _cookie_or_user_key(self, request: PageRequest) -> str | None:
        client_id = request.cookies.get(self.cookie_name)
        if client_id:
            return f"client:{client_id}"
        if request.user_id:
            return f"user:{request.user_id}"
        return None

    def write(self, request: PageRequest, message: FlashMessage) -> None:
        key = self._client_key(request)
        if not key:
            _logger.info("flash_dropped reason=no_client kind=%s", message.kind)
            return
        with self._lock:
            self._messages[key] = message
        _logger.debug("flash_write client=%s kind=%s", key, message.kind)

    def read_and_clear(self, request: PageRequest) -> FlashMessage | None:
        key = self._client_key(request)
        if not key:
            return None
        with self._lock:
            return self._messages.pop(key, None)

    def pending(self) -> dict[str, FlashMessage]:
        with self._lock:
            return dict(self._messages)
