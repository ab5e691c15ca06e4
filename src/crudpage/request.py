"""Framework-independent request/response primitives for CRUD pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


class CrudError(RuntimeError):
    pass


@dataclass
class Redirect(Exception):
    """Ends request processing; the host turns it into a redirect response."""

    url: str
    status_code: int = 303

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        return f"redirect to {self.url}"


class ResponseCookies:
    """Cookie writes queued during a request, applied by the host to its response."""

    def __init__(self) -> None:
        self._set: Dict[str, Tuple[str, int | None]] = {}
        self._deleted: List[str] = []

    def set(self, name: str, value: str, max_age: int | None = None) -> None:
        if name in self._deleted:
            self._deleted.remove(name)
        self._set[name] = (value, max_age)

    def delete(self, name: str) -> None:
        self._set.pop(name, None)
        if name not in self._deleted:
            self._deleted.append(name)

    def to_set(self) -> dict[str, tuple[str, int | None]]:
        return dict(self._set)

    def to_delete(self) -> list[str]:
        return list(self._deleted)

    def __bool__(self) -> bool:
        return bool(self._set or self._deleted)


@dataclass
class PageRequest:
    method: str = "GET"
    query: Mapping[str, str] = field(default_factory=dict)
    form: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    user: dict | None = None
    path: str = "/"
    url: str = ""
    response_cookies: ResponseCookies = field(default_factory=ResponseCookies)

    @property
    def is_post(self) -> bool:
        return self.method.upper() == "POST"

    @property
    def is_get(self) -> bool:
        return self.method.upper() == "GET"

    @property
    def user_id(self) -> str | None:
        if not isinstance(self.user, dict):
            return None
        user_id = self.user.get("id")
        return str(user_id) if user_id not in (None, "") else None


def add_query_args(url: str, args: Mapping[str, Any]) -> str:
    """Merge query arguments into a URL; ``None`` values remove the key."""
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    for key, value in args.items():
        if value is None:
            query.pop(key, None)
        else:
            query[key] = str(value)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
