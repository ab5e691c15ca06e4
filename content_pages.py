"""In-memory content page registry and the per-request dispatch pipeline."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

from crudpage.content_page import ContentPage
from crudpage.request import PageRequest, Redirect


_logger = logging.getLogger("crudpage.content_pages")


@dataclass
class PageResult:
    status: int = 200
    body: str = ""
    location: str | None = None
    cookies: Dict[str, tuple] = field(default_factory=dict)
    deleted_cookies: List[str] = field(default_factory=list)

    @property
    def is_redirect(self) -> bool:
        return self.location is not None


def _default_path(page_id: str) -> str:
    return "/" + page_id.replace("_", "-") + "/"


def _normalize_path(path: str) -> str:
    return "/" + path.strip("/")


class ContentPages:
    def __init__(self, base_url: str | None = None) -> None:
        if base_url is None:
            base_url = os.getenv("CRUD_BASE_URL", "")
        self.base_url = base_url.rstrip("/")
        self._pages: Dict[str, ContentPage] = {}

    def register_page(self, page: ContentPage, path: str | None = None) -> ContentPage:
        if page.id in self._pages:
            raise ValueError(f"Content page already registered: {page.id}")
        page.path = path or page.path or _default_path(page.id)
        page.url = None
        self._pages[page.id] = page
        _logger.info("content_page_registered id=%s path=%s", page.id, page.path)
        return page

    def get_registered(self) -> list[ContentPage]:
        return list(self._pages.values())

    def get(self, page_id: str) -> ContentPage | None:
        return self._pages.get(page_id)

    def get_url(self, page: ContentPage | str) -> str:
        if isinstance(page, str):
            registered = self.get(page)
            if registered is None:
                raise KeyError(page)
            page = registered
        if page.url is None:
            page.url = self.base_url + (page.path or _default_path(page.id))
        return page.url

    def match_path(self, path: str) -> ContentPage | None:
        wanted = _normalize_path(path)
        for page in self._pages.values():
            if _normalize_path(page.path or _default_path(page.id)) == wanted:
                return page
        return None

    def dispatch(self, page: ContentPage, request: PageRequest) -> PageResult:
        """Run context, permission, screen and display for one request.

        A ``Redirect`` raised by the screen callback ends processing and is
        returned as a 303 result; nothing is rendered in that case.
        """
        ctx: Any = request
        if page.context_callback is not None:
            ctx = page.context_callback(page, request)

        if page.permission_callback is not None and not page.permission_callback(page, ctx):
            _logger.info("content_page_denied id=%s path=%s user=%s", page.id, request.path, request.user_id)
            body = page.no_permission_callback(page, ctx) if page.no_permission_callback else ""
            return self._result(request, status=403, body=body)

        if page.screen_callback is not None:
            try:
                page.screen_callback(page, ctx)
            except Redirect as redirect:
                return self._result(request, status=redirect.status_code, location=redirect.url)

        body = page.display_callback(page, ctx) if page.display_callback else ""
        return self._result(request, status=200, body=body)

    def _result(self, request: PageRequest, status: int, body: str = "", location: str | None = None) -> PageResult:
        cookies = request.response_cookies
        return PageResult(
            status=status,
            body=body,
            location=location,
            cookies=cookies.to_set(),
            deleted_cookies=cookies.to_delete(),
        )
