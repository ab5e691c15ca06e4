"""FastAPI app hosting the CRUD content pages."""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, Response

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


_load_env_file(ROOT / "app" / ".env")

from app.auth import SessionAuthMiddleware
from app.flash_cookie import CookieFlashTransport
from app.members_admin import MemberAdminPage
from app.requests import build_page_request, to_response
from app.stores import MemoryMemberStore

from content_pages import ContentPages
from crudpage.pagination import DEFAULT_MAX_PER_PAGE, DEFAULT_PER_PAGE
from crudpage.render import TemplateRenderer
from crudpage.tokens import TokenSigner

logger = logging.getLogger("crudpage")
logging.basicConfig(level=logging.INFO)

TEMPLATES_DIR = ROOT / "app" / "templates"
APP_ENV = os.getenv("APP_ENV", "dev").strip().lower() or "dev"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("config_invalid_int name=%s value=%s", name, raw)
        return default


def _page_size_config() -> tuple[int, int]:
    """Page size and its upper bound; the page size must lie in (1, max]."""
    max_per_page = _env_int("CRUD_MAX_PER_PAGE", DEFAULT_MAX_PER_PAGE)
    if max_per_page < 2:
        logger.warning("config_invalid_max_per_page value=%s default=%s", max_per_page, DEFAULT_MAX_PER_PAGE)
        max_per_page = DEFAULT_MAX_PER_PAGE
    per_page = _env_int("CRUD_PER_PAGE", DEFAULT_PER_PAGE)
    if not 1 < per_page <= max_per_page:
        fallback = min(DEFAULT_PER_PAGE, max_per_page)
        logger.warning(
            "config_invalid_per_page value=%s max=%s default=%s",
            per_page,
            max_per_page,
            fallback,
        )
        per_page = fallback
    return per_page, max_per_page


def create_app(
    store: MemoryMemberStore | None = None,
    secret: str | None = None,
    base_url: str | None = None,
) -> FastAPI:
    secret = secret or os.getenv("CRUD_SECRET_KEY", "").strip() or None
    pages = ContentPages(base_url)
    renderer = TemplateRenderer([TEMPLATES_DIR])
    members = MemberAdminPage(
        store or MemoryMemberStore(),
        registry=pages,
        tokens=TokenSigner(secret),
        flash=CookieFlashTransport(secret),
        renderer=renderer,
    )
    members.per_page, members.max_per_page = _page_size_config()

    app = FastAPI(title="CRUD Pages")
    app.state.content_pages = pages
    app.state.member_admin = members
    app.add_middleware(SessionAuthMiddleware, secret=secret)

    @app.get("/health")
    async def health() -> dict:
        return {"ok": True, "env": APP_ENV}

    @app.api_route("/{path:path}", methods=["GET", "POST"])
    async def content_page(path: str, request: Request) -> Response:
        page = pages.match_path(request.url.path)
        if page is None:
            return HTMLResponse("Not Found", status_code=404)
        page_request = await build_page_request(request)
        result = pages.dispatch(page, page_request)
        logger.info(
            "content_page_result id=%s method=%s status=%s",
            page.id,
            request.method,
            result.status,
        )
        return to_response(result)

    return app


app = create_app()
