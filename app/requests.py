"""Adapters between Starlette requests/responses and kernel page requests/results."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse, Response

from content_pages import PageResult
from crudpage.request import PageRequest


async def build_page_request(request: Request) -> PageRequest:
    form: dict = {}
    if request.method == "POST":
        submitted = await request.form()
        form = {key: value for key, value in submitted.items() if isinstance(value, str)}
    return PageRequest(
        method=request.method,
        query=dict(request.query_params),
        form=form,
        cookies=dict(request.cookies),
        user=getattr(request.state, "user", None),
        path=request.url.path,
        url=str(request.url),
    )


def to_response(result: PageResult) -> Response:
    if result.is_redirect:
        response: Response = RedirectResponse(result.location, status_code=result.status)
    else:
        response = HTMLResponse(result.body, status_code=result.status)
    for name in result.deleted_cookies:
        response.delete_cookie(name)
    for name, (value, max_age) in result.cookies.items():
        response.set_cookie(name, value, max_age=max_age, httponly=True, samesite="lax")
    return response
