"""Page actions (buttons above a list) and row actions (links per list row)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from markupsafe import Markup

from .request import add_query_args

if TYPE_CHECKING:  # pragma: no cover
    from .list_table import ListTable, Row
    from .page import CrudContext


def css_key(value: object) -> str:
    """Lowercase alphanumerics, dashes and underscores only."""
    return "".join(ch for ch in str(value).lower() if ch.isalnum() or ch in "-_")


class PageAction:
    def __init__(self, action_id: str, label: str) -> None:
        self.id = action_id
        self.label = label

    def get_url(self, ctx: "CrudContext") -> str:
        base = ctx.page.url
        url = add_query_args(base, {"action": self.id, "return_to": base})
        return ctx.page.hooks.apply_filters("page_action_url", url, self, ctx)

    def button_html(self, ctx: "CrudContext") -> Markup:
        classes = ["crud-page-action-btn", f"crud-page-action-btn-{css_key(self.id)}"]
        html = Markup('<a href="{}" class="{}">{}</a>').format(
            self.get_url(ctx),
            " ".join(classes),
            self.label,
        )
        return Markup(ctx.page.hooks.apply_filters("page_action_button_html", html, self, ctx))


class RowAction:
    def __init__(self, action_id: str, label: str) -> None:
        self.id = action_id
        self.label = label

    def get_url(self, table: "ListTable", row: "Row") -> str:
        """Action URL for a row, or ``""`` when the row carries no ``id``."""
        row_id = row.id
        if row_id in (None, ""):
            url = ""
        else:
            url = add_query_args(
                table.base_url,
                {"action": self.id, "id": row_id, "return_to": table.action_return_to_url()},
            )
        return table.hooks.apply_filters("row_action_url", url, self, table, row)


class EditRowAction(RowAction):
    def __init__(self) -> None:
        super().__init__("edit", "Edit")


class DeleteRowAction(RowAction):
    def __init__(self) -> None:
        super().__init__("delete", "Delete")


def link_html(url: str, css_class: str, label: str) -> Markup:
    if not url:
        return Markup("")
    return Markup('<a href="{}" class="{}">{}</a>').format(url, css_class, label)

