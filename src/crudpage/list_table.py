"""List model: columns, rows, row actions and the item total for one page of results."""

from __future__ import annotations

from typing import Any, List, Mapping

from markupsafe import Markup, escape

from .actions import DeleteRowAction, EditRowAction, RowAction, css_key, link_html
from .fields import FieldStore
from .hooks import Hooks


class Column:
    def __init__(self, column_id: str, name: str) -> None:
        self.id = column_id
        self.name = name

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Column({self.id!r}, {self.name!r})"


class Row:
    """Cell values plus opaque metadata (e.g. the looked-up object) for collaborators."""

    def __init__(self, data: Mapping[str, Any] | None = None, meta: Mapping[str, Any] | None = None) -> None:
        self.cells = FieldStore(data)
        self.meta = dict(meta or {})

    @property
    def id(self) -> Any:
        return self.cells.get("id")

    def get_column(self, column_id: str) -> Any:
        return self.cells.get(column_id)

    def get_meta(self, key: str) -> Any:
        return self.meta.get(key)


class ListTable:
    def __init__(self, hooks: Hooks | None = None) -> None:
        self.hooks = hooks or Hooks()
        self.base_url = ""
        self.return_to_url = ""
        self.columns: List[Column] = []
        self.rows: List[Row] = []
        self.row_actions: List[RowAction] = [EditRowAction(), DeleteRowAction()]
        self.total_items = 0

    def prepare(self, page: int, per_page: int) -> None:
        """Populate ``rows`` and ``total_items`` for the given page (1-based).

        Implementations replace ``rows`` rather than appending so repeated
        calls within a request produce the same result. Row ids must be
        unique; ``render_rows`` rejects duplicates.
        """
        raise NotImplementedError

    def add_column(self, column: Column) -> None:
        if any(existing.id == column.id for existing in self.columns):
            raise ValueError(f"Duplicate column id: {column.id}")
        self.columns.append(column)

    def get_columns(self) -> list[Column]:
        return list(self.columns)

    def get_rows(self) -> list[Row]:
        return list(self.rows)

    def get_total_items(self) -> int:
        return self.total_items

    def set_base_url(self, url: str) -> None:
        self.base_url = url

    def action_return_to_url(self) -> str:
        return self.return_to_url or self.base_url

    def has_row_actions(self) -> bool:
        return bool(self.hooks.apply_filters("has_row_actions", bool(self.row_actions), self))

    def get_row_actions(self, row: Row) -> list[RowAction]:
        return list(self.hooks.apply_filters("row_actions", list(self.row_actions), row, self))

    def column_css_class(self, column: Column) -> str:
        classes = [f"crud-col-{css_key(column.id)}"]
        classes = self.hooks.apply_filters("column_css_class", classes, column, self)
        return " ".join(classes)

    def header_column_html(self, column: Column) -> Markup:
        html = escape(column.name)
        return Markup(self.hooks.apply_filters("header_column_html", html, column, self))

    def row_column_html(self, row: Row, column: Column) -> Markup:
        value = row.get_column(column.id)
        html = escape("" if value is None else value)
        return Markup(self.hooks.apply_filters("row_column_html", html, row, column, self))

    def row_action_html(self, row: Row, action: RowAction) -> Markup:
        url = action.get_url(self, row)
        html = link_html(url, f"crud-action-{css_key(action.id)}", action.label)
        return Markup(self.hooks.apply_filters("row_action_html", html, row, action, url, self))

    def render_rows(self) -> list[dict]:
        """Render-ready cells and actions for every prepared row."""
        has_actions = self.has_row_actions()
        rendered = []
        seen_ids = set()
        for row in self.rows:
            row_id = row.id
            if row_id not in (None, ""):
                if str(row_id) in seen_ids:
                    raise ValueError(f"Duplicate row id: {row_id}")
                seen_ids.add(str(row_id))
            actions = []
            if has_actions:
                for action in self.get_row_actions(row):
                    html = self.row_action_html(row, action)
                    if html:
                        actions.append(html)
            rendered.append(
                {
                    "id": row_id,
                    "element_id": f"crud-row-{row_id}" if row_id not in (None, "") else None,
                    "cells": [
                        {
                            "column": column.id,
                            "css_class": self.column_css_class(column),
                            "html": self.row_column_html(row, column),
                        }
                        for column in self.columns
                    ],
                    "actions": actions,
                }
            )
        return rendered
