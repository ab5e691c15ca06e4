"""Ordered filter callbacks for the kernel's extension points.

Call sites (value threaded through, extra arguments after it):

- ``page_action_url`` (url, action, ctx)
- ``page_action_button_html`` (html, action, ctx)
- ``row_actions`` (actions, row, table)
- ``has_row_actions`` (bool, table)
- ``row_action_url`` (url, action, table, row)
- ``row_action_html`` (html, row, action, url, table)
- ``column_css_class`` (classes, column, table)
- ``header_column_html`` (html, column, table)
- ``row_column_html`` (html, row, column, table)
- ``form_url`` (url, form)
- ``form_css_classes`` (classes, form)
- ``before_content`` (fragments, action, ctx)
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Dict, List, Tuple

Filter = Callable[..., Any]

DEFAULT_PRIORITY = 10


class Hooks:
    def __init__(self) -> None:
        self._filters: Dict[str, List[Tuple[int, int, Filter]]] = {}
        self._seq = itertools.count()

    def add_filter(self, name: str, callback: Filter, priority: int = DEFAULT_PRIORITY) -> None:
        entries = self._filters.setdefault(name, [])
        entries.append((priority, next(self._seq), callback))
        entries.sort(key=lambda entry: (entry[0], entry[1]))

    def remove_filter(self, name: str, callback: Filter) -> bool:
        entries = self._filters.get(name)
        if not entries:
            return False
        for idx, (_, _, registered) in enumerate(entries):
            if registered == callback:
                del entries[idx]
                if not entries:
                    del self._filters[name]
                return True
        return False

    def has_filter(self, name: str) -> bool:
        return bool(self._filters.get(name))

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        for _, _, callback in list(self._filters.get(name, [])):
            value = callback(value, *args)
        return value
