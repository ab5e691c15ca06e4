"""Ordered field storage with per-field sanitizers and error lists."""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Iterator, List, Mapping

Sanitizer = Callable[[Any], Any]


class FieldStore:
    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: Dict[str, Any] = {}
        self._sanitizers: Dict[str, Sanitizer] = {}
        self._errors: Dict[str, List[str]] = {}
        if values:
            self.update(values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value

    def update(self, values: Mapping[str, Any] | None, clear: bool = False) -> None:
        if clear:
            self._values = {}
        if not isinstance(values, Mapping):
            return
        for name, value in values.items():
            self._values[name] = value

    def as_dict(self) -> dict:
        return copy.deepcopy(self._values)

    def register_sanitizer(self, name: str, sanitizer: Sanitizer) -> None:
        self._sanitizers[name] = sanitizer

    def sanitize(self, name: str, value: Any) -> Any:
        sanitizer = self._sanitizers.get(name)
        if sanitizer is None:
            return value
        return sanitizer(value)

    def add_error(self, name: str, message: str) -> None:
        self._errors.setdefault(name, []).append(message)

    def errors_for(self, name: str) -> list[str]:
        return list(self._errors.get(name, []))

    def errors(self) -> dict[str, list[str]]:
        return {name: list(messages) for name, messages in self._errors.items()}

    def has_errors(self) -> bool:
        return any(self._errors.values())

    def clear_errors(self) -> None:
        self._errors = {}
