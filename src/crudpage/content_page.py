"""Registration record for a page hosted by the content-page registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

DisplayCallback = Callable[["ContentPage", Any], str]
ScreenCallback = Callable[["ContentPage", Any], None]
DataCallback = Callable[["ContentPage", Any], dict]
PermissionCallback = Callable[["ContentPage", Any], bool]
ContextCallback = Callable[["ContentPage", Any], Any]


@dataclass(eq=False)
class ContentPage:
    id: str
    label: str
    description: str = ""
    display_callback: Optional[DisplayCallback] = None
    screen_callback: Optional[ScreenCallback] = None
    data_callback: Optional[DataCallback] = None
    permission_callback: Optional[PermissionCallback] = None
    # Builds the per-request context handed to every other callback.
    context_callback: Optional[ContextCallback] = None
    no_permission_callback: Optional[DisplayCallback] = None
    path: str | None = None
    url: str | None = None
