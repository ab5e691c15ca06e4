"""Jinja2 rendering for CRUD page views."""

from __future__ import annotations

import os
from typing import Any, Iterable

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, TemplateNotFound, select_autoescape

DEFAULT_TEMPLATE_DIR = "crud/"


class TemplateRenderer:
    def __init__(self, search_paths: Iterable[str | os.PathLike] | None = None) -> None:
        loaders = []
        paths = [str(path) for path in (search_paths or [])]
        if paths:
            loaders.append(FileSystemLoader(paths))
        loaders.append(PackageLoader("crudpage", "templates"))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def candidates(self, name: str, template_dir: str = "") -> list[str]:
        names = []
        if template_dir:
            names.append(f"{template_dir}{name}.html")
        names.append(f"{DEFAULT_TEMPLATE_DIR}{name}.html")
        return names

    def exists(self, name: str, template_dir: str = "") -> bool:
        try:
            self.env.select_template(self.candidates(name, template_dir))
        except TemplateNotFound:
            return False
        return True

    def render(self, name: str, context: dict[str, Any], template_dir: str = "") -> str:
        template = self.env.select_template(self.candidates(name, template_dir))
        return template.render(context)

    def render_file(self, template_name: str, context: dict[str, Any]) -> str:
        return self.env.get_template(template_name).render(context)
