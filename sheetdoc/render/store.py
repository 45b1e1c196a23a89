from __future__ import annotations

from pathlib import Path

"""Template store: render resources on the filesystem.

One Jinja2 HTML resource per template id: ``<template_dir>/<id>_template.html``.
"""

__all__ = [
    "TEMPLATE_SUFFIX",
    "TemplateStore",
]

TEMPLATE_SUFFIX = "_template.html"


class TemplateStore:
    def __init__(self, template_dir: Path) -> None:
        self.template_dir = Path(template_dir)

    def resource_path(self, template_id: str) -> Path | None:
        # ids are plain names; anything path-like never resolves
        if not template_id or any(sep in template_id for sep in ("/", "\\", "..")):
            return None
        return self.template_dir / f"{template_id}{TEMPLATE_SUFFIX}"

    def exists(self, template_id: str) -> bool:
        path = self.resource_path(template_id)
        return path is not None and path.is_file()

    def load(self, template_id: str) -> str:
        path = self.resource_path(template_id)
        if path is None or not path.is_file():
            raise FileNotFoundError(f"template resource not found: {template_id}{TEMPLATE_SUFFIX}")
        return path.read_text(encoding="utf-8")
