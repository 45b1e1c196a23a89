from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jinja2 import Environment
from markupsafe import Markup, escape

"""Renderer: template resource + field map -> HTML markup (Jinja2).

Loops / conditionals cover repeated field groups (unit lists, standards tables).
Undefined names render empty so a missing field never aborts a document.
"""

__all__ = [
    "JinjaRenderer",
    "nl2br",
]


def nl2br(value: Any) -> Markup:
    """Escape a cell value and keep its line breaks."""
    if value is None:
        return Markup("")
    lines = str(value).splitlines()
    return Markup("<br>").join(escape(line) for line in lines)


class JinjaRenderer:
    def __init__(self) -> None:
        self.env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
        self.env.filters["nl2br"] = nl2br

    def render(self, resource: str, field_map: Mapping[str, Any]) -> str:
        template = self.env.from_string(resource)
        # Thai canonical names are not valid identifiers everywhere; expose them via ``data``
        return template.render(data=dict(field_map), **_identifier_fields(field_map))


def _identifier_fields(field_map: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in field_map.items() if isinstance(k, str) and k.isidentifier() and k != "data"}
