"""Rendering of template placeholders in string fields."""

from __future__ import annotations

import re
from typing import Any

import jinja2

# Go-style field access ("{{ .Name }}") is rewritten to a plain variable lookup.
_GO_FIELD_ACCESS = re.compile(r"(\{\{-?\s*)\.(?=[A-Za-z_])")

_environment = jinja2.Environment(
    autoescape=False,
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    # Config values may legitimately contain "{#"; keep comments out of the way.
    comment_start_string="{#-phare",
    comment_end_string="phare-#}",
)


class TemplateError(ValueError):
    """A template string could not be parsed or rendered."""


def _context(metadata: dict[str, Any]) -> dict[str, Any]:
    context = {
        "name": metadata.get("name", ""),
        "namespace": metadata.get("namespace", ""),
        "uid": metadata.get("uid", ""),
        "labels": metadata.get("labels") or {},
        "annotations": metadata.get("annotations") or {},
    }
    context.update({key.capitalize(): value for key, value in list(context.items())})
    context["UID"] = context["uid"]
    return context


def render(template: str, metadata: dict[str, Any]) -> str:
    """Render *template* against an object's metadata.

    Strings without ``{{`` or ``{%`` are returned unchanged. No HTML escaping
    is applied.

    Raises:
        TemplateError: On syntax errors or undefined variables
    """
    if "{{" not in template and "{%" not in template:
        return template
    source = _GO_FIELD_ACCESS.sub(r"\1", template)
    try:
        return _environment.from_string(source).render(_context(metadata))
    except jinja2.TemplateError as e:
        raise TemplateError(f"failed to render template {template!r}: {e}") from e
