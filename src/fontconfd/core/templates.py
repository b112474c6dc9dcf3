"""Jinja environment used to render the bundled fontconfig fragments."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError as JinjaError
from jinja2 import TemplateNotFound

from fontconfd.core.exceptions import TemplateError


TEMPLATE_ROOT = Path(__file__).resolve().parent.parent / "templates"


def fc_bool(value: object) -> str:
    """Render a Python truth value as a fontconfig boolean literal."""
    return "true" if value else "false"


def _build_environment(template_root: Path) -> Environment:
    environment = Environment(
        loader=FileSystemLoader([str(template_root)]),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    environment.filters.setdefault("fc_bool", fc_bool)
    return environment


@lru_cache(maxsize=None)
def get_environment(template_root: Path = TEMPLATE_ROOT) -> Environment:
    """Return the shared environment for ``template_root``."""
    return _build_environment(template_root)


def render_template(template_name: str, **context: Any) -> str:
    """Render one of the bundled fragment templates."""
    environment = get_environment()
    try:
        template = environment.get_template(template_name)
    except TemplateNotFound as exc:
        raise TemplateError(
            f"Template entry '{template_name}' is missing in {TEMPLATE_ROOT}"
        ) from exc
    try:
        return template.render(context)
    except JinjaError as exc:
        raise TemplateError(f"Unable to render '{template_name}': {exc}") from exc


__all__ = ["TEMPLATE_ROOT", "fc_bool", "get_environment", "render_template"]
