"""CLI command implementations exposed via `fontconfd.ui.cli`."""

from __future__ import annotations

from .build import build
from .cache import cache_clear
from .show import show


__all__ = ["build", "cache_clear", "show"]
