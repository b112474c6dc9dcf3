"""Settings model consumed by the fragment generators.

Settings

`antialias` (`bool`)
: Enable font antialiasing. At high resolution (> 200 DPI) antialiasing has no
  visible effect.

`hinting` (`bool`)
: Enable font hinting, aligning glyphs to pixel boundaries.

`autohint` (`bool`)
: Use the FreeType autohinter in place of the font's own instructions.

`dpi` (`int`)
: Force a DPI value. `0` disables DPI forcing and keeps the detected value.

`rgba` (`"rgb" | "bgr" | "vrgb" | "vbgr" | "none"`)
: Subpixel order of the display.

`lcd_filter` (`"none" | "default" | "light" | "legacy"`)
: FreeType LCD filter.

`allow_bitmaps` (`bool`)
: Allow bitmap fonts. Set to `False` to reject every non scalable font.

`allow_type1` (`bool`)
: Allow Type 1 fonts. Rejected by default because of poor rendering.

`use_embedded_bitmaps` (`bool`)
: Use the bitmaps embedded in fonts like Calibri.

`include_user_conf` (`bool`)
: Include `~/.config/fontconfig/fonts.conf` and `~/.config/fontconfig/conf.d`.

`default_fonts` (`DefaultFonts`)
: Ordered preference lists for the `sans-serif`, `serif`, `monospace` and
  `emoji` generic families. Empty lists emit no alias.

`local_conf` (`str`)
: System wide customisation written verbatim to `local.conf`. It has higher
  priority than `default_fonts`.

`cache_32bit` (`bool`)
: Also generate the font cache for 32-bit applications.

Keys may be spelled in snake_case or camelCase (`allowBitmaps`,
`defaultFonts.sansSerif`, `cache32Bit`). The nested layout of the NixOS module
(`hinting.enable`, `hinting.autohint`, `subpixel.rgba`, `subpixel.lcdfilter`)
is accepted too.
"""

from __future__ import annotations

from collections.abc import Mapping
import json
from pathlib import Path
from typing import Any, Literal


try:  # Python >=3.11
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # Python 3.10
    import tomli as tomllib

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel
import yaml

from fontconfd.core.exceptions import InvalidSettings


SubpixelOrder = Literal["rgb", "bgr", "vrgb", "vbgr", "none"]
LcdFilter = Literal["none", "default", "light", "legacy"]

FONT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("sans_serif", "sans-serif"),
    ("serif", "serif"),
    ("monospace", "monospace"),
    ("emoji", "emoji"),
)


class DefaultFonts(BaseModel):
    """Preferred families for each generic font category."""

    model_config = ConfigDict(
        frozen=True, extra="forbid", populate_by_name=True, alias_generator=to_camel
    )

    sans_serif: tuple[str, ...] = ("DejaVu Sans",)
    serif: tuple[str, ...] = ("DejaVu Serif",)
    monospace: tuple[str, ...] = ("DejaVu Sans Mono",)
    emoji: tuple[str, ...] = ("Noto Color Emoji",)

    def bindings(self) -> list[tuple[str, tuple[str, ...]]]:
        """Return ``(generic family, preferences)`` pairs for non-empty categories."""
        return [
            (generic, getattr(self, field_name))
            for field_name, generic in FONT_CATEGORIES
            if getattr(self, field_name)
        ]


class Settings(BaseModel):
    """Immutable record of the global fontconfig knobs."""

    model_config = ConfigDict(
        frozen=True, extra="forbid", populate_by_name=True, alias_generator=to_camel
    )

    antialias: bool = True
    hinting: bool = True
    autohint: bool = False
    dpi: int = Field(default=0, ge=0)
    rgba: SubpixelOrder = "rgb"
    lcd_filter: LcdFilter = "default"
    allow_bitmaps: bool = True
    allow_type1: bool = False
    use_embedded_bitmaps: bool = False
    include_user_conf: bool = True
    default_fonts: DefaultFonts = Field(default_factory=DefaultFonts)
    local_conf: str = ""
    cache_32bit: bool = Field(default=False, alias="cache32Bit")

    @model_validator(mode="before")
    @classmethod
    def _flatten_module_layout(cls, data: Any) -> Any:
        """Accept the nested ``hinting``/``subpixel`` tables of the NixOS module."""
        if not isinstance(data, Mapping):
            return data
        payload = dict(data)
        hinting = payload.get("hinting")
        if isinstance(hinting, Mapping):
            payload.pop("hinting")
            if "enable" in hinting:
                payload["hinting"] = hinting["enable"]
            if "autohint" in hinting:
                payload["autohint"] = hinting["autohint"]
            unknown = set(hinting) - {"enable", "autohint"}
            if unknown:
                raise ValueError(f"Unknown hinting keys: {', '.join(sorted(unknown))}")
        subpixel = payload.pop("subpixel", None)
        if isinstance(subpixel, Mapping):
            if "rgba" in subpixel:
                payload["rgba"] = subpixel["rgba"]
            if "lcdfilter" in subpixel:
                payload["lcd_filter"] = subpixel["lcdfilter"]
            unknown = set(subpixel) - {"rgba", "lcdfilter"}
            if unknown:
                raise ValueError(f"Unknown subpixel keys: {', '.join(sorted(unknown))}")
        elif subpixel is not None:
            raise ValueError("'subpixel' must be a mapping.")
        return payload


def parse_settings(payload: Mapping[str, Any] | None = None, **overrides: Any) -> Settings:
    """Validate a raw mapping into :class:`Settings`, raising :class:`InvalidSettings`."""
    data: dict[str, Any] = {}
    if payload:
        if not isinstance(payload, Mapping):
            raise InvalidSettings("Settings must be a mapping.")
        data.update(payload)
        nested = data.get("fontconfig")
        if len(data) == 1 and isinstance(nested, Mapping):
            data = dict(nested)
    data.update(overrides)
    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidSettings(f"Invalid settings: {details}") from exc


def load_settings(path: Path) -> Settings:
    """Load settings from a YAML, TOML or JSON file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InvalidSettings(f"Unable to read settings file '{path}': {exc}") from exc

    suffix = path.suffix.lower()
    try:
        if suffix in {".yml", ".yaml"}:
            payload = yaml.safe_load(text)
        elif suffix == ".toml":
            payload = tomllib.loads(text)
        elif suffix == ".json":
            payload = json.loads(text)
        else:
            raise InvalidSettings(
                f"Unsupported settings format '{suffix or path.name}'. "
                "Expected one of: .yaml, .yml, .toml, .json."
            )
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise InvalidSettings(f"Unable to parse settings file '{path}': {exc}") from exc

    if payload is None:
        return Settings()
    return parse_settings(payload)


__all__ = [
    "FONT_CATEGORIES",
    "DefaultFonts",
    "LcdFilter",
    "Settings",
    "SubpixelOrder",
    "load_settings",
    "parse_settings",
]
