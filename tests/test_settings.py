from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError
import pytest

from fontconfd.core.config import DefaultFonts, Settings, load_settings, parse_settings
from fontconfd.core.exceptions import InvalidSettings


def test_defaults_match_stock_configuration() -> None:
    settings = Settings()
    assert settings.antialias is True
    assert settings.hinting is True
    assert settings.autohint is False
    assert settings.dpi == 0
    assert settings.rgba == "rgb"
    assert settings.lcd_filter == "default"
    assert settings.allow_bitmaps is True
    assert settings.allow_type1 is False
    assert settings.include_user_conf is True
    assert settings.default_fonts.serif == ("DejaVu Serif",)
    assert settings.cache_32bit is False


def test_settings_are_immutable() -> None:
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.dpi = 96  # type: ignore[misc]


def test_parse_accepts_camel_case_keys() -> None:
    settings = parse_settings(
        {
            "allowBitmaps": False,
            "useEmbeddedBitmaps": True,
            "cache32Bit": True,
            "defaultFonts": {"sansSerif": ["Inter"], "emoji": []},
        }
    )
    assert settings.allow_bitmaps is False
    assert settings.use_embedded_bitmaps is True
    assert settings.cache_32bit is True
    assert settings.default_fonts.sans_serif == ("Inter",)
    assert settings.default_fonts.emoji == ()


def test_parse_accepts_nested_module_layout() -> None:
    settings = parse_settings(
        {
            "hinting": {"enable": False, "autohint": True},
            "subpixel": {"rgba": "vbgr", "lcdfilter": "light"},
        }
    )
    assert settings.hinting is False
    assert settings.autohint is True
    assert settings.rgba == "vbgr"
    assert settings.lcd_filter == "light"


def test_parse_unwraps_fontconfig_table() -> None:
    settings = parse_settings({"fontconfig": {"dpi": 96}})
    assert settings.dpi == 96


def test_overrides_take_precedence() -> None:
    settings = parse_settings({"dpi": 96}, dpi=120)
    assert settings.dpi == 120


@pytest.mark.parametrize(
    "payload",
    [
        {"dpi": -1},
        {"rgba": "diagonal"},
        {"lcdFilter": "sharp"},
        {"unknownKey": True},
        {"subpixel": {"gamma": 1}},
        {"defaultFonts": {"cursive": ["Comic"]}},
    ],
)
def test_invalid_payloads_raise_invalid_settings(payload: dict[str, object]) -> None:
    with pytest.raises(InvalidSettings):
        parse_settings(payload)


def test_invalid_settings_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="dpi"):
        parse_settings({"dpi": -5})


def test_default_fonts_bindings_skip_empty_categories() -> None:
    fonts = DefaultFonts(sans_serif=(), serif=("DejaVu Serif",), monospace=(), emoji=())
    assert fonts.bindings() == [("serif", ("DejaVu Serif",))]


def test_load_yaml_settings(tmp_path: Path) -> None:
    path = tmp_path / "fonts.yml"
    path.write_text(
        "fontconfig:\n  antialias: false\n  defaultFonts:\n    monospace: [Fira Code]\n",
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.antialias is False
    assert settings.default_fonts.monospace == ("Fira Code",)


def test_load_toml_settings(tmp_path: Path) -> None:
    path = tmp_path / "fonts.toml"
    path.write_text(
        'dpi = 144\nallowType1 = true\n\n[subpixel]\nrgba = "none"\n',
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.dpi == 144
    assert settings.allow_type1 is True
    assert settings.rgba == "none"


def test_load_json_settings(tmp_path: Path) -> None:
    path = tmp_path / "fonts.json"
    path.write_text(json.dumps({"localConf": "<fontconfig/>"}), encoding="utf-8")
    assert load_settings(path).local_conf == "<fontconfig/>"


def test_empty_yaml_yields_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_settings(path) == Settings()


def test_unsupported_format_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "fonts.ini"
    path.write_text("[fonts]\n", encoding="utf-8")
    with pytest.raises(InvalidSettings, match="Unsupported settings format"):
        load_settings(path)


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(InvalidSettings, match="Unable to read"):
        load_settings(tmp_path / "missing.yaml")


def test_malformed_file_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "fonts.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(InvalidSettings, match="Unable to parse"):
        load_settings(path)
