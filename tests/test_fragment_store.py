from __future__ import annotations

import pytest

from fontconfd.assembly.store import (
    CACHE_FRAGMENT,
    GENERATED_PACKAGE,
    LOCAL_CONF_PATH,
    NO_BITMAPS_FRAGMENT,
    REJECT_TYPE1_FRAGMENT,
    USER_FRAGMENT,
    FragmentStore,
)
from fontconfd.core.config import Settings, parse_settings
from fontconfd.core.fragments import Fragment


FONT_DIRS = ["/nix/store/aaa-dejavu/share/fonts", "/nix/store/bbb-noto/share/fonts"]


def _by_name(fragments: list[Fragment]) -> dict[str, Fragment]:
    return {fragment.name: fragment for fragment in fragments}


def test_materialize_is_deterministic() -> None:
    settings = parse_settings({"dpi": 96, "localConf": "<fontconfig/>"})
    first = FragmentStore(FONT_DIRS).materialize(settings)
    second = FragmentStore(list(FONT_DIRS)).materialize(settings)
    assert [(f.name, f.priority, f.content) for f in first] == [
        (f.name, f.priority, f.content) for f in second
    ]


def test_default_fragment_set() -> None:
    fragments = FragmentStore(FONT_DIRS).materialize(Settings())
    assert [fragment.file_path() for fragment in fragments] == [
        "conf.d/00-nixos-cache.conf",
        "conf.d/10-nixos-rendering.conf",
        "conf.d/50-user.conf",
        "conf.d/52-nixos-default-fonts.conf",
        "conf.d/53-nixos-embedded-bitmaps.conf",
        "conf.d/53-nixos-reject-type1.conf",
    ]
    assert {fragment.source_package for fragment in fragments} == {GENERATED_PACKAGE}


def test_cache_fragment_lists_directories_once() -> None:
    store = FragmentStore([*FONT_DIRS, FONT_DIRS[0]])
    content = store.cache_fragment(()).content
    assert content.count("<dir>") == 2
    assert content.index(FONT_DIRS[0]) < content.index(FONT_DIRS[1])
    assert "<cachedir>" not in content


def test_attach_cache_embeds_cache_directories() -> None:
    store = FragmentStore(FONT_DIRS)
    fragments = store.attach_cache(store.materialize(Settings()), ["/var/cache/fc-x86_64"])
    cache = _by_name(fragments)[CACHE_FRAGMENT]
    assert "<cachedir>/var/cache/fc-x86_64</cachedir>" in cache.content
    assert len(fragments) == len(store.materialize(Settings()))


def test_cross_platform_store_omits_cache_directories() -> None:
    store = FragmentStore(FONT_DIRS, platform_match=False)
    content = store.cache_fragment(["/var/cache/fc"]).content
    assert "<cachedir>" not in content
    assert f"<dir>{FONT_DIRS[0]}</dir>" in content


def test_rendering_fragment_reflects_settings() -> None:
    settings = parse_settings(
        {"antialias": False, "hinting": {"autohint": True}, "subpixel": {"lcdfilter": "light"}}
    )
    content = _by_name(FragmentStore().materialize(settings))["nixos-rendering"].content
    assert '<edit mode="append" name="antialias">\n      <bool>false</bool>' in content
    assert '<edit mode="append" name="autohint">\n      <bool>true</bool>' in content
    assert "<const>hintslight</const>" in content
    assert "<const>lcdlight</const>" in content
    assert "<const>rgb</const>" in content


def test_dpi_rule_only_when_forced() -> None:
    store = FragmentStore()
    unforced = _by_name(store.materialize(Settings()))["nixos-rendering"].content
    forced = _by_name(store.materialize(parse_settings(dpi=144)))["nixos-rendering"].content
    assert 'name="dpi"' not in unforced
    assert "<double>144</double>" in forced


def test_empty_family_list_emits_no_alias() -> None:
    settings = parse_settings({"defaultFonts": {"serif": []}})
    content = _by_name(FragmentStore().materialize(settings))["nixos-default-fonts"].content
    assert "<family>serif</family>" not in content
    assert "<family>sans-serif</family>" in content
    assert content.index("sans-serif") < content.index("monospace") < content.index("emoji")


def test_family_names_are_escaped() -> None:
    settings = parse_settings({"defaultFonts": {"serif": ["Foo & <Bar>"]}})
    content = _by_name(FragmentStore().materialize(settings))["nixos-default-fonts"].content
    assert "<family>Foo &amp; &lt;Bar&gt;</family>" in content


@pytest.mark.parametrize(
    ("overrides", "present", "absent"),
    [
        ({"allow_bitmaps": True}, set(), {NO_BITMAPS_FRAGMENT}),
        ({"allow_bitmaps": False}, {NO_BITMAPS_FRAGMENT}, set()),
        ({"allow_type1": True}, set(), {REJECT_TYPE1_FRAGMENT}),
        ({"allow_type1": False}, {REJECT_TYPE1_FRAGMENT}, set()),
        ({"include_user_conf": False}, set(), {USER_FRAGMENT}),
    ],
)
def test_conditional_fragments(
    overrides: dict[str, bool], present: set[str], absent: set[str]
) -> None:
    names = set(_by_name(FragmentStore().materialize(parse_settings(**overrides))))
    assert present <= names
    assert not absent & names


def test_embedded_bitmaps_always_emitted() -> None:
    store = FragmentStore()
    enabled = _by_name(store.materialize(parse_settings(use_embedded_bitmaps=True)))
    disabled = _by_name(store.materialize(Settings()))
    assert "<bool>true</bool>" in enabled["nixos-embedded-bitmaps"].content
    assert "<bool>false</bool>" in disabled["nixos-embedded-bitmaps"].content


def test_local_conf_is_written_verbatim() -> None:
    text = "<?xml version='1.0'?>\n<fontconfig><!-- mine --></fontconfig>\n"
    local = _by_name(FragmentStore().materialize(parse_settings(local_conf=text)))["nixos-local"]
    assert local.content == text
    assert local.priority == 51
    assert local.file_path() == LOCAL_CONF_PATH


def test_entry_point_includes_conf_dir() -> None:
    entry = FragmentStore().entry_point()
    assert entry.entry_point is True
    assert entry.file_path() == "fonts.conf"
    assert '<include ignore_missing="yes">conf.d</include>' in entry.content


def test_end_to_end_fragment_set() -> None:
    settings = parse_settings(
        {
            "antialias": True,
            "hinting": True,
            "autohint": False,
            "dpi": 0,
            "rgba": "rgb",
            "lcdFilter": "default",
            "allowBitmaps": True,
            "allowType1": False,
            "defaultFonts": {"sansSerif": [], "serif": ["DejaVu Serif"], "monospace": [], "emoji": []},
        }
    )
    fragments = _by_name(FragmentStore(FONT_DIRS).materialize(settings))

    cache = fragments["nixos-cache"].content
    assert cache.count("<dir>") == 2
    assert "<cachedir>" not in cache
    assert "<match" not in cache

    rendering = fragments["nixos-rendering"].content
    assert "<const>lcddefault</const>" in rendering
    assert 'name="dpi"' not in rendering

    defaults = fragments["nixos-default-fonts"].content
    assert defaults.count("<alias") == 1
    assert "<family>serif</family>" in defaults
    assert "<family>DejaVu Serif</family>" in defaults

    assert "nixos-reject-type1" in fragments
    assert "no-bitmaps" not in fragments
