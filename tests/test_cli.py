from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fontconfd.core.platform import Architecture
from fontconfd.ui.cli import app
import fontconfd.ui.cli.utils as cli_utils


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _write_package(root: Path, files: dict[str, str]) -> Path:
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


def test_version_option(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("fontconfd ")


def test_build_writes_directory(runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "fonts.yaml"
    config.write_text(
        "fontconfig:\n  dpi: 96\n  allowBitmaps: false\n  localConf: '<fontconfig/>'\n",
        encoding="utf-8",
    )
    output = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "build",
            str(output),
            "--config",
            str(config),
            "--font-dir",
            "/nix/store/aaa-dejavu/share/fonts",
            "--no-cache",
        ],
    )

    assert result.exit_code == 0, result.output
    conf_d = output / "conf.d"
    assert sorted(path.name for path in conf_d.iterdir()) == [
        "00-nixos-cache.conf",
        "10-nixos-rendering.conf",
        "50-user.conf",
        "52-nixos-default-fonts.conf",
        "53-nixos-embedded-bitmaps.conf",
        "53-nixos-reject-type1.conf",
        "53-no-bitmaps.conf",
    ]
    assert (output / "fonts.conf").is_file()
    assert (output / "local.conf").read_text(encoding="utf-8") == "<fontconfig/>"
    assert "<double>96</double>" in (conf_d / "10-nixos-rendering.conf").read_text(
        encoding="utf-8"
    )
    assert "Assembled" in result.stdout


def test_build_with_fake_cache(runner: CliRunner, tmp_path: Path, monkeypatch, fake_builder) -> None:
    monkeypatch.setattr(cli_utils, "FcCacheBuilder", lambda **_kwargs: fake_builder)
    output = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "build",
            str(output),
            "--font-dir",
            "/fonts/a",
            "--host-platform",
            "x86_64",
            "--build-platform",
            "x86_64",
        ],
    )

    assert result.exit_code == 0, result.output
    assert len(fake_builder.calls) == 1
    cache = (output / "conf.d" / "00-nixos-cache.conf").read_text(encoding="utf-8")
    assert "<cachedir>" in cache


def test_cross_build_skips_cache(runner: CliRunner, tmp_path: Path, monkeypatch, fake_builder) -> None:
    monkeypatch.setattr(cli_utils, "FcCacheBuilder", lambda **_kwargs: fake_builder)
    output = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "build",
            str(output),
            "--font-dir",
            "/fonts/a",
            "--host-platform",
            "aarch64",
            "--build-platform",
            "x86_64",
        ],
    )

    assert result.exit_code == 0, result.output
    assert fake_builder.calls == []
    cache = (output / "conf.d" / "00-nixos-cache.conf").read_text(encoding="utf-8")
    assert "<cachedir>" not in cache
    assert "<dir>/fonts/a</dir>" in cache


def test_build_rejects_invalid_settings(runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "fonts.json"
    config.write_text(json.dumps({"dpi": -1}), encoding="utf-8")
    output = tmp_path / "out"

    result = runner.invoke(app, ["build", str(output), "--config", str(config), "--no-cache"])

    assert result.exit_code == 1
    assert "Invalid settings" in result.output
    assert not output.exists()


def test_strict_policy_reports_collision(runner: CliRunner, tmp_path: Path) -> None:
    package = _write_package(
        tmp_path / "my-fonts",
        {"etc/fonts/conf.d/52-nixos-default-fonts.conf": "<fontconfig/>\n"},
    )
    output = tmp_path / "out"

    result = runner.invoke(
        app,
        ["build", str(output), "--package", str(package), "--policy", "strict", "--no-cache"],
    )

    assert result.exit_code == 1
    assert "my-fonts" in result.output
    assert not output.exists()


def test_show_lists_fragments_as_json(runner: CliRunner, tmp_path: Path) -> None:
    base = _write_package(
        tmp_path / "fontconfig",
        {
            "etc/fonts/fonts.conf": "<fontconfig/>\n",
            "etc/fonts/conf.d/60-latin.conf": "<fontconfig/>\n",
        },
    )
    extra = _write_package(
        tmp_path / "my-fonts",
        {"etc/fonts/conf.d/52-nixos-default-fonts.conf": "<fontconfig/>\n"},
    )

    result = runner.invoke(
        app,
        ["show", "--base", str(base), "--package", str(extra), "--json"],
    )

    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert rows[0]["path"] == "fonts.conf"
    assert rows[0]["priority"] is None
    assert [row["name"] for row in rows[1:]] == [
        "nixos-cache",
        "nixos-rendering",
        "user",
        "nixos-default-fonts",
        "nixos-embedded-bitmaps",
        "nixos-reject-type1",
        "latin",
    ]
    defaults = next(row for row in rows if row["name"] == "nixos-default-fonts")
    assert defaults["package"] == "my-fonts"
    assert defaults["shadowed"] == ["fontconfig-conf"]


def test_show_prints_table(runner: CliRunner) -> None:
    result = runner.invoke(app, ["show"])
    assert result.exit_code == 0, result.output
    assert "Configuration Fragments" in result.stdout


def test_cache_clear(runner: CliRunner, isolated_cache) -> None:
    caches = isolated_cache.artifacts_dir
    caches.mkdir(parents=True)
    (caches / "stub").write_text("ok", encoding="utf-8")

    result = runner.invoke(app, ["cache-clear"])

    assert result.exit_code == 0, result.output
    assert "Removed" in result.stdout
    assert not caches.exists()
    assert isolated_cache.root.exists()

    again = runner.invoke(app, ["cache-clear"])
    assert again.exit_code == 0
    assert "Nothing to clear" in again.stdout


def _cache_32bit_config(tmp_path: Path) -> Path:
    config = tmp_path / "fonts.yaml"
    config.write_text("fontconfig:\n  cache32Bit: true\n", encoding="utf-8")
    return config


def test_build_uses_fc_cache_32(
    runner: CliRunner, tmp_path: Path, monkeypatch, builder_factory
) -> None:
    fc_cache_32 = tmp_path / "fc-cache-i686"
    fc_cache_32.write_text("#!/bin/sh\n", encoding="utf-8")
    received: list[dict[str, object]] = []

    def make_builder(**kwargs):
        received.append(kwargs)
        return builder_factory(architectures=(Architecture.NATIVE, *kwargs["executables"]))

    monkeypatch.setattr(cli_utils, "FcCacheBuilder", make_builder)
    output = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "build",
            str(output),
            "--config",
            str(_cache_32bit_config(tmp_path)),
            "--font-dir",
            "/fonts/a",
            "--host-platform",
            "x86_64",
            "--build-platform",
            "x86_64",
            "--fc-cache-32",
            str(fc_cache_32),
        ],
    )

    assert result.exit_code == 0, result.output
    assert received == [{"executables": {Architecture.I686: str(fc_cache_32.resolve())}}]
    cache = (output / "conf.d" / "00-nixos-cache.conf").read_text(encoding="utf-8")
    assert cache.count("<cachedir>") == 2
    assert "cache (i686)" in result.stdout


def test_build_without_fc_cache_32_warns(
    runner: CliRunner, tmp_path: Path, monkeypatch, builder_factory
) -> None:
    monkeypatch.setattr(
        cli_utils,
        "FcCacheBuilder",
        lambda **kwargs: builder_factory(architectures=(Architecture.NATIVE, *kwargs["executables"])),
    )
    output = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "build",
            str(output),
            "--config",
            str(_cache_32bit_config(tmp_path)),
            "--font-dir",
            "/fonts/a",
            "--host-platform",
            "x86_64",
            "--build-platform",
            "x86_64",
        ],
    )

    assert result.exit_code == 0, result.output
    cache = (output / "conf.d" / "00-nixos-cache.conf").read_text(encoding="utf-8")
    assert cache.count("<cachedir>") == 1
    assert "warning:" in result.stderr
    assert "i686" in result.stderr
