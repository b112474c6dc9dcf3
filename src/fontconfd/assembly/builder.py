"""``fc-cache`` backed implementation of the cache builder collaborator."""

from __future__ import annotations

from collections.abc import Mapping
import hashlib
import os
from pathlib import Path
import shutil
import subprocess
import tempfile

from fontconfd.core.cache_dir import cache_location
from fontconfd.core.platform import Architecture
from fontconfd.core.templates import render_template


_VERSION_UNKNOWN = "unknown"


class FcCacheBuilder:
    """Run ``fc-cache`` against a throwaway configuration to pre-generate caches.

    The resulting directory is content addressed by the directory set and the
    architecture, and is moved in place only once ``fc-cache`` succeeded.
    Failures of ``fc-cache`` propagate as :class:`subprocess.CalledProcessError`.
    """

    def __init__(
        self,
        *,
        output_root: Path | None = None,
        executables: Mapping[Architecture, str] | None = None,
    ) -> None:
        self.output_root = output_root or cache_location().artifacts_dir
        self.executables: dict[Architecture, str] = {Architecture.NATIVE: "fc-cache"}
        if executables:
            self.executables.update(executables)
        self._version: str | None = None

    @property
    def version(self) -> str:
        """Return the ``fc-cache`` version, probed once."""
        if self._version is None:
            self._version = self._probe_version()
        return self._version

    def _probe_version(self) -> str:
        executable = shutil.which(self.executables[Architecture.NATIVE])
        if executable is None:
            return _VERSION_UNKNOWN
        try:
            proc = subprocess.run(
                [executable, "--version"],
                check=True,
                capture_output=True,
                text=True,
            )
        except (OSError, subprocess.CalledProcessError):
            return _VERSION_UNKNOWN
        output = (proc.stdout or proc.stderr).strip()
        return output.splitlines()[0] if output else _VERSION_UNKNOWN

    def supports(self, architecture: Architecture) -> bool:
        """Return True when an ``fc-cache`` executable is configured for ``architecture``."""
        return architecture in self.executables

    def _executable(self, architecture: Architecture) -> str:
        name = self.executables.get(architecture)
        if name is None:
            raise FileNotFoundError(f"No fc-cache executable configured for {architecture.value}")
        resolved = shutil.which(name)
        if resolved is None:
            raise FileNotFoundError(f"fc-cache executable not found: {name}")
        return resolved

    def build(self, font_directories: list[Path], architecture: Architecture) -> Path:
        """Generate the cache for ``font_directories`` and return its directory."""
        seed = "\n".join([architecture.value, *sorted(str(entry) for entry in font_directories)])
        key = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:32]
        target = self.output_root / f"{key}-{architecture.value}"
        if target.is_dir():
            return target

        executable = self._executable(architecture)
        self.output_root.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=self.output_root) as tmp:
            workdir = Path(tmp)
            cache_dir = workdir / "cache"
            cache_dir.mkdir()
            config = workdir / "fonts.conf"
            config.write_text(
                render_template(
                    "builder.conf.jinja",
                    font_directories=[str(entry) for entry in font_directories],
                    cache_directory=str(cache_dir),
                ),
                encoding="utf-8",
            )
            env = dict(os.environ)
            env["FONTCONFIG_FILE"] = str(config)
            subprocess.run(
                [executable, "--system-only", "--really-force"],
                check=True,
                capture_output=True,
                text=True,
                env=env,
            )
            try:
                cache_dir.rename(target)
            except OSError:
                if not target.is_dir():
                    raise
        return target


__all__ = ["FcCacheBuilder"]
