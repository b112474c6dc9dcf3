from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
import threading
from typing import Any

import pytest

from fontconfd.core.platform import Architecture, BuildPlatform
from fontconfd.core.cache_dir import CacheLocation, cache_location_context


class RecordingEmitter:
    """Emitter collecting every diagnostic for assertions."""

    debug_enabled = False

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class FakeCacheBuilder:
    """Cache builder writing an empty directory per call."""

    def __init__(
        self,
        root: Path,
        *,
        version: str = "fake-1",
        gate: threading.Event | None = None,
        failures: list[BaseException] | None = None,
        architectures: tuple[Architecture, ...] = (Architecture.NATIVE, Architecture.I686),
    ) -> None:
        self.root = root
        self.architectures = architectures
        self._version = version
        self.gate = gate
        self.started = threading.Event()
        self.failures = list(failures or [])
        self.calls: list[tuple[tuple[str, ...], Architecture]] = []
        self._lock = threading.Lock()

    @property
    def version(self) -> str:
        return self._version

    def supports(self, architecture: Architecture) -> bool:
        return architecture in self.architectures

    def build(self, font_directories: list[Path], architecture: Architecture) -> Path:
        with self._lock:
            self.calls.append((tuple(str(entry) for entry in font_directories), architecture))
            index = len(self.calls)
            failure = self.failures.pop(0) if self.failures else None
        self.started.set()
        if self.gate is not None:
            assert self.gate.wait(timeout=5)
        if failure is not None:
            raise failure
        path = self.root / f"{architecture.value}-{index}"
        path.mkdir(parents=True)
        return path


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[CacheLocation]:
    monkeypatch.setenv("FONTCONFD_SKIP_FONT_CHECKS", "1")
    with cache_location_context(tmp_path / "cache") as location:
        yield location


@pytest.fixture
def native_platform() -> BuildPlatform:
    return BuildPlatform(host="x86_64", build="x86_64")


@pytest.fixture
def cross_platform() -> BuildPlatform:
    return BuildPlatform(host="aarch64", build="x86_64")


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def builder_factory(tmp_path: Path) -> Callable[..., FakeCacheBuilder]:
    counter = iter(range(1_000))

    def factory(**kwargs: Any) -> FakeCacheBuilder:
        return FakeCacheBuilder(tmp_path / f"artifacts-{next(counter)}", **kwargs)

    return factory


@pytest.fixture
def fake_builder(builder_factory: Callable[..., FakeCacheBuilder]) -> FakeCacheBuilder:
    return builder_factory()
