"""Build/host platform description used to decide whether caches can be built."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import platform


_MACHINE_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "i386": "i686",
    "i586": "i686",
    "x86": "i686",
}


def normalize_machine(value: str) -> str:
    """Return a canonical machine name (``x86_64``, ``aarch64``, ``i686``...)."""
    cleaned = value.strip().lower()
    return _MACHINE_ALIASES.get(cleaned, cleaned)


class Architecture(Enum):
    """Cache variants the builder can produce."""

    NATIVE = "native"
    """Cache for the host platform's own fontconfig."""

    I686 = "i686"
    """Cache for 32-bit applications running on an x86_64 host."""


@dataclass(frozen=True, slots=True)
class BuildPlatform:
    """Machine that runs the assembly (``build``) and machine the output targets (``host``)."""

    host: str
    build: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "host", normalize_machine(self.host))
        object.__setattr__(self, "build", normalize_machine(self.build))

    @classmethod
    def detect(cls) -> BuildPlatform:
        machine = platform.machine() or "unknown"
        return cls(host=machine, build=machine)

    @property
    def can_execute(self) -> bool:
        """True when the build machine can run the host's cache builder."""
        return self.host == self.build

    @property
    def supports_secondary(self) -> bool:
        """True when the host can also run 32-bit binaries."""
        return self.host == "x86_64"


__all__ = ["Architecture", "BuildPlatform", "normalize_machine"]
