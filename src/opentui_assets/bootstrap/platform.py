"""Platform detection for OpenTUI native library assets.

Maps the host's reported OS and CPU architecture to the platform identifier
used in OpenTUI release asset names (e.g. "x86_64-linux", "aarch64-macos").
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# Operating systems with a published library (normalized)
SUPPORTED_OS = ("linux", "macos", "windows")

# Architectures with a published library (normalized)
SUPPORTED_ARCH = ("aarch64", "x86_64")

# Architecture normalization map; anything not listed passes through unchanged.
_ARCH_MAP: Dict[str, str] = {
    "arm64": "aarch64",
    "amd64": "x86_64",
}

# OS normalization map; anything not listed passes through unchanged.
_OS_MAP: Dict[str, str] = {
    "darwin": "macos",
}

# Remote asset name template and canonical local file name, keyed by OS.
_LIBRARY_NAMES: Dict[str, Tuple[str, str]] = {
    "windows": ("opentui-{arch}-windows.dll", "opentui.dll"),
    "macos": ("libopentui-{arch}-macos.dylib", "libopentui.dylib"),
    "linux": ("libopentui-{arch}-linux.so", "libopentui.so"),
}


class UnsupportedPlatformError(ValueError):
    """The host platform has no published OpenTUI library."""

    def __init__(self, platform_id: "PlatformIdentifier") -> None:
        self.platform = platform_id
        supported = ", ".join(p.name for p in SUPPORTED_PLATFORMS)
        super().__init__(
            f"Unsupported platform: {platform_id.name}. Supported: {supported}"
        )


def normalize_arch(machine: str) -> str:
    """Normalize an architecture string to the release naming.

    Args:
        machine: Raw architecture string from platform.machine().

    Returns:
        "aarch64" for arm64, "x86_64" for amd64, otherwise the lower-cased input.
    """
    machine = machine.lower()
    return _ARCH_MAP.get(machine, machine)


def normalize_os(system: str) -> str:
    """Normalize an OS string to the release naming ("darwin" becomes "macos")."""
    system = system.lower()
    return _OS_MAP.get(system, system)


@dataclass(frozen=True)
class PlatformIdentifier:
    """A normalized {arch}-{os} pair.

    Attributes:
        arch: CPU architecture (aarch64, x86_64, or a passed-through raw value).
        os: Operating system (linux, macos, windows, or a passed-through raw value).
    """

    arch: str
    os: str

    @property
    def name(self) -> str:
        """Return the identifier string, e.g. "x86_64-linux"."""
        return f"{self.arch}-{self.os}"

    def is_supported(self) -> bool:
        """Check if a library is published for this platform."""
        return self in SUPPORTED_PLATFORMS

    @classmethod
    def parse(cls, name: str) -> "PlatformIdentifier":
        """Parse an identifier string such as "aarch64-macos"."""
        arch, sep, os_name = name.partition("-")
        if not sep:
            raise ValueError(f"Invalid platform identifier: {name!r}")
        return cls(arch=arch, os=os_name)

    def __str__(self) -> str:
        return self.name


SUPPORTED_PLATFORMS: Tuple[PlatformIdentifier, ...] = tuple(
    PlatformIdentifier(arch=arch, os=os_name)
    for arch in SUPPORTED_ARCH
    for os_name in SUPPORTED_OS
)


def resolve_platform(
    system: Optional[str] = None, machine: Optional[str] = None
) -> PlatformIdentifier:
    """Detect the current platform.

    Never raises: unknown architectures and operating systems pass through
    and are rejected later by the provisioner.

    Args:
        system: OS name override (defaults to platform.system()).
        machine: Architecture override (defaults to platform.machine()).

    Returns:
        PlatformIdentifier for the host.
    """
    if system is None:
        system = platform.system()
    if machine is None:
        machine = platform.machine()
    return PlatformIdentifier(arch=normalize_arch(machine), os=normalize_os(system))


def asset_file_name(platform_id: PlatformIdentifier) -> str:
    """Return the release asset name for a platform, or "" for an unknown OS."""
    names = _LIBRARY_NAMES.get(platform_id.os)
    if names is None:
        return ""
    return names[0].format(arch=platform_id.arch)


def local_file_name(platform_id: PlatformIdentifier) -> str:
    """Return the canonical local library name for a platform, or "" for an unknown OS."""
    names = _LIBRARY_NAMES.get(platform_id.os)
    if names is None:
        return ""
    return names[1]
