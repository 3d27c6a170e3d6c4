"""
Platform detection and target triple description for pinbridge.

The toolkit ships one archive per platform and its headers expect the
build to assert the target through preprocessor defines. This module maps
a target triple onto the names the toolkit uses for it.

Usage:
    from pinbridge.core.platform import detect_platform, get_target

    target = get_target("x86_64-unknown-linux-gnu")
    print(target.pin_arch)  # intel64
"""

import functools
import platform
from dataclasses import dataclass
from typing import Dict, Optional

from .exceptions import ConfigurationError

DEFAULT_TARGET = "x86_64-unknown-linux-gnu"


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system ('linux', 'windows', 'macos')
        arch: CPU architecture ('x86_64', 'aarch64', 'i686')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string.

        Example:
            >>> PlatformInfo('linux', 'x86_64').platform_string()
            'linux-x86_64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


@dataclass(frozen=True)
class TargetTriple:
    """
    Toolkit naming for one supported target triple.

    Attributes:
        triple: Target triple (e.g. 'x86_64-unknown-linux-gnu')
        os: Host OS this target builds on
        arch: Host architecture this target builds on
        pin_arch: Toolkit directory name for the architecture ('intel64')
        crt_arch: CRT header suffix ('x86_64' for 'arch-x86_64')
        asm_arch: Kernel uapi asm suffix ('x86' for 'asm-x86')
        define_arch: Define suffix for TARGET_/HOST_ ('IA32E')
        define_os: Define suffix for TARGET_ ('LINUX')
    """

    triple: str
    os: str
    arch: str
    pin_arch: str
    crt_arch: str
    asm_arch: str
    define_arch: str
    define_os: str

    def matches(self, info: PlatformInfo) -> bool:
        """Check whether a host platform can build for this target."""
        return info.os == self.os and info.arch == self.arch


_TARGETS: Dict[str, TargetTriple] = {
    "x86_64-unknown-linux-gnu": TargetTriple(
        triple="x86_64-unknown-linux-gnu",
        os="linux",
        arch="x86_64",
        pin_arch="intel64",
        crt_arch="x86_64",
        asm_arch="x86",
        define_arch="IA32E",
        define_os="LINUX",
    ),
}


def get_target(triple: str = DEFAULT_TARGET) -> TargetTriple:
    """
    Look up a supported target triple.

    Raises:
        ConfigurationError: If the triple is not supported
    """
    try:
        return _TARGETS[triple]
    except KeyError:
        supported = ", ".join(sorted(_TARGETS))
        raise ConfigurationError(
            f"Unsupported target triple: {triple}. Supported: {supported}"
        ) from None


def get_supported_targets() -> list[str]:
    """List supported target triples."""
    return sorted(_TARGETS)


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect the host platform.

    Cached, detection only runs once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system


def _detect_architecture() -> str:
    machine = platform.machine().lower()
    arch_map = {
        "amd64": "x86_64",
        "x64": "x86_64",
        "arm64": "aarch64",
        "i386": "i686",
        "x86": "i686",
    }
    return arch_map.get(machine, machine)


def check_host(target: TargetTriple, info: Optional[PlatformInfo] = None) -> None:
    """
    Ensure the host can build for ``target``.

    Raises:
        ConfigurationError: If the host platform does not match the target
    """
    if info is None:
        info = detect_platform()

    if not target.matches(info):
        raise ConfigurationError(
            f"Host platform {info} cannot build for target {target.triple}"
        )


def clear_platform_cache():
    """Clear cached platform detection (for tests)."""
    detect_platform.cache_clear()
