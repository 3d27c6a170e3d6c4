"""
Toolkit release description.

A ``ToolkitSpec`` pins one toolkit release for one target: where to download
it, how its extracted package directory is named and which target triple its
headers are built for. The defaults describe the pinned Pin 3.31 Linux
release; a YAML file can override any field.

Example YAML:

    version: "3.31"
    build: "98869-gfa6f126a8"
    compiler: gcc
    target: x86_64-unknown-linux-gnu
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from pinbridge.core.download import DownloadTarget
from pinbridge.core.exceptions import ConfigurationError
from pinbridge.core.platform import DEFAULT_TARGET, TargetTriple, get_target

logger = logging.getLogger(__name__)

DOWNLOAD_BASE = "https://software.intel.com/sites/landingpage/pintool/downloads"

_OS_SUFFIX = {"linux": "linux"}


def _is_plain_name(value) -> bool:
    """Check that ``value`` is one non-empty path component."""
    if not isinstance(value, str) or value in ("", ".", ".."):
        return False
    return "/" not in value and "\\" not in value


@dataclass
class ToolkitSpec:
    """
    Pinned toolkit release.

    Attributes:
        version: Toolkit version (e.g. '3.31')
        build: Build identifier (e.g. '98869-gfa6f126a8')
        compiler: Compiler flavour of the release archive ('gcc')
        target: Target triple
        url: Explicit download URL (derived from the fields above if None)
        signature_url: Detached signature URL (verification skipped if None)
        package_pattern: Substring identifying the extracted package directory
        archive_name: File name of the downloaded archive in the output directory
        extract_subdir: Subdirectory of the output directory to extract into
    """

    version: str = "3.31"
    build: str = "98869-gfa6f126a8"
    compiler: str = "gcc"
    target: str = DEFAULT_TARGET
    url: Optional[str] = None
    signature_url: Optional[str] = None
    package_pattern: str = "pin-"
    archive_name: str = "pin.tar.gz"
    extract_subdir: str = "toolkit"

    def __post_init__(self):
        required = ("version", "build", "compiler", "package_pattern", "archive_name")
        for name in required:
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(
                    f"Toolkit field '{name}' must be a non-empty string"
                )

        # Both name an entry directly inside the build-output directory.
        for name in ("archive_name", "extract_subdir"):
            value = getattr(self, name)
            if not _is_plain_name(value):
                raise ConfigurationError(
                    f"Toolkit field '{name}' must be a plain file name, got {value!r}"
                )

        # Resolve eagerly so an unsupported triple fails at load time.
        get_target(self.target)

    @property
    def target_triple(self) -> TargetTriple:
        return get_target(self.target)

    @property
    def release_name(self) -> str:
        """
        Archive base name.

        Example:
            >>> ToolkitSpec().release_name
            'pin-external-3.31-98869-gfa6f126a8-gcc-linux'
        """
        os_suffix = _OS_SUFFIX[self.target_triple.os]
        return f"pin-external-{self.version}-{self.build}-{self.compiler}-{os_suffix}"

    @property
    def download_url(self) -> str:
        if self.url:
            return self.url
        return f"{DOWNLOAD_BASE}/{self.release_name}.tar.gz"

    def download_target(self, out_dir: Path) -> DownloadTarget:
        return DownloadTarget(
            url=self.download_url, destination=out_dir / self.archive_name
        )

    def signature_target(self, out_dir: Path) -> Optional[DownloadTarget]:
        if not self.signature_url:
            return None
        return DownloadTarget(
            url=self.signature_url, destination=out_dir / f"{self.archive_name}.sig"
        )

    def extraction_root(self, out_dir: Path) -> Path:
        return out_dir / self.extract_subdir

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolkitSpec":
        """
        Build a spec from a mapping, rejecting unknown keys.

        Raises:
            ConfigurationError: If the mapping contains unknown or invalid fields
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Toolkit configuration must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown toolkit configuration keys: {', '.join(unknown)}"
            )

        values = {k: str(v) if v is not None else None for k, v in data.items()}
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ToolkitSpec":
        """
        Load a spec from a YAML file.

        The file may hold the fields at top level or under a ``toolkit`` key.

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read {path}: {e}") from e

        if isinstance(data, dict) and "toolkit" in data:
            data = data["toolkit"]

        logger.debug(f"Loaded toolkit configuration from {path}")
        return cls.from_dict(data)
