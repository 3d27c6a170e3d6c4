"""
Build manifest for downstream builds.

After a successful build the output directory holds ``pinbridge-build.json``
describing the artifact and the flags a downstream link needs.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pinbridge.build.configuration import BuildConfiguration
from pinbridge.core.exceptions import ConfigurationError
from pinbridge.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

MANIFEST_NAME = "pinbridge-build.json"
MANIFEST_VERSION = 1


@dataclass
class BuildManifest:
    """What one build produced."""

    toolkit_version: str
    target: str
    package_dir: Path
    artifact: Path
    configuration: BuildConfiguration

    def to_dict(self) -> dict:
        return {
            "manifest_version": MANIFEST_VERSION,
            "toolkit_version": self.toolkit_version,
            "target": self.target,
            "package_dir": str(self.package_dir),
            "artifact": str(self.artifact),
            "configuration": self.configuration.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BuildManifest":
        try:
            config = data["configuration"]
            configuration = BuildConfiguration(
                include_dirs=[Path(p) for p in config["include_dirs"]],
                defines=[(name, value) for name, value in config["defines"]],
                compile_flags=list(config["compile_flags"]),
                link_flags=list(config["link_flags"]),
            )
            return cls(
                toolkit_version=data["toolkit_version"],
                target=data["target"],
                package_dir=Path(data["package_dir"]),
                artifact=Path(data["artifact"]),
                configuration=configuration,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid build manifest: {e}") from e

    def write(self, out_dir: Path) -> Path:
        path = Path(out_dir) / MANIFEST_NAME
        atomic_write(path, json.dumps(self.to_dict(), indent=2) + "\n")
        logger.debug(f"Wrote build manifest {path}")
        return path

    @classmethod
    def read(cls, out_dir: Path) -> "BuildManifest":
        path = Path(out_dir) / MANIFEST_NAME
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigurationError(f"No build manifest in {out_dir}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to read {path}: {e}") from e
        return cls.from_dict(data)
