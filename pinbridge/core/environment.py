"""
Build environment for pinbridge.

The build-output directory is the only externally configurable input and
is read from the ``OUT_DIR`` environment variable. It is build-private:
downloaded, extracted and compiled artifacts are staged there for exactly
one build invocation.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import ConfigurationError, FilesystemError

logger = logging.getLogger(__name__)

OUT_DIR_ENV = "OUT_DIR"


@dataclass(frozen=True)
class BuildEnvironment:
    """
    Resolved build environment.

    Attributes:
        out_dir: Build-private output directory
    """

    out_dir: Path

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "BuildEnvironment":
        """
        Read the build environment from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            BuildEnvironment instance

        Raises:
            ConfigurationError: If ``OUT_DIR`` is unset or empty
        """
        if environ is None:
            environ = os.environ

        value = environ.get(OUT_DIR_ENV, "").strip()
        if not value:
            raise ConfigurationError(
                f"{OUT_DIR_ENV} is not set; a build-output directory is required"
            )

        return cls(out_dir=Path(value))

    def ensure(self) -> Path:
        """Create the output directory if needed and return it."""
        try:
            self.out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(
                f"Failed to create output directory {self.out_dir}: {e}"
            ) from e
        logger.debug(f"Using output directory {self.out_dir}")
        return self.out_dir
