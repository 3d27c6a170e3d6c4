"""
Locate the extracted toolkit package directory.

The archive unpacks into a single top-level directory whose exact name is
not known in advance, only that it contains a fixed substring.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from pinbridge.core.exceptions import (
    AmbiguousPackageError,
    FilesystemError,
    PackageNotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractedPackage:
    """
    Result of extracting and locating the toolkit.

    Attributes:
        extraction_root: Directory the archive was extracted into
        package_dir: The single matching immediate child of extraction_root
    """

    extraction_root: Path
    package_dir: Path


def find_package_dir(root: Path, pattern: str) -> Path:
    """
    Find the one immediate subdirectory of ``root`` whose name contains ``pattern``.

    Only the entry name is matched, never the full path, so a pattern that
    also occurs in ``root`` itself does not cause false matches.

    Args:
        root: Directory to scan (not recursive)
        pattern: Substring identifying the package directory

    Returns:
        Path to the package directory

    Raises:
        PackageNotFoundError: If no directory matches
        AmbiguousPackageError: If more than one directory matches
        FilesystemError: If ``root`` cannot be read
    """
    root = Path(root)

    try:
        candidates = sorted(
            entry
            for entry in root.iterdir()
            if entry.is_dir() and pattern in entry.name
        )
    except OSError as e:
        raise FilesystemError(f"Failed to read directory {root}: {e}") from e

    if not candidates:
        raise PackageNotFoundError(root, pattern)

    if len(candidates) > 1:
        raise AmbiguousPackageError(root, pattern, [c.name for c in candidates])

    logger.info(f"Found toolkit package: {candidates[0].name}")
    return candidates[0]
