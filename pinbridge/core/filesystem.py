"""
File system utilities for pinbridge.

This module provides:
- Archive extraction (gzip-compressed tar) with traversal checks
- Safe file operations (atomic writes, file removal)
- Path utilities
"""

import gzip
import logging
import os
import tarfile
import tempfile
import zlib
from pathlib import Path
from typing import Union

from .exceptions import ArchiveFormatError, FilesystemError, InsecureArchiveError

logger = logging.getLogger(__name__)


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if ``path`` is ``parent`` or lies below it.

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
        >>> is_relative_to(Path('/a/b'), Path('/c'))
        False
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Raises:
        FilesystemError: If the directory cannot be created
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create directory {path}: {e}") from e
    return path


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_member(member: tarfile.TarInfo, destination: Path) -> None:
    """
    Validate that a tar member stays inside ``destination``.

    Checks the member name and, for links, the link target.

    Raises:
        InsecureArchiveError: If the member escapes the destination
    """
    root = destination.resolve()
    member_path = (root / member.name).resolve()

    if not is_relative_to(member_path, root):
        raise InsecureArchiveError(
            f"Archive member '{member.name}' attempts directory traversal. "
            "Extraction has been blocked."
        )

    if member.issym():
        if os.path.isabs(member.linkname):
            link_target = Path(member.linkname).resolve()
        else:
            link_target = (member_path.parent / member.linkname).resolve()
    elif member.islnk():
        link_target = (root / member.linkname).resolve()
    else:
        return

    if not is_relative_to(link_target, root):
        raise InsecureArchiveError(
            f"Archive link '{member.name}' -> '{member.linkname}' points "
            "outside the destination. Extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path], destination: Union[str, Path]
) -> Path:
    """
    Extract a gzip-compressed tar archive into ``destination``.

    All members are validated before anything is written. Directory
    structure and file permissions are preserved.

    Args:
        archive_path: Path to the .tar.gz archive
        destination: Directory to extract to (created if missing)

    Returns:
        The destination directory

    Raises:
        ArchiveFormatError: If the archive is missing, corrupt or unreadable
        InsecureArchiveError: If a member escapes the destination
        FilesystemError: If writing the extracted files fails

    Example:
        >>> extract_archive('pin.tar.gz', '/tmp/out')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.is_file():
        raise ArchiveFormatError(f"Archive not found: {archive_path}")

    ensure_directory(destination)
    logger.info(f"Extracting {archive_path.name} to {destination}")

    try:
        with tarfile.open(archive_path, "r:gz") as tar:
            members = tar.getmembers()

            for member in members:
                _validate_member(member, destination)

            # Members are validated above; any other filter rewrites mode bits.
            if hasattr(tarfile, "fully_trusted_filter"):
                tar.extractall(destination, members=members, filter="fully_trusted")
            else:
                tar.extractall(destination, members=members)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, EOFError, zlib.error, gzip.BadGzipFile) as e:
        raise ArchiveFormatError(f"Failed to read archive {archive_path}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Failed to extract {archive_path}: {e}") from e

    logger.debug(f"Extracted {len(members)} entries from {archive_path.name}")
    return destination


# ============================================================================
# Safe File Operations
# ============================================================================


def remove_file(path: Union[str, Path]) -> None:
    """
    Delete a file.

    Raises:
        FilesystemError: If the file cannot be deleted
    """
    path = Path(path)
    try:
        path.unlink()
    except OSError as e:
        raise FilesystemError(f"Failed to delete {path}: {e}") from e


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    The file is never left partially written.

    Raises:
        FilesystemError: If the write fails
    """
    file_path = Path(file_path)
    ensure_directory(file_path.parent)

    try:
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
        )
    except OSError as e:
        raise FilesystemError(f"Failed to write {file_path}: {e}") from e
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise FilesystemError(f"Failed to write {file_path}: {e}") from e
