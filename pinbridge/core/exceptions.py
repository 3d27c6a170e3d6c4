"""
Centralized exception hierarchy for pinbridge.

Every stage of the build pipeline raises one of these. All of them are
fatal for the build: there is no local recovery or retry anywhere.
"""

from typing import List, Optional, Sequence


# ============================================================================
# Base Exceptions
# ============================================================================


class PinBridgeError(Exception):
    """Base exception for all pinbridge errors."""

    pass


class ConfigurationError(PinBridgeError):
    """Required build input is missing or invalid."""

    pass


# ============================================================================
# Acquisition Exceptions
# ============================================================================


class NetworkError(PinBridgeError):
    """Request failed or the server answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class FilesystemError(PinBridgeError):
    """Creating, reading, writing or deleting a file failed."""

    pass


class ArchiveFormatError(PinBridgeError):
    """Archive is corrupt, unreadable or not a gzip-compressed tar."""

    pass


class InsecureArchiveError(ArchiveFormatError):
    """Archive member would be written outside the destination."""

    pass


class VerificationError(PinBridgeError):
    """Signature verification of the downloaded archive failed."""

    pass


# ============================================================================
# Discovery Exceptions
# ============================================================================


class DiscoveryError(PinBridgeError):
    """Base exception when the extracted package directory cannot be located."""

    pass


class PackageNotFoundError(DiscoveryError):
    """No extracted directory matches the package pattern."""

    def __init__(self, root, pattern: str):
        self.root = root
        self.pattern = pattern
        super().__init__(
            f"No directory containing '{pattern}' found in {root}"
        )


class AmbiguousPackageError(DiscoveryError):
    """More than one extracted directory matches the package pattern."""

    def __init__(self, root, pattern: str, candidates: Sequence):
        self.root = root
        self.pattern = pattern
        self.candidates: List = list(candidates)
        names = ", ".join(str(c) for c in self.candidates)
        super().__init__(
            f"Found {len(self.candidates)} directories containing '{pattern}' "
            f"in {root}: {names}"
        )


class IncompleteLayoutError(DiscoveryError):
    """Package directory lacks paths of the expected toolkit layout."""

    def __init__(self, package_dir, missing: Sequence):
        self.package_dir = package_dir
        self.missing: List = list(missing)
        names = ", ".join(str(m) for m in self.missing)
        super().__init__(f"Toolkit package {package_dir} is missing: {names}")


# ============================================================================
# Build Exceptions
# ============================================================================


class CompilationError(PinBridgeError):
    """Native compiler, archiver or linker failed."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        stderr: str = "",
    ):
        self.command = list(command) if command else []
        self.stderr = stderr
        if stderr:
            message = f"{message}\n{stderr}"
        super().__init__(message)


# ============================================================================
# Bridge Exceptions
# ============================================================================


class BridgeError(PinBridgeError):
    """Base exception for the initialization bridge."""

    pass


class BridgeLoadError(BridgeError):
    """Compiled bridge library or its entry point could not be loaded."""

    pass


class InitializationError(BridgeError):
    """Toolkit initialization routine reported failure."""

    pass


class AlreadyInitializedError(BridgeError):
    """Toolkit was already initialized in this process."""

    pass
