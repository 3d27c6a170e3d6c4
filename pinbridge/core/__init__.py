"""
Core functionality for pinbridge.

This package contains the foundational modules the pipeline stages depend on.
"""

from .environment import BuildEnvironment, OUT_DIR_ENV

from .platform import (
    PlatformInfo,
    TargetTriple,
    detect_platform,
    get_target,
    get_supported_targets,
    check_host,
    clear_platform_cache,
)

from .exceptions import (
    PinBridgeError,
    ConfigurationError,
    NetworkError,
    FilesystemError,
    ArchiveFormatError,
    InsecureArchiveError,
    VerificationError,
    DiscoveryError,
    PackageNotFoundError,
    AmbiguousPackageError,
    IncompleteLayoutError,
    CompilationError,
    BridgeError,
    BridgeLoadError,
    InitializationError,
    AlreadyInitializedError,
)

__all__ = [
    "BuildEnvironment",
    "OUT_DIR_ENV",
    "PlatformInfo",
    "TargetTriple",
    "detect_platform",
    "get_target",
    "get_supported_targets",
    "check_host",
    "clear_platform_cache",
    "PinBridgeError",
    "ConfigurationError",
    "NetworkError",
    "FilesystemError",
    "ArchiveFormatError",
    "InsecureArchiveError",
    "VerificationError",
    "DiscoveryError",
    "PackageNotFoundError",
    "AmbiguousPackageError",
    "IncompleteLayoutError",
    "CompilationError",
    "BridgeError",
    "BridgeLoadError",
    "InitializationError",
    "AlreadyInitializedError",
]
