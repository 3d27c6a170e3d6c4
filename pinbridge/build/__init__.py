"""
Build configuration and native compilation of the bridge.
"""

from .configuration import BuildConfiguration, configure_build, toolkit_defines
from .compiler import ArtifactKind, CompilerDriver, build_bridge, find_compiler
from .manifest import BuildManifest, MANIFEST_NAME

__all__ = [
    "BuildConfiguration",
    "configure_build",
    "toolkit_defines",
    "ArtifactKind",
    "CompilerDriver",
    "build_bridge",
    "find_compiler",
    "BuildManifest",
    "MANIFEST_NAME",
]
