"""
pinbridge - prepare a build for linking against the Intel Pin toolkit.

Downloads the pinned toolkit release, extracts and locates it, derives the
toolkit's compiler/linker configuration and compiles a native bridge that
exposes the toolkit's initialization routine.
"""

__version__ = "0.1.0"

from pinbridge.core.exceptions import PinBridgeError
from pinbridge.pipeline import BuildPipeline, PipelineResult, StageResult
from pinbridge.toolkit.spec import ToolkitSpec

__all__ = [
    "__version__",
    "BuildPipeline",
    "PipelineResult",
    "StageResult",
    "ToolkitSpec",
    "PinBridgeError",
]
