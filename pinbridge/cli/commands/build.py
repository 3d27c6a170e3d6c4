"""
Build command: run the full pipeline for OUT_DIR.
"""

import logging

from pinbridge.build.compiler import ArtifactKind
from pinbridge.cli.utils import print_error, print_stage_failure
from pinbridge.core.exceptions import ConfigurationError
from pinbridge.pipeline import BuildPipeline
from pinbridge.toolkit.spec import ToolkitSpec

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed arguments (config, shared, configure_only)

    Returns:
        Exit code: 0 on success, 1 on any pipeline failure
    """
    try:
        spec = ToolkitSpec.from_yaml(args.config) if args.config else ToolkitSpec()
    except ConfigurationError as e:
        print_error(f"configuration failed: {e}")
        return 1

    kind = ArtifactKind.SHARED if args.shared else ArtifactKind.STATIC
    pipeline = BuildPipeline(spec=spec, kind=kind, compile=not args.configure_only)
    result = pipeline.run()

    if not result.ok:
        print_stage_failure(result)
        return 1

    if result.artifact:
        print(f"Built {result.artifact}")
    else:
        print(f"Configured toolkit at {result.package.package_dir}")
    return 0
