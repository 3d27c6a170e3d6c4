"""
Shared utilities for CLI commands.
"""

import shlex
import sys
from typing import Optional

from pinbridge.core.exceptions import CompilationError


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_stage_failure(result) -> None:
    """
    Report the failed stage of a pipeline run.

    Compiler failures show the command that failed; other failures show the
    output directory the build was using, when it got that far.

    Args:
        result: A failed ``PipelineResult``
    """
    error = result.error
    details = None
    if isinstance(error, CompilationError) and error.command:
        details = f"command: {shlex.join(error.command)}"
    elif result.out_dir is not None:
        details = f"output directory: {result.out_dir}"
    print_error(result.diagnostic(), details=details)
