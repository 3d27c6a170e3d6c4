"""
pinbridge CLI argument parser.

This module implements the command-line interface for pinbridge using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

try:
    from importlib.metadata import version

    __version__ = version("pinbridge")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """pinbridge command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="pinbridge",
            description=(
                "pinbridge - fetch the Pin toolkit and build its initialization bridge"
            ),
            epilog='Use "pinbridge COMMAND --help" for command-specific help. '
            "The build-output directory is read from OUT_DIR.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--version", action="version", version=f"pinbridge {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_build_command(subparsers)
        self._add_flags_command(subparsers)

        return parser

    def _add_build_command(self, subparsers):
        """Add 'build' subcommand."""
        parser = subparsers.add_parser(
            "build",
            help="Download the toolkit and compile the bridge",
            description=(
                "Download, extract and locate the toolkit, then compile the bridge"
            ),
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="YAML file overriding the pinned toolkit release",
        )
        parser.add_argument(
            "--shared",
            action="store_true",
            help="Build a shared library loadable from Python, not a static archive",
        )
        parser.add_argument(
            "--configure-only",
            action="store_true",
            help="Stop after deriving the build configuration",
        )

    def _add_flags_command(self, subparsers):
        """Add 'flags' subcommand."""
        parser = subparsers.add_parser(
            "flags",
            help="Print compiler/linker flags of a finished build",
            description="Print flags recorded in the build manifest of OUT_DIR",
        )
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            "--cflags", action="store_true", help="Print compile flags only"
        )
        group.add_argument("--libs", action="store_true", help="Print link flags only")

    def parse_args(self, args: Optional[List[str]] = None):
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130

    def _configure_logging(self, args):
        """Configure logging based on verbose/quiet flags."""
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,
        )

    def _dispatch_command(self, args) -> int:
        command_map = {
            "build": "pinbridge.cli.commands.build",
            "flags": "pinbridge.cli.commands.flags",
        }

        module = importlib.import_module(command_map[args.command])
        return module.run(args)


def main(args: Optional[List[str]] = None) -> None:
    """Console entry point."""
    sys.exit(CLI().run(args))
