"""
openblock-cli argument parser.

This module implements the command-line interface for openblock-cli using argparse.
"""

import argparse
import importlib
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from openblock_cli import __version__

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "OPENBLOCK_LOG_LEVEL"


class CLI:
    """openblock-cli command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="openblock-cli",
            description="openblock-cli - OpenBlock plugin dependency tooling",
            epilog='Use "openblock-cli COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"openblock-cli {__version__}"
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
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Plugin project directory (default: current directory)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_deps_command(subparsers)
        self._add_fetch_command(subparsers)
        self._add_index_command(subparsers)
        self._add_libraries_command(subparsers)
        self._add_config_command(subparsers)

        return parser

    def _add_deps_command(self, subparsers):
        """Add 'deps' subcommand."""
        parser = subparsers.add_parser(
            "deps",
            help="Resolve project dependencies",
            description=(
                "Validate local dependencies, download remote toolchains and "
                "merge them through the Resource Service"
            ),
        )
        parser.add_argument(
            "--registry",
            metavar="URL",
            help="Registry packages.json URL (default: use the Resource Service)",
        )
        parser.add_argument(
            "--no-merge",
            action="store_true",
            help="Download toolchains without merging them",
        )

    def _add_fetch_command(self, subparsers):
        """Add 'fetch' subcommand."""
        parser = subparsers.add_parser(
            "fetch",
            help="Fetch toolchains",
            description="Download and extract toolchains into .openblock/toolchains",
        )
        parser.add_argument("names", nargs="+", metavar="NAME", help="Toolchain name")
        parser.add_argument(
            "--registry",
            metavar="URL",
            help="Registry packages.json URL (default: use the Resource Service)",
        )

    def _add_index_command(self, subparsers):
        """Add 'index' subcommand."""
        parser = subparsers.add_parser(
            "index",
            help="Show the packages index",
            description="List toolchains and libraries in the packages index",
        )
        parser.add_argument(
            "--registry",
            metavar="URL",
            help="Registry packages.json URL (default: use the Resource Service)",
        )
        parser.add_argument(
            "--refresh", action="store_true", help="Ignore any cached index"
        )

    def _add_libraries_command(self, subparsers):
        """Add 'libraries' subcommand."""
        subparsers.add_parser(
            "libraries",
            help="Classify bundled libraries",
            description=(
                "Classify the libraries in libraries/ against the Arduino "
                "Library Index and list which can become shared dependencies"
            ),
        )

    def _add_config_command(self, subparsers):
        """Add 'config' subcommand."""
        parser = subparsers.add_parser(
            "config",
            help="Manage CLI settings",
            description="Get, set, delete or list settings in ~/.openblockrc",
        )
        parser.add_argument(
            "action",
            choices=["get", "set", "delete", "list"],
            metavar="ACTION",
            help="get | set | delete | list",
        )
        parser.add_argument("key", nargs="?", help="Setting name")
        parser.add_argument("value", nargs="?", help="Setting value (for set)")

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

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
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Without either flag the level comes from OPENBLOCK_LOG_LEVEL
        (default INFO).

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            env_level = os.environ.get(LOG_LEVEL_ENV, "").upper()
            level = getattr(logging, env_level, None)
            if not isinstance(level, int):
                level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "deps": "openblock_cli.cli.commands.deps",
            "fetch": "openblock_cli.cli.commands.fetch",
            "index": "openblock_cli.cli.commands.index",
            "libraries": "openblock_cli.cli.commands.libraries",
            "config": "openblock_cli.cli.commands.config",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            logger.error(f"Failed to load command module: {e}")
            return 1

        if not hasattr(module, "run"):
            logger.error(f"Command module {module_name} has no run() function")
            return 1

        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
