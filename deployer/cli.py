"""Command-line interface for deployer.

This module parses the options, checks the argument preconditions and
dispatches to the validate, upload or download operation.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import yaml

from .config import DeployerConfig, default_config, default_config_path, load_config
from .errors import DeployerError, InvalidArgumentsError
from .sync import ReleaseSync

logger = logging.getLogger(__name__)


def setup_logging(quiet: bool = False, verbose: bool = False) -> None:
    """Setup logging configuration.

    Args:
        quiet: Only report warnings and errors
        verbose: Enable debug logging if True
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(level)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="deployer",
        description="Upload and download GitHub release assets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check that the stored credentials work
  deployer -v

  # Upload every file in dist/ to release jurism/v1
  deployer -u dist/ jurism/v1/

  # Upload one file under an explicit asset name
  deployer -u build/jurism.xpi jurism/v1/jurism-latest.xpi

  # Download all assets of a release into a directory
  deployer -d downloads/ jurism/v1/

  # Print one asset to standard output
  deployer -d jurism/v1/updates.json
        """.strip(),
    )

    parser.add_argument(
        "-u",
        "--upload",
        action="store_true",
        help="Upload. Arguments are path and tag.",
    )
    parser.add_argument(
        "-d",
        "--download",
        action="store_true",
        help="Download. Arguments are tag/asset, or path and tag.",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        action="append",
        metavar="GLOB",
        help="Ignore files matching glob. Multiple instances allowed. Valid only with -u.",
    )
    parser.add_argument(
        "-t",
        "--content-type",
        metavar="TYPE",
        help="Content type of uploaded assets (default: application/octet-stream)",
    )
    parser.add_argument(
        "-v",
        "--validate",
        action="store_true",
        help="Validate. Check access. Takes no arguments.",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Quiet. Do not produce any chatter."
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to the configuration YAML file (default: $DEPLOYER_CONFIG or ~/.config/deployer/config.yaml)",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("paths", nargs="*", metavar="ARG", help="path and/or tag")

    return parser


def validate_arguments(args: argparse.Namespace) -> None:
    """Check option and argument combinations.

    Raises:
        InvalidArgumentsError: If the combination is not allowed
    """
    selected = sum(bool(flag) for flag in (args.download, args.upload, args.validate))
    if selected > 1:
        raise InvalidArgumentsError("Can only select one of -d, -u or -v")
    if selected == 0:
        raise InvalidArgumentsError("Must select one of -d, -u or -v")

    if args.exclude and not args.upload:
        raise InvalidArgumentsError("The -x option is available only with -u")

    if args.validate and args.paths:
        raise InvalidArgumentsError("The -v option takes no arguments")
    if args.upload and len(args.paths) != 2:
        raise InvalidArgumentsError("Exactly two arguments are required with the -u option")
    if args.download and not 1 <= len(args.paths) <= 2:
        raise InvalidArgumentsError(
            "Either one or two arguments exactly are required with the -d option"
        )


def read_config(config_path: Optional[Path]) -> DeployerConfig:
    """Load the config file, falling back to defaults when none exists.

    An explicitly given path must exist.
    """
    if config_path is not None:
        return load_config(config_path)

    path = default_config_path()
    if path.exists():
        return load_config(path)
    logger.debug(f"No configuration file at {path}, using defaults")
    return default_config()


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the CLI application."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(quiet=args.quiet, verbose=args.verbose)

    try:
        validate_arguments(args)
    except InvalidArgumentsError as e:
        logger.error(f"deployer: {e}")
        sys.exit(1)

    try:
        config = read_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"deployer: Failed to load configuration: {e}")
        sys.exit(1)

    if args.quiet:
        config["quiet"] = True
    # quiet from the config file applies when -q was not given
    setup_logging(quiet=config["quiet"], verbose=args.verbose)

    try:
        with ReleaseSync(config) as sync:
            if args.validate:
                sys.exit(0 if sync.check_access() else 1)

            if args.upload:
                sync.upload(args.paths, args.exclude, args.content_type)
                sys.exit(0)

            result = sync.download(args.paths, stream=sys.stdout.buffer)
            if len(args.paths) == 1 and result.downloaded and not result.total_bytes:
                logger.error(f"deployer: Asset {args.paths[0]} is empty")
                sys.exit(1)
            sys.exit(0)

    except DeployerError as e:
        logger.error(f"deployer: {e}")
        if args.verbose:
            logger.exception("Full traceback:")
        sys.exit(1)
    except OSError as e:
        logger.error(f"deployer: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
