"""
Command-line interface for flakekeeper.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from flakekeeper.config import load_config
from flakekeeper.__version__ import VERSION_STRING, __version__
from flakekeeper.context import FlakeKeeperContext
from flakekeeper.exceptions import ConfigError, FlakeKeeperError
from flakekeeper.utils.console import print_error, print_warning
from flakekeeper.utils.logger import get_logger, level_for_verbosity, setup_logging

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="FLAKEKEEPER_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="FLAKEKEEPER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="flakekeeper",
    message=VERSION_STRING,
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """flakekeeper — keep Nix flake inputs up to date.

    \b
    Available commands:
      flakekeeper extract          List the inputs found in flake.lock
      flakekeeper check            Look up new releases for FlakeHub inputs
      flakekeeper lookup           Resolve one FlakeHub release

    \b
    Examples:
      flakekeeper extract
      flakekeeper check --outdated-only
      flakekeeper lookup edolstra/flake-compat 1.0

    Use ``flakekeeper COMMAND --help`` for command-specific options.
    """
    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    flakekeeper_ctx = FlakeKeeperContext()
    flakekeeper_ctx.config_path = config or loaded_config.source_path
    flakekeeper_ctx.color = color
    flakekeeper_ctx.verbose = verbose
    flakekeeper_ctx.config = loaded_config
    ctx.obj = flakekeeper_ctx

    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"

    logger.debug("flakekeeper v%s", __version__)
    logger.debug("Config path: %s", flakekeeper_ctx.config_path)
    logger.debug("Configuration: %s", loaded_config.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
from flakekeeper.commands.check import check  # noqa: E402
from flakekeeper.commands.extract import extract  # noqa: E402
from flakekeeper.commands.lookup import lookup  # noqa: E402

cli.add_command(extract)
cli.add_command(check)
cli.add_command(lookup)


def main() -> int:
    """Main entry point for the flakekeeper CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        result = cli(standalone_mode=False)
        return result if isinstance(result, int) else 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except FlakeKeeperError as exc:
        print_error(str(exc))
        logger.debug(
            "FlakeKeeperError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
