"""Extract command implementation for flakekeeper.

Lists every input the root flake declares, as seen by
:class:`~flakekeeper.core.LockFileExtractor`. Nothing is fetched from the
network.

Typical usage::

    $ flakekeeper extract
    $ flakekeeper extract path/to/flake.nix --format json
"""

from __future__ import annotations

import sys
import json
import click
from pathlib import Path
from typing import Any, Dict, List

from flakekeeper.models import Dependency
from flakekeeper.core import LockFileExtractor
from flakekeeper.exceptions import FlakeKeeperError
from flakekeeper.context import pass_context, FlakeKeeperContext
from flakekeeper.utils import (
    get_logger,
    print_error,
    print_table,
    print_warning,
    short_digest,
)

logger = get_logger("commands.extract")


@click.command()
@click.argument(
    "file",
    type=click.Path(exists=True, path_type=Path),
    default="flake.lock",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def extract(ctx: FlakeKeeperContext, file: Path, format: str) -> None:
    """List the updatable inputs of a flake.

    FILE is a flake.lock, the flake.nix next to it, or the flake directory.

    Exits 0 when at least one input was found, 1 when the lock file is
    malformed, unreadable, or has nothing to update.
    """
    try:
        deps = LockFileExtractor().extract_file(file)
    except FlakeKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    if deps is None:
        print_warning(f"No updatable inputs found in {file}")
        sys.exit(1)

    logger.debug("Extracted %d input(s) with verbosity %d", len(deps), ctx.verbose)

    if format == "json":
        print(json.dumps([dep.to_json() for dep in deps], indent=2))
    else:
        _display_table(deps)


def _display_table(deps: List[Dependency]) -> None:
    data: List[Dict[str, Any]] = [
        {
            "Input": dep.dep_name,
            "Datasource": dep.datasource,
            "Package": dep.package_name or "-",
            "Current": dep.current_value or "-",
            "Digest": short_digest(dep.current_digest),
            "Versioning": dep.versioning or "-",
        }
        for dep in deps
    ]

    print_table(
        data,
        title="Flake Inputs",
        column_styles={
            "Input": {"style": "bold cyan", "no_wrap": True},
            "Current": {"justify": "center"},
            "Digest": {"justify": "center", "style": "dim"},
        },
    )
