"""Check command implementation for flakekeeper.

Extracts the inputs of a flake and asks FlakeHub for the newest release
matching each FlakeHub input's version constraint.

The command orchestrates two core components:

1. **LockFileExtractor** — turns ``flake.lock`` into dependency
   descriptors.
2. **FlakeHubDatasource** — resolves each ``flakehub`` descriptor's
   constraint to a single release, through one shared
   :class:`HTTPClient` and :class:`PackageCache`.

Inputs tracked by other datasources are listed but not looked up. A
failing lookup is reported on its own row and never stops the others.

Typical usage::

    $ flakekeeper check
    $ flakekeeper check --outdated-only --format json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from flakekeeper.models import Dependency, Release
from flakekeeper.exceptions import FlakeKeeperError
from flakekeeper.constants import FLAKEHUB_DATASOURCE
from flakekeeper.context import pass_context, FlakeKeeperContext
from flakekeeper.core import FlakeHubDatasource, LockFileExtractor, PackageCache
from flakekeeper.utils import (
    HTTPClient,
    colorize_update_type,
    get_logger,
    get_update_type,
    print_error,
    print_success,
    print_table,
    print_warning,
    short_digest,
)

logger = get_logger("commands.check")


@dataclass
class InputStatus:
    """Outcome of checking a single flake input.

    Attributes:
        dep: The extracted dependency.
        release: Release FlakeHub resolved the constraint to.
        source_url: Repository URL reported by the registry.
        update_type: ``same``, ``digest``, or a semantic classification
            from :func:`get_update_type`; ``None`` when not checked.
        error: Failure message when the lookup failed.
    """

    dep: Dependency
    release: Optional[Release] = None
    source_url: Optional[str] = None
    update_type: Optional[str] = None
    error: Optional[str] = None

    @property
    def checked(self) -> bool:
        return self.dep.datasource == FLAKEHUB_DATASOURCE

    def has_update(self) -> bool:
        return self.update_type not in (None, "same", "unknown", "downgrade")

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "dependency": self.dep.to_json(),
            "checked": self.checked,
            "updateType": self.update_type,
        }
        if self.release is not None:
            data["release"] = self.release.to_json()
        if self.source_url is not None:
            data["sourceUrl"] = self.source_url
        if self.error is not None:
            data["error"] = self.error
        return data


@click.command()
@click.argument(
    "file",
    type=click.Path(exists=True, path_type=Path),
    default="flake.lock",
)
@click.option(
    "--outdated-only",
    is_flag=True,
    help="Show only inputs with available updates.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--registry-url",
    default=None,
    help="FlakeHub API base URL (overrides the configuration file).",
)
@pass_context
def check(
    ctx: FlakeKeeperContext,
    file: Path,
    outdated_only: bool,
    format: str,
    registry_url: Optional[str],
) -> None:
    """Check a flake's FlakeHub inputs for newer releases.

    FILE is a flake.lock, the flake.nix next to it, or the flake directory.

    Exits 0 if every checked input is up to date, 1 if updates are
    available or an error occurred.
    """
    try:
        needs_attention = asyncio.run(
            _check_async(ctx, file, outdated_only, format, registry_url)
        )
        sys.exit(1 if needs_attention else 0)

    except FlakeKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _check_async(
    ctx: FlakeKeeperContext,
    file: Path,
    outdated_only: bool,
    format: str,
    registry_url: Optional[str],
) -> bool:
    """Extract, resolve and display.

    Returns:
        ``True`` if any input has an update available or failed to resolve.
    """
    show_progress = format == "table"
    config = ctx.get_config()

    logger.info("Checking %s...", file)

    deps = LockFileExtractor().extract_file(file)
    if deps is None:
        if show_progress:
            print_warning(f"No updatable inputs found in {file}")
        return False

    async with HTTPClient(timeout=config.timeout, max_retries=config.max_retries) as http:
        datasource = FlakeHubDatasource(http, PackageCache())
        statuses = await check_dependencies(
            deps, datasource, registry_url or config.registry_url
        )

    if outdated_only:
        statuses = [s for s in statuses if s.has_update() or s.error]

    updates = sum(1 for s in statuses if s.has_update())
    failures = sum(1 for s in statuses if s.error)

    if not statuses:
        if show_progress:
            print_success("All inputs are up to date!")
        return False

    if format == "json":
        print(json.dumps([s.to_json() for s in statuses], indent=2))
    else:
        _display_table(statuses)
        if updates:
            print_warning(f"\n{updates} input(s) have updates available")
        if failures:
            print_error(f"{failures} input(s) could not be resolved")
        if not updates and not failures:
            print_success("\nAll checked inputs are up to date!")

    return updates > 0 or failures > 0


async def check_dependencies(
    deps: List[Dependency],
    datasource: FlakeHubDatasource,
    registry_url: Optional[str] = None,
) -> List[InputStatus]:
    """Resolve every FlakeHub dependency concurrently.

    Lookups run independently: an exception for one input becomes that
    input's ``error`` and does not affect the others. The result keeps the
    order of ``deps``.
    """
    statuses = [InputStatus(dep=dep) for dep in deps]
    pending = [s for s in statuses if s.checked and s.dep.package_name]

    results = await asyncio.gather(
        *(
            datasource.get_releases(
                s.dep.package_name,
                registry_url=registry_url,
                current_value=s.dep.current_value,
            )
            for s in pending
        ),
        return_exceptions=True,
    )

    for status, result in zip(pending, results):
        if isinstance(result, Exception):
            logger.error("Failed to look up %s: %s", status.dep.package_name, result)
            status.error = str(result)
        elif result is None or result.latest is None:
            status.error = "no matching release on FlakeHub"
        else:
            status.release = result.latest
            status.source_url = result.source_url
            status.update_type = classify_update(status.dep, result.latest)

    return statuses


def classify_update(dep: Dependency, release: Release) -> str:
    """Compare a dependency with the release its constraint resolved to.

    Pinned inputs (no tracked digest) compare versions; range inputs
    compare revisions, since the constraint itself does not change.
    """
    if dep.current_digest is None:
        return get_update_type(dep.current_value, release.version)
    if release.git_ref == dep.current_digest:
        return "same"
    return "digest"


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_table(statuses: List[InputStatus]) -> None:
    data = [_create_table_row(s) for s in statuses]

    column_styles: Dict[str, Dict[str, Any]] = {
        "Status": {"justify": "center", "no_wrap": True, "width": 12},
        "Input": {"style": "bold cyan", "no_wrap": True},
        "Current": {"justify": "center", "style": "dim"},
        "Latest": {"justify": "center", "style": "bold green"},
        "Update Type": {"justify": "center"},
    }

    print_table(
        data,
        title="Flake Input Status",
        column_styles=column_styles,
        show_row_lines=True,
    )


def _create_table_row(status: InputStatus) -> Dict[str, str]:
    dep = status.dep
    current = dep.current_value or short_digest(dep.current_digest)

    if not status.checked:
        return {
            "Status": "[dim]- SKIPPED[/dim]",
            "Input": dep.dep_name,
            "Current": current,
            "Latest": "[dim]-[/dim]",
            "Update Type": f"[dim]{dep.datasource}[/dim]",
        }

    if status.error or status.release is None:
        return {
            "Status": "[red]✗ ERROR[/red]",
            "Input": dep.dep_name,
            "Current": current,
            "Latest": f"[red]{status.error or 'error'}[/red]",
            "Update Type": "[dim]-[/dim]",
        }

    latest = status.release.version
    if status.update_type == "digest":
        latest = f"{latest} ({short_digest(status.release.git_ref)})"

    if status.has_update():
        return {
            "Status": "[yellow]⬆ OUTDATED[/yellow]",
            "Input": dep.dep_name,
            "Current": current,
            "Latest": latest,
            "Update Type": colorize_update_type(status.update_type or "update"),
        }

    return {
        "Status": "[green]✓ OK[/green]",
        "Input": dep.dep_name,
        "Current": current,
        "Latest": latest,
        "Update Type": "[dim]-[/dim]",
    }
