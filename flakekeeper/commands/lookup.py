"""Lookup command implementation for flakekeeper.

Resolves a single FlakeHub constraint, the same way ``check`` does for
each FlakeHub input.

Typical usage::

    $ flakekeeper lookup edolstra/flake-compat
    $ flakekeeper lookup NixOS/nixpkgs 0.2411 --digest
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from typing import Optional

from flakekeeper.exceptions import FlakeKeeperError
from flakekeeper.context import pass_context, FlakeKeeperContext
from flakekeeper.core import FlakeHubDatasource, PackageCache
from flakekeeper.utils import HTTPClient, get_logger, get_raw_console, print_error

logger = get_logger("commands.lookup")


@click.command()
@click.argument("package")
@click.argument("constraint", required=False)
@click.option(
    "--registry-url",
    default=None,
    help="FlakeHub API base URL (overrides the configuration file).",
)
@click.option(
    "--digest",
    "digest_only",
    is_flag=True,
    help="Print only the revision of the resolved release.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the release as JSON.",
)
@pass_context
def lookup(
    ctx: FlakeKeeperContext,
    package: str,
    constraint: Optional[str],
    registry_url: Optional[str],
    digest_only: bool,
    as_json: bool,
) -> None:
    """Resolve a FlakeHub PACKAGE (owner/repo) to a release.

    CONSTRAINT is a version or version prefix (``1``, ``0.1``, ``3.13.1``);
    without it the latest release is returned. Exits 1 when nothing
    matches.
    """
    if package.count("/") != 1:
        raise click.BadParameter("expected OWNER/REPO", param_hint="PACKAGE")

    config = ctx.get_config()

    try:
        found = asyncio.run(
            _lookup_async(
                package,
                constraint,
                registry_url or config.registry_url,
                timeout=config.timeout,
                max_retries=config.max_retries,
                digest_only=digest_only,
                as_json=as_json,
            )
        )
    except FlakeKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    if not found:
        print_error(f"No release of {package} matches {constraint or '*'}")
        sys.exit(1)


async def _lookup_async(
    package: str,
    constraint: Optional[str],
    registry_url: str,
    *,
    timeout: int,
    max_retries: int,
    digest_only: bool,
    as_json: bool,
) -> bool:
    async with HTTPClient(timeout=timeout, max_retries=max_retries) as http:
        datasource = FlakeHubDatasource(http, PackageCache())

        if digest_only:
            digest = await datasource.get_digest(package, registry_url, constraint)
            if digest is None:
                return False
            print(digest)
            return True

        result = await datasource.get_releases(package, registry_url, constraint)

    if result is None or result.latest is None:
        return False

    if as_json:
        print(json.dumps(result.to_json(), indent=2))
        return True

    release = result.latest
    console = get_raw_console()
    console.print(f"[bold cyan]{package}[/bold cyan] {release.version}")
    console.print(f"  revision:  {release.git_ref}")
    console.print(f"  published: {release.release_timestamp}")
    if release.is_deprecated:
        console.print("  [yellow]yanked[/yellow]")
    if result.source_url:
        console.print(f"  source:    {result.source_url}")
    return True
