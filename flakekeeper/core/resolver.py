"""FlakeHub release resolution.

FlakeHub resolves version constraints on the server: asking
``/version/<owner>/<repo>/<constraint>`` returns the single best release
matching ``constraint`` instead of a list of every release. The datasource
therefore issues exactly one request per lookup and hands back at most one
release.

Typical usage::

    async with HTTPClient() as http:
        flakehub = FlakeHubDatasource(http, PackageCache())

        result = await flakehub.get_releases("edolstra/flake-compat")
        print(result.releases[0].version)        # "1.1.0"

        rev = await flakehub.get_digest("edolstra/flake-compat", new_value="1.0.1")
"""

from __future__ import annotations

from typing import Optional

from flakekeeper.core.cache import PackageCache
from flakekeeper.core.datasource import Datasource
from flakekeeper.exceptions import RegistryError
from flakekeeper.utils.http import HTTPClient
from flakekeeper.utils.logger import get_logger
from flakekeeper.utils.url import join_url_parts
from flakekeeper.models.release import FlakeHubRelease, Release, ReleaseResult
from flakekeeper.constants import (
    FLAKEHUB_API_URL,
    FLAKEHUB_DATASOURCE,
    WILDCARD_CONSTRAINT,
)

logger = get_logger("core.resolver")

__all__ = ["FlakeHubDatasource"]


class FlakeHubDatasource(Datasource):
    """Release lookups against the FlakeHub registry API.

    Args:
        http_client: Client used for registry requests.
        cache: Cache for lookup results. Entries are keyed by package
            *and* constraint, since different constraints resolve to
            different releases.
    """

    default_registry_urls = (FLAKEHUB_API_URL,)

    def __init__(
        self,
        http_client: HTTPClient,
        cache: Optional[PackageCache] = None,
    ) -> None:
        super().__init__(FLAKEHUB_DATASOURCE, http_client, cache)

    async def get_releases(
        self,
        package_name: str,
        registry_url: Optional[str] = None,
        current_value: Optional[str] = None,
    ) -> Optional[ReleaseResult]:
        """Resolve ``current_value`` to the newest matching release.

        Args:
            package_name: FlakeHub ``owner/repo`` pair.
            registry_url: API base URL; defaults to ``api.flakehub.com``.
            current_value: Version or range constraint. ``None`` asks for
                the latest release.

        Returns:
            A result holding exactly one release, or ``None`` when the
            package or constraint is unknown to the registry.

        Raises:
            ExternalHostError: The registry is temporarily unreachable.
            DatasourceError: Any other lookup failure.
        """
        constraint = current_value or WILDCARD_CONSTRAINT
        registry = self.resolve_registry_url(registry_url)

        return await self.cache.with_cache(
            self.cache_namespace,
            f"{package_name}:{constraint}",
            lambda: self._get_releases(package_name, registry, constraint),
            fallback=True,
        )

    async def get_digest(
        self,
        package_name: str,
        registry_url: Optional[str] = None,
        new_value: Optional[str] = None,
    ) -> Optional[str]:
        """Return the revision of the release ``new_value`` resolves to.

        Example::

            >>> await flakehub.get_digest("edolstra/flake-compat")
            'ff81ac966bb2cae68946d5ed5fc4994f96d0ffec'
        """
        result = await self.get_releases(
            package_name,
            registry_url=registry_url,
            current_value=new_value or WILDCARD_CONSTRAINT,
        )

        if result is None or result.latest is None:
            return None
        return result.latest.git_ref

    async def _get_releases(
        self,
        package_name: str,
        registry_url: str,
        constraint: str,
    ) -> Optional[ReleaseResult]:
        url = join_url_parts(registry_url, "version", package_name, constraint)
        logger.info("Looking up %s %s on FlakeHub", package_name, constraint)

        try:
            body = await self.http.get_json(url)
            if body is None:
                return None
            record = FlakeHubRelease.from_json(body)
        except RegistryError as exc:
            if exc.status_code != 404:
                self.handle_generic_errors(exc, package_name=package_name)
            logger.debug(
                "FlakeHub package not found: package=%s constraint=%s",
                package_name,
                constraint,
            )
            return None
        except Exception as exc:
            self.handle_generic_errors(exc, package_name=package_name)

        release = Release(
            version=record.display_version,
            git_ref=record.revision,
            release_timestamp=record.published_at,
            is_deprecated=record.is_yanked,
        )
        return ReleaseResult(releases=[release], source_url=record.repo_url)
