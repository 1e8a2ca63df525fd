"""Shared plumbing for registry-backed datasources.

A datasource turns a package identity (and optionally a constraint) into a
:class:`~flakekeeper.models.release.ReleaseResult`. Subclasses receive
their HTTP client and cache explicitly so tests can hand in fakes.
"""

from __future__ import annotations

import httpx
from typing import NoReturn, Optional, Sequence

from flakekeeper.core.cache import PackageCache
from flakekeeper.constants import DATASOURCE_CACHE_PREFIX
from flakekeeper.utils.http import HTTPClient
from flakekeeper.utils.logger import get_logger
from flakekeeper.exceptions import (
    DatasourceError,
    ExternalHostError,
    FlakeKeeperError,
    NetworkError,
)

logger = get_logger("core.datasource")


class Datasource:
    """Base class for datasources.

    Args:
        datasource_id: Identifier that dependency descriptors refer to.
        http_client: Client used for every registry request.
        cache: Cache shared by all lookups of this datasource.
    """

    #: Registries queried when the caller does not name one.
    default_registry_urls: Sequence[str] = ()

    def __init__(
        self,
        datasource_id: str,
        http_client: HTTPClient,
        cache: Optional[PackageCache] = None,
    ) -> None:
        self.id = datasource_id
        self.http = http_client
        self.cache = cache if cache is not None else PackageCache()

    @property
    def cache_namespace(self) -> str:
        return f"{DATASOURCE_CACHE_PREFIX}{self.id}"

    def resolve_registry_url(self, registry_url: Optional[str]) -> str:
        """Return ``registry_url`` or the first default registry."""
        if registry_url:
            return registry_url
        if not self.default_registry_urls:
            raise DatasourceError("No registry URL configured", datasource=self.id)
        return self.default_registry_urls[0]

    def handle_generic_errors(
        self,
        err: Exception,
        *,
        package_name: Optional[str] = None,
    ) -> NoReturn:
        """Classify an unexpected lookup failure and raise it.

        Transient failures (timeouts, connection errors, HTTP 429 and 5xx)
        become :class:`ExternalHostError`. Everything else becomes a
        :class:`DatasourceError`.
        """
        if isinstance(err, (ExternalHostError, DatasourceError)):
            raise err

        if _is_transient(err):
            status_code = getattr(err, "status_code", None)
            url = getattr(err, "url", None)
            raise ExternalHostError(
                f"{self.id} registry is unavailable: {_message(err)}",
                host_type=self.id,
                url=url if isinstance(url, str) else None,
                status_code=status_code,
            ) from err

        raise DatasourceError(
            f"{self.id} lookup failed: {_message(err)}",
            datasource=self.id,
            package_name=package_name,
            original_error=err,
        ) from err


def _is_transient(err: Exception) -> bool:
    if isinstance(err, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(err, NetworkError):
        if err.status_code is None:
            # No response at all: the retry loop gave up on timeouts or
            # connection errors. Bad payloads always carry a response body.
            return err.response_body is None
        return err.status_code == 429 or err.status_code >= 500
    return False


def _message(err: Exception) -> str:
    if isinstance(err, FlakeKeeperError):
        return err.message
    return str(err) or err.__class__.__name__
