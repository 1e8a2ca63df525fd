"""
Release data models for flakekeeper.

:class:`FlakeHubRelease` mirrors one record of the FlakeHub
``/version/{owner}/{repo}/{constraint}`` endpoint and validates it.
:class:`Release` and :class:`ReleaseResult` are the datasource-neutral
shapes handed back to callers.
"""

from __future__ import annotations

import re
from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from flakekeeper.exceptions import SchemaError

#: RFC 3339 date-time; the registry may send up to nanosecond precision
_TIMESTAMP_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.\d{1,9})?(?:Z|[+-]\d{2}:\d{2})$",
    re.IGNORECASE,
)


def _is_timestamp(value: str) -> bool:
    match = _TIMESTAMP_RE.match(value)
    if match is None:
        return False
    try:
        datetime.strptime(match.group(1), "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        return False
    return True


def _optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise SchemaError(f"'{key}' must be a string", field=key)
    return value


def _required_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise SchemaError(f"'{key}' is required and must be a string", field=key)
    return value


def _timestamp(data: Mapping[str, Any], key: str, *, nullable: bool) -> Optional[str]:
    value = data.get(key)
    if value is None:
        if nullable:
            return None
        raise SchemaError(f"'{key}' is required", field=key)
    if not isinstance(value, str) or not _is_timestamp(value):
        raise SchemaError(f"'{key}' must be an ISO 8601 timestamp", field=key)
    return value


@dataclass(frozen=True)
class FlakeHubRelease:
    """A validated FlakeHub release record.

    Only the fields flakekeeper consumes are kept; the API returns many
    more (``readme``, ``download_url`` ...) which are ignored.
    """

    version: str
    revision: str
    published_at: str
    simplified_version: Optional[str] = None
    repo_url: Optional[str] = None
    yanked_at: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "FlakeHubRelease":
        """Validate a decoded API response.

        Raises:
            SchemaError: A required field is missing or has the wrong type.
        """
        if not isinstance(data, Mapping):
            raise SchemaError("release record must be a JSON object")

        return cls(
            version=_required_str(data, "version"),
            revision=_required_str(data, "revision"),
            published_at=_timestamp(data, "published_at", nullable=False),
            simplified_version=_optional_str(data, "simplified_version"),
            repo_url=_optional_str(data, "repo_url"),
            yanked_at=_timestamp(data, "yanked_at", nullable=True),
        )

    @property
    def display_version(self) -> str:
        """Version without build metadata.

        ``simplified_version`` wins when present; otherwise everything from
        the first ``+`` on is dropped (``1.1.0+rev-ff81ac9`` → ``1.1.0``).
        """
        if self.simplified_version is not None:
            return self.simplified_version
        return self.version.split("+", 1)[0]

    @property
    def is_yanked(self) -> bool:
        return self.yanked_at is not None


@dataclass(frozen=True)
class Release:
    """One resolved release of a package."""

    version: str
    git_ref: Optional[str] = None
    release_timestamp: Optional[str] = None
    is_deprecated: bool = False

    def to_json(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "gitRef": self.git_ref,
            "releaseTimestamp": self.release_timestamp,
            "isDeprecated": self.is_deprecated,
        }


@dataclass(frozen=True)
class ReleaseResult:
    """Releases found for a package plus its repository URL."""

    releases: List[Release] = field(default_factory=list)
    source_url: Optional[str] = None

    @property
    def latest(self) -> Optional[Release]:
        """First release of the result, or ``None`` when empty."""
        return self.releases[0] if self.releases else None

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"releases": [r.to_json() for r in self.releases]}
        if self.source_url is not None:
            data["sourceUrl"] = self.source_url
        return data
