"""
Centralized constants for flakekeeper.

This module defines immutable configuration values used across flakekeeper,
including network settings, provider defaults, datasource and versioning
identifiers, and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "flakekeeper/{version}"

# ---------------------------------------------------------------------------
# FlakeHub registry
# ---------------------------------------------------------------------------

#: Default FlakeHub API endpoint.
FLAKEHUB_API_URL: Final[str] = "https://api.flakehub.com"

#: Constraint sent to the registry when no version constraint is known.
WILDCARD_CONSTRAINT: Final[str] = "*"

#: Spellings of the wildcard constraint accepted in lock file URLs.
WILDCARD_TOKENS: Final[Sequence[str]] = ("*", "%2a")

# ---------------------------------------------------------------------------
# Datasource and versioning identifiers
# ---------------------------------------------------------------------------

#: Datasource tracking branches, tags and commits of a git repository.
GIT_REFS_DATASOURCE: Final[str] = "git-refs"

#: Datasource backed by the FlakeHub registry.
FLAKEHUB_DATASOURCE: Final[str] = "flakehub"

#: Versioning scheme for nixpkgs channel names (``nixos-24.05`` etc.).
NIXPKGS_VERSIONING: Final[str] = "nixpkgs"

#: Range-aware versioning used for partial FlakeHub constraints (``0.1`` → ``0.1.x``).
RANGE_VERSIONING: Final[str] = "npm"

# ---------------------------------------------------------------------------
# Flake input providers
# ---------------------------------------------------------------------------

#: Canonical repository of the nixpkgs monorepo.
NIXPKGS_URL: Final[str] = "https://github.com/NixOS/nixpkgs"

#: Default host for ``github`` inputs.
DEFAULT_GITHUB_HOST: Final[str] = "github.com"

#: Default host for ``gitlab`` inputs.
DEFAULT_GITLAB_HOST: Final[str] = "gitlab.com"

#: Default host for ``sourcehut`` inputs.
DEFAULT_SOURCEHUT_HOST: Final[str] = "git.sr.ht"

#: Name of the entrypoint node in a flake lock graph.
ROOT_NODE: Final[str] = "root"

#: Lock file read next to ``flake.nix``.
FLAKE_LOCK_FILENAME: Final[str] = "flake.lock"

# ---------------------------------------------------------------------------
# Cache configuration
# ---------------------------------------------------------------------------

#: Cache namespace prefix for datasource lookups.
DATASOURCE_CACHE_PREFIX: Final[str] = "datasource-"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading lock files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
