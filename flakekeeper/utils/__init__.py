"""
Utility helpers for flakekeeper.

This package provides reusable utilities used across flakekeeper, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Lock file discovery and reading
- Async HTTP client utilities
- URL and git reference helpers
- Version comparison helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

from flakekeeper.utils.filesystem import (
    resolve_lock_file,
    safe_read_file,
)
from flakekeeper.utils.logger import (
    disable_logging,
    format_context,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)
from flakekeeper.utils.console import (
    colorize_update_type,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
    short_digest,
)
from flakekeeper.utils.http import HTTPClient
from flakekeeper.utils.url import (
    join_url_parts,
    normalize_git_url,
    strip_ref_prefix,
    to_source_url,
)
from flakekeeper.utils.version_utils import get_update_type

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "short_digest",
    "get_raw_console",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "format_context",
    "disable_logging",
    "level_for_verbosity",
    "is_logging_configured",
    # Filesystem
    "safe_read_file",
    "resolve_lock_file",
    # HTTP
    "HTTPClient",
    # URLs
    "join_url_parts",
    "normalize_git_url",
    "strip_ref_prefix",
    "to_source_url",
    # Version utilities
    "get_update_type",
]
