"""
URL and git reference helpers for flakekeeper.

Pure string functions used by the lock file extractor and the registry
datasource. None of them touch the network.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

# ``git@github.com:owner/repo.git`` style remotes
_SCP_LIKE_URL = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>(?!/).+)$")

_REF_PREFIX = re.compile(r"^refs/(?:heads|tags)/")

_WEB_SCHEMES = ("http", "https", "git", "ssh", "git+ssh", "ssh+git", "git+https", "git+http")


def strip_ref_prefix(ref: str) -> str:
    """Remove a leading ``refs/heads/`` or ``refs/tags/`` from a git ref.

    Example:
        >>> strip_ref_prefix("refs/tags/v1.2.0")
        'v1.2.0'
        >>> strip_ref_prefix("main")
        'main'
    """
    return _REF_PREFIX.sub("", ref, count=1)


def normalize_git_url(url: str) -> str:
    """Return a canonical form of a git remote URL.

    A ``git+`` transport prefix, query string and fragment are dropped,
    scheme and host are lower-cased and trailing slashes removed.
    scp-like remotes (``git@host:owner/repo``) are returned unchanged
    apart from whitespace and trailing slashes.

    Example:
        >>> normalize_git_url("git+https://GitHub.com/NixOS/patchelf?ref=master")
        'https://github.com/NixOS/patchelf'
    """
    url = url.strip()

    if "://" not in url:
        return url.rstrip("/")

    if url.startswith("git+"):
        url = url[len("git+"):]

    parts = urlsplit(url)
    netloc = parts.netloc
    if "@" in netloc:
        userinfo, _, hostport = netloc.rpartition("@")
        netloc = f"{userinfo}@{hostport.lower()}"
    else:
        netloc = netloc.lower()

    path = parts.path.rstrip("/")
    return urlunsplit((parts.scheme.lower(), netloc, path, "", ""))


def to_source_url(url: Optional[str]) -> Optional[str]:
    """Convert a repository URL into a browsable ``https://`` URL.

    ssh, scp-like, ``git://`` and ``http://`` remotes are rewritten to
    ``https://host/path``; a trailing ``.git`` suffix is removed. Returns
    ``None`` for empty input or URLs that do not point at a web host
    (``file://`` and friends).

    Example:
        >>> to_source_url("git@github.com:NixOS/nix.git")
        'https://github.com/NixOS/nix'
    """
    if not url:
        return None

    url = url.strip()

    if "://" not in url:
        match = _SCP_LIKE_URL.match(url)
        if not match:
            return None
        host, path = match.group("host"), match.group("path")
    else:
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        if scheme not in _WEB_SCHEMES or not parts.hostname:
            return None
        if scheme.endswith("http") or scheme.endswith("https"):
            host = parts.netloc.rpartition("@")[2].lower()
        else:
            host = parts.hostname
        path = parts.path

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]

    if not path:
        return f"https://{host}"
    return f"https://{host}/{path}"


def join_url_parts(base: str, *parts: str) -> str:
    """Join URL segments with exactly one ``/`` between them.

    Example:
        >>> join_url_parts("https://api.flakehub.com/", "/version/", "a/b", "*")
        'https://api.flakehub.com/version/a/b/*'
    """
    segments = [base.rstrip("/")]
    segments.extend(part.strip("/") for part in parts if part and part.strip("/"))
    return "/".join(segments)
