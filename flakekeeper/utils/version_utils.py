"""
Version comparison utilities for flakekeeper.

Classifies the change between a flake input's current version and the
release a registry resolved it to. Version strings are parsed with
:mod:`packaging`; a leading ``v`` (``v1.2.0`` tags) is tolerated and
registry build metadata (``1.1.0+rev-ff81ac9``) is ignored.
"""

from __future__ import annotations

from typing import Optional, Tuple

from packaging.version import InvalidVersion, Version, parse


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the semantic update type between two versions.

    Args:
        current_version: Version the input is pinned to, or ``None``.
        target_version: Version the registry resolved to.

    Returns:
        One of:
            - ``"new"``       : No current version exists
            - ``"same"``      : Versions are identical
            - ``"downgrade"`` : Target version is lower than current
            - ``"major"``     : Major version change
            - ``"minor"``     : Minor version change
            - ``"patch"``     : Patch-level change
            - ``"update"``    : Update that cannot be classified further
            - ``"unknown"``   : Invalid or unsupported version comparison

    Examples:
        >>> get_update_type("3.13.1", "3.15.2")
        'minor'
        >>> get_update_type("v1.0.0", "1.0.0+rev-abc")
        'same'
    """
    if current_version is None and target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    if target_version is None:
        return "unknown"

    try:
        current = _parse_version(current_version)
        target = _parse_version(target_version)
    except InvalidVersion:
        return "unknown"

    if target == current:
        return "same"

    if target < current:
        return "downgrade"

    return _classify_upgrade(current, target)


def _parse_version(value: str) -> Version:
    """Parse a version string, dropping a ``v`` prefix and local metadata."""
    cleaned = value.strip()
    if cleaned[:1] in ("v", "V"):
        cleaned = cleaned[1:]

    parsed = parse(cleaned)
    if not isinstance(parsed, Version):
        raise InvalidVersion(value)

    # Registry build metadata (``+rev-...``) is not part of the release
    if parsed.local is not None:
        parsed = Version(parsed.public)
    return parsed


def _classify_upgrade(current: Version, target: Version) -> str:
    """Classify an upgrade between two valid versions."""
    current_release = _normalize_release(current)
    target_release = _normalize_release(target)

    for label, old, new in zip(("major", "minor", "patch"), current_release, target_release):
        if old != new:
            return label

    # Pre-release → release, post releases and the like
    return "update"


def _normalize_release(version: Version) -> Tuple[int, int, int]:
    """Normalize a version's release segment to (major, minor, patch)."""
    release = version.release + (0, 0, 0)
    return release[0], release[1], release[2]
