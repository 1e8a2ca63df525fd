"""
Unified data model exports for flakekeeper.

Example:
    >>> from flakekeeper.models import Dependency, LockGraph, ReleaseResult
"""

from __future__ import annotations

from flakekeeper.models.dependency import Dependency
from flakekeeper.models.lock import InputType, LockGraph, LockNode, LockRef
from flakekeeper.models.release import FlakeHubRelease, Release, ReleaseResult

__all__ = [
    "Dependency",
    "InputType",
    "LockGraph",
    "LockNode",
    "LockRef",
    "FlakeHubRelease",
    "Release",
    "ReleaseResult",
]
