"""
Core functionality exports for flakekeeper.

    from flakekeeper.core import LockFileExtractor, FlakeHubDatasource
"""

from __future__ import annotations

from flakekeeper.core.cache import PackageCache
from flakekeeper.core.datasource import Datasource
from flakekeeper.core.resolver import FlakeHubDatasource
from flakekeeper.core.extractor import LockFileExtractor, is_version_range

__all__ = [
    "LockFileExtractor",
    "is_version_range",
    "Datasource",
    "FlakeHubDatasource",
    "PackageCache",
]
