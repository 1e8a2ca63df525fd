"""
flakekeeper version information.

``__version__`` is the single source of truth for the package version;
``pyproject.toml`` carries the same value for packaging.
"""

from __future__ import annotations

__version__ = "0.1.0.dev0"

#: Banner printed by ``flakekeeper --version``
VERSION_STRING = f"flakekeeper {__version__}"
