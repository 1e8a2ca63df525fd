"""
flakekeeper — dependency discovery and release lookup for Nix flakes

flakekeeper reads a project's ``flake.lock``, turns every input declared by
the root flake into a structured dependency descriptor, and looks up fresh
releases for inputs published on FlakeHub.

Features include:
    • Classification of git, GitHub, GitLab, SourceHut and tarball inputs
    • nixpkgs channel and FlakeHub tarball detection
    • FlakeHub release and digest resolution with per-constraint caching
    • Table and JSON reports for CI/CD integration
"""

from __future__ import annotations

from flakekeeper.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "flakekeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Dependency extraction and FlakeHub release lookup for flake.lock files."

# ---------------------------------------------------------------------------
# Public API
#
# Only expose stable, documented interfaces here.
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
]
