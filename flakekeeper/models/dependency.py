"""
Dependency descriptor model for flakekeeper.

A :class:`Dependency` is what the extractor emits for every flake input the
root flake declares. It names the datasource that can look up new versions
for the input and the identity to query it with.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Dependency:
    """A single updatable flake input.

    Attributes:
        dep_name: Input alias as written in ``flake.nix``.
        datasource: Datasource identifier (``git-refs`` or ``flakehub``).
        package_name: Identity understood by the datasource, a repository
            URL or a FlakeHub ``owner/repo`` pair.
        current_value: Branch, tag, channel or version constraint the input
            follows, if any.
        current_digest: Locked revision, if it should be tracked.
        versioning: Identifier of the versioning scheme to compare
            ``current_value`` with.
        source_url: Browsable repository URL.
    """

    dep_name: str
    datasource: str
    package_name: Optional[str] = None
    current_value: Optional[str] = None
    current_digest: Optional[str] = None
    versioning: Optional[str] = None
    source_url: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-safe mapping with absent fields omitted.

        Example:
            >>> Dependency(dep_name="nixpkgs", datasource="git-refs").to_json()
            {'depName': 'nixpkgs', 'datasource': 'git-refs'}
        """
        data: Dict[str, Any] = {
            "depName": self.dep_name,
            "datasource": self.datasource,
            "packageName": self.package_name,
            "currentValue": self.current_value,
            "currentDigest": self.current_digest,
            "versioning": self.versioning,
            "sourceUrl": self.source_url,
        }
        return {key: value for key, value in data.items() if value is not None}
