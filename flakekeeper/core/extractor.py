"""Dependency extraction from ``flake.lock`` files.

The extractor walks the lock graph and emits one
:class:`~flakekeeper.models.dependency.Dependency` for every input the root
flake declares directly. Transitive inputs are left alone: they are pinned
by the flakes that declare them and cannot be bumped from here.

Extraction follows the same conventions everywhere:

- A malformed document, or one without ``root.inputs``, yields ``None``
  rather than partial output.
- Inputs that cannot be updated remotely (``indirect`` registry lookups,
  local ``path`` inputs, inputs without a locked revision) are skipped
  with a debug message; the rest of the graph is still processed.
- ``github``/``gitlab``/``sourcehut``/``git`` inputs are tracked through
  the ``git-refs`` datasource; tarball inputs are recognised as FlakeHub
  releases, nixpkgs channels, or forge archive downloads.

Typical usage::

    extractor = LockFileExtractor()
    deps = extractor.extract(Path("flake.lock").read_text(), "flake.lock")
    for dep in deps or []:
        print(dep.dep_name, dep.package_name, dep.current_value)
"""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import unquote
from typing import Dict, List, Optional, Union

from flakekeeper.models.dependency import Dependency
from flakekeeper.models.lock import InputType, LockGraph, LockNode, LockRef
from flakekeeper.exceptions import FileOperationError, LockFileError
from flakekeeper.utils.filesystem import resolve_lock_file, safe_read_file
from flakekeeper.utils.logger import format_context, get_logger
from flakekeeper.utils.url import normalize_git_url, strip_ref_prefix, to_source_url
from flakekeeper.constants import (
    DEFAULT_GITHUB_HOST,
    DEFAULT_GITLAB_HOST,
    DEFAULT_SOURCEHUT_HOST,
    FLAKEHUB_DATASOURCE,
    GIT_REFS_DATASOURCE,
    NIXPKGS_URL,
    NIXPKGS_VERSIONING,
    RANGE_VERSIONING,
    ROOT_NODE,
    WILDCARD_TOKENS,
)

logger = get_logger("core.extractor")

__all__ = ["LockFileExtractor", "is_version_range"]

# ---------------------------------------------------------------------------
# Tarball URL patterns
# ---------------------------------------------------------------------------

#: ``https://flakehub.com/f/<owner>/<repo>/<version>[.tar.gz]``
FLAKEHUB_TARBALL = re.compile(
    r"^https://flakehub\.com/f/(?P<owner>[^/]+)/(?P<repo>[^/]+)/(?P<version>[^/]+?)(?:\.tar\.gz)?$"
)

#: nixpkgs channel tarballs published on channels.nixos.org
NIXPKGS_CHANNEL_TARBALL = re.compile(
    r"^https://(?:channels\.nixos\.org|nixos\.org/channels)/(?P<channel>[^/]+)/nixexprs\.tar\.xz$"
)

#: Forge archive downloads (GitHub, Gitea, Forgejo ...)
ARCHIVE_TARBALL = re.compile(
    r"^https://(?P<domain>[^/]+)/(?P<owner>[^/]+)/(?P<repo>[^/]+)/archive/(?P<rev>.+)\.tar\.gz$"
)


def is_version_range(version: str) -> bool:
    """Decide whether a FlakeHub version token is a range or a pin.

    A token with at most two purely numeric components (``"0.1"``,
    ``"1"``) or a wildcard is treated as a range; three or more numeric
    components (``"3.13.1"``, ``"0.2511.5835"``) is a pin. A genuine
    two-component release such as ``"1.0"`` is therefore read as a range.

    Example:
        >>> is_version_range("0.1")
        True
        >>> is_version_range("1.1.0")
        False
    """
    if version.lower() in WILDCARD_TOKENS:
        return True
    numeric = sum(1 for part in version.split(".") if part.isdecimal())
    return numeric <= 2


class LockFileExtractor:
    """Extract updatable inputs from a ``flake.lock`` document.

    The extractor keeps no state between calls; one instance may be
    reused for any number of documents.
    """

    def extract_file(self, path: Union[str, Path]) -> Optional[List[Dependency]]:
        """Read a lock file from disk and extract it.

        ``path`` may point at ``flake.lock`` itself or at the ``flake.nix``
        next to it.

        Raises:
            FileOperationError: The lock file cannot be read.
        """
        lock_file = resolve_lock_file(path)
        try:
            content = safe_read_file(lock_file)
        except FileOperationError:
            logger.debug("Cannot read lock file: %s", lock_file)
            raise
        return self.extract(content, str(lock_file))

    def extract(
        self,
        content: Union[str, bytes],
        lock_file: Optional[str] = None,
    ) -> Optional[List[Dependency]]:
        """Extract dependencies from lock file content.

        Args:
            content: Raw ``flake.lock`` JSON.
            lock_file: Path of the document, used in log messages only.

        Returns:
            Dependencies in document order, or ``None`` when the document is
            invalid, has no root inputs, or yields no dependency at all.
        """
        logger.debug("Extracting dependencies from %s", lock_file or "<content>")

        try:
            graph = LockGraph.parse(content)
        except LockFileError as exc:
            logger.debug("Invalid flake.lock file: %s", format_context(file=lock_file, error=exc))
            return None

        aliases = self._build_alias_lookup(graph)
        if not aliases:
            logger.debug('flake.lock is missing "root" node inputs: %s', format_context(file=lock_file))
            return None

        deps: List[Dependency] = []
        for node_name, node in graph.nodes.items():
            if node_name == ROOT_NODE:
                continue

            # Transitive and locked-only nodes are not updatable on their own
            alias = aliases.get(node_name)
            if alias is None:
                continue

            dep = self._extract_node(alias, node, lock_file)
            if dep is not None:
                deps.append(dep)

        if not deps:
            return None

        logger.info("Found %d dependency(ies) in %s", len(deps), lock_file or "<content>")
        return deps

    # ------------------------------------------------------------------
    # Graph traversal (private)
    # ------------------------------------------------------------------

    @staticmethod
    def _build_alias_lookup(graph: LockGraph) -> Dict[str, str]:
        """Map node names to the alias ``root.inputs`` gives them.

        Inputs that ``follow`` another flake's input (list values) do not
        own a node and are left out.
        """
        root = graph.root
        if root is None:
            return {}

        lookup: Dict[str, str] = {}
        for alias, target in root.inputs.items():
            if isinstance(target, str):
                lookup.setdefault(target, alias)
        return lookup

    def _extract_node(
        self,
        alias: str,
        node: LockNode,
        lock_file: Optional[str],
    ) -> Optional[Dependency]:
        locked = node.locked
        original = node.original

        def skip(reason: str) -> None:
            logger.debug("%s, skipping: %s", reason, format_context(file=lock_file, input=alias))

        if locked is None:
            skip("input is missing locked")
            return None

        if original is None:
            skip("input is missing original")
            return None

        # Indirect inputs resolve through the flake registry, outside our control
        if InputType.INDIRECT in (original.type, locked.type):
            skip("input is of type indirect")
            return None

        if InputType.PATH in (original.type, locked.type):
            skip("input is of type path")
            return None

        if locked.rev is None:
            skip("locked input is not tracking a rev")
            return None

        dep = Dependency(
            dep_name=alias,
            datasource=GIT_REFS_DATASOURCE,
            current_value=strip_ref_prefix(original.ref) if original.ref else None,
            current_digest=locked.rev,
        )

        if not self._classify(dep, locked, original):
            skip(f"input is of unsupported type {locked.type.value}")
            return None

        return dep

    # ------------------------------------------------------------------
    # Provider classification (private)
    # ------------------------------------------------------------------

    def _classify(self, dep: Dependency, locked: LockRef, original: LockRef) -> bool:
        """Fill in provider-specific fields of ``dep``.

        Returns ``False`` for input types that cannot be tracked.
        """
        input_type = locked.type

        if input_type is InputType.TARBALL:
            return self._classify_tarball(dep, original)

        if input_type is InputType.GIT:
            if not original.url:
                return False
            dep.package_name = normalize_git_url(original.url)

        elif input_type is InputType.GITHUB:
            if _is_nixpkgs(original):
                dep.package_name = NIXPKGS_URL
                dep.versioning = NIXPKGS_VERSIONING
            else:
                dep.package_name = _forge_url(
                    original.host or DEFAULT_GITHUB_HOST, original.owner, original.repo
                )

        elif input_type is InputType.GITLAB:
            # Nested group paths are stored percent-encoded (``group%2Fsub``)
            dep.package_name = _forge_url(
                original.host or DEFAULT_GITLAB_HOST,
                unquote(original.owner) if original.owner else None,
                original.repo,
            )

        elif input_type is InputType.SOURCEHUT:
            dep.package_name = _forge_url(
                original.host or DEFAULT_SOURCEHUT_HOST, original.owner, original.repo
            )

        elif input_type in (
            InputType.FILE,
            InputType.MERCURIAL,
            InputType.INDIRECT,
            InputType.PATH,
        ):
            return False

        else:  # pragma: no cover - every InputType member is handled above
            raise AssertionError(f"unhandled input type: {input_type}")

        dep.source_url = to_source_url(dep.package_name)
        return True

    def _classify_tarball(self, dep: Dependency, original: LockRef) -> bool:
        url = original.url
        if not url:
            return False

        # FlakeHub is checked first: its URLs would also pass as plain tarballs
        flakehub = FLAKEHUB_TARBALL.match(url)
        if flakehub:
            version = flakehub.group("version")
            dep.datasource = FLAKEHUB_DATASOURCE
            dep.package_name = f"{flakehub.group('owner')}/{flakehub.group('repo')}"
            dep.current_value = version
            if is_version_range(version):
                dep.versioning = RANGE_VERSIONING
            else:
                # Pinned: a version bump is the update signal and the lock
                # refresh recomputes the revision.
                dep.current_digest = None
            return True

        channel = NIXPKGS_CHANNEL_TARBALL.match(url)
        if channel:
            dep.package_name = NIXPKGS_URL
            dep.current_value = channel.group("channel")
            dep.versioning = NIXPKGS_VERSIONING
            return True

        dep.package_name = ARCHIVE_TARBALL.sub(r"https://\g<domain>/\g<owner>/\g<repo>", url)
        return True


def _is_nixpkgs(ref: LockRef) -> bool:
    return (ref.owner or "").lower() == "nixos" and (ref.repo or "").lower() == "nixpkgs"


def _forge_url(host: str, owner: Optional[str], repo: Optional[str]) -> str:
    return f"https://{host}/{owner}/{repo}"
