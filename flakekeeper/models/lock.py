"""
Lock graph data model for flakekeeper.

A ``flake.lock`` file is a JSON document holding a graph of named nodes.
Every node records the source the user *asked for* (``original``) and the
source Nix *resolved* (``locked``). The ``root`` node only holds
``inputs``: a mapping from the alias used in ``flake.nix`` to the node key
that describes it.

Example document::

    {
      "nodes": {
        "nixpkgs": {
          "locked": {"type": "github", "owner": "NixOS", "repo": "nixpkgs",
                     "rev": "5e4fbfb6b3de1aa2872b76d49fafc942626e2add"},
          "original": {"type": "github", "owner": "NixOS", "repo": "nixpkgs",
                       "ref": "nixos-unstable"}
        },
        "root": {"inputs": {"nixpkgs": "nixpkgs"}}
      },
      "root": "root",
      "version": 7
    }

:meth:`LockGraph.from_json` validates the shape and raises
:class:`~flakekeeper.exceptions.LockFileError` on the first violation.
"""

from __future__ import annotations

import json
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from flakekeeper.constants import ROOT_NODE
from flakekeeper.exceptions import LockFileError

#: A root input either names a node or "follows" a path of inputs.
InputReference = Union[str, List[str]]

_STRING_FIELDS = ("rev", "ref", "owner", "repo", "host", "url", "dir", "narHash")


class InputType(str, Enum):
    """Source provider of a flake input."""

    GIT = "git"
    GITHUB = "github"
    GITLAB = "gitlab"
    SOURCEHUT = "sourcehut"
    TARBALL = "tarball"
    INDIRECT = "indirect"
    PATH = "path"
    FILE = "file"
    MERCURIAL = "hg"


@dataclass(frozen=True)
class LockRef:
    """A flake source reference, either as requested or as locked.

    Attributes:
        type: Provider of the source.
        rev: Commit or revision the reference points at.
        ref: Branch or tag name (``original`` side only, usually).
        owner: Repository owner for forge providers.
        repo: Repository name for forge providers.
        host: Custom forge host; ``None`` means the provider default.
        url: Remote URL for ``git``, ``tarball`` and ``file`` sources.
        dir: Subdirectory holding the flake.
        nar_hash: Nix archive hash of the locked source.
        last_modified: Unix timestamp of the locked revision.
    """

    type: InputType
    rev: Optional[str] = None
    ref: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None
    host: Optional[str] = None
    url: Optional[str] = None
    dir: Optional[str] = None
    nar_hash: Optional[str] = None
    last_modified: Optional[int] = None

    @classmethod
    def from_json(cls, data: Any, *, node: str, side: str) -> "LockRef":
        """Validate and build a reference from its JSON object.

        Raises:
            LockFileError: ``data`` is not an object, has an unknown
                ``type`` or a field of the wrong type.
        """
        if not isinstance(data, Mapping):
            raise LockFileError(f"'{side}' must be an object", node=node)

        raw_type = data.get("type")
        try:
            input_type = InputType(raw_type)
        except ValueError:
            raise LockFileError(
                f"'{side}.type' has unsupported value {raw_type!r}", node=node
            ) from None

        values: Dict[str, Any] = {}
        for key in _STRING_FIELDS:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise LockFileError(f"'{side}.{key}' must be a string", node=node)
            values[key] = value

        last_modified = data.get("lastModified")
        if last_modified is not None and (
            isinstance(last_modified, bool) or not isinstance(last_modified, int)
        ):
            raise LockFileError(f"'{side}.lastModified' must be an integer", node=node)

        return cls(
            type=input_type,
            rev=values["rev"],
            ref=values["ref"],
            owner=values["owner"],
            repo=values["repo"],
            host=values["host"],
            url=values["url"],
            dir=values["dir"],
            nar_hash=values["narHash"],
            last_modified=last_modified,
        )


@dataclass(frozen=True)
class LockNode:
    """One node of the lock graph.

    ``locked`` and ``original`` are both optional: the root node has
    neither, and a damaged node may miss one of them.
    """

    locked: Optional[LockRef] = None
    original: Optional[LockRef] = None
    inputs: Dict[str, InputReference] = field(default_factory=dict)

    @classmethod
    def from_json(cls, name: str, data: Any) -> "LockNode":
        if not isinstance(data, Mapping):
            raise LockFileError("node must be an object", node=name)

        locked = data.get("locked")
        original = data.get("original")

        return cls(
            locked=None if locked is None else LockRef.from_json(locked, node=name, side="locked"),
            original=(
                None
                if original is None
                else LockRef.from_json(original, node=name, side="original")
            ),
            inputs=_parse_inputs(name, data.get("inputs")),
        )


def _parse_inputs(name: str, raw: Any) -> Dict[str, InputReference]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise LockFileError("'inputs' must be an object", node=name)

    inputs: Dict[str, InputReference] = {}
    for alias, target in raw.items():
        if isinstance(target, str):
            inputs[alias] = target
        elif isinstance(target, list) and all(isinstance(t, str) for t in target):
            inputs[alias] = list(target)
        else:
            raise LockFileError(
                f"input '{alias}' must be a node name or a follows path", node=name
            )
    return inputs


@dataclass(frozen=True)
class LockGraph:
    """A parsed ``flake.lock`` document.

    Attributes:
        nodes: Node key → node, in document order.
        version: Lock file format version, when present.
    """

    nodes: Dict[str, LockNode]
    version: Optional[int] = None

    @property
    def root(self) -> Optional[LockNode]:
        """The entrypoint node, or ``None`` if the graph has none."""
        return self.nodes.get(ROOT_NODE)

    @classmethod
    def from_json(cls, data: Any) -> "LockGraph":
        """Validate a decoded JSON document and build the graph.

        Raises:
            LockFileError: The document does not match the lock file shape.
        """
        if not isinstance(data, Mapping):
            raise LockFileError("lock file must be a JSON object")

        raw_nodes = data.get("nodes")
        if not isinstance(raw_nodes, Mapping):
            raise LockFileError("'nodes' must be an object")

        version = data.get("version")
        if version is not None and (isinstance(version, bool) or not isinstance(version, int)):
            raise LockFileError("'version' must be an integer")

        nodes = {name: LockNode.from_json(name, node) for name, node in raw_nodes.items()}
        return cls(nodes=nodes, version=version)

    @classmethod
    def parse(cls, content: Union[str, bytes]) -> "LockGraph":
        """Decode JSON text and build the graph.

        Raises:
            LockFileError: The content is not JSON or not a lock graph.
        """
        try:
            data = json.loads(content)
        except (TypeError, ValueError) as exc:
            raise LockFileError(f"lock file is not valid JSON: {exc}") from exc
        return cls.from_json(data)
