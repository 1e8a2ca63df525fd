from __future__ import annotations

import json
import pytest
from pathlib import Path
from typing import Any, Dict, Generator, List

from click.testing import CliRunner

from flakekeeper.exceptions import RegistryError
from flakekeeper.utils.http import HTTPClient
from flakekeeper.utils.console import reconfigure_console
from flakekeeper.utils.logger import disable_logging

NIXPKGS_REV = "5e4fbfb6b3de1aa2872b76d49fafc942626e2add"
COMPAT_REV = "ff81ac966bb2cae68946d5ed5fc4994f96d0ffec"
FH_REV = "0a1b2c3d4e5f60718293a4b5c6d7e8f901234567"


def _tarball(url: str, rev: str) -> Dict[str, Any]:
    return {
        "locked": {"type": "tarball", "url": url, "rev": rev},
        "original": {"type": "tarball", "url": url},
    }


LOCK_DOCUMENT: Dict[str, Any] = {
    "nodes": {
        "flake-compat": _tarball(
            "https://flakehub.com/f/edolstra/flake-compat/1.0.1.tar.gz", COMPAT_REV
        ),
        "fh": _tarball("https://flakehub.com/f/DeterminateSystems/fh/0.1.tar.gz", FH_REV),
        "nixpkgs": {
            "locked": {"type": "github", "owner": "NixOS", "repo": "nixpkgs", "rev": NIXPKGS_REV},
            "original": {
                "type": "github",
                "owner": "NixOS",
                "repo": "nixpkgs",
                "ref": "nixos-unstable",
            },
        },
        "root": {
            "inputs": {"flake-compat": "flake-compat", "fh": "fh", "nixpkgs": "nixpkgs"}
        },
    },
    "root": "root",
    "version": 7,
}

#: Registry answers keyed by ``owner/repo/constraint``
REGISTRY: Dict[str, Dict[str, Any]] = {
    "edolstra/flake-compat/1.0.1": {
        "version": "1.1.0+rev-" + COMPAT_REV,
        "simplified_version": "1.1.0",
        "revision": COMPAT_REV,
        "published_at": "2024-12-04T15:32:09.186Z",
        "repo_url": "https://github.com/edolstra/flake-compat",
        "yanked_at": None,
    },
    "DeterminateSystems/fh/0.1": {
        "version": "0.1.21",
        "revision": FH_REV,
        "published_at": "2025-01-10T12:00:00Z",
        "repo_url": "https://github.com/DeterminateSystems/fh",
    },
}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner(env={"COLUMNS": "200", "NO_COLOR": "1"})


@pytest.fixture(autouse=True)
def isolated_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run every command from an empty directory with a fresh console."""
    monkeypatch.chdir(tmp_path)
    reconfigure_console()
    yield
    reconfigure_console()
    disable_logging()


@pytest.fixture
def flake_lock(tmp_path: Path) -> Path:
    path = tmp_path / "flake.lock"
    path.write_text(json.dumps(LOCK_DOCUMENT), encoding="utf-8")
    return path


@pytest.fixture
def registry() -> Dict[str, Dict[str, Any]]:
    """Copy of the fake FlakeHub registry, keyed by ``owner/repo/constraint``."""
    return json.loads(json.dumps(REGISTRY))


@pytest.fixture
def serve_registry(
    registry: Dict[str, Dict[str, Any]], monkeypatch: pytest.MonkeyPatch
) -> List[str]:
    """Answer every ``HTTPClient.get_json`` call from ``registry``.

    Returns the list of requested URLs, in call order.
    """
    calls: List[str] = []

    async def get_json(self: HTTPClient, url: str, **kwargs: Any) -> Dict[str, Any]:
        calls.append(url)
        key = url.split("/version/", 1)[1]
        if key not in registry:
            raise RegistryError(f"Resource not found: {url}", url=url, status_code=404)
        return registry[key]

    monkeypatch.setattr(HTTPClient, "get_json", get_json)
    return calls
