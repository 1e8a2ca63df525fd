from __future__ import annotations

import json
import pytest
from pathlib import Path

from click.testing import CliRunner

from flakekeeper.cli import cli

from conftest import COMPAT_REV, FH_REV, NIXPKGS_REV


@pytest.mark.unit
class TestExtractCommand:
    """Tests for ``flakekeeper extract``."""

    def test_json_output(self, runner: CliRunner, flake_lock: Path) -> None:
        result = runner.invoke(cli, ["extract", str(flake_lock), "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {
                "depName": "flake-compat",
                "datasource": "flakehub",
                "packageName": "edolstra/flake-compat",
                "currentValue": "1.0.1",
            },
            {
                "depName": "fh",
                "datasource": "flakehub",
                "packageName": "DeterminateSystems/fh",
                "currentValue": "0.1",
                "currentDigest": FH_REV,
                "versioning": "npm",
            },
            {
                "depName": "nixpkgs",
                "datasource": "git-refs",
                "packageName": "https://github.com/NixOS/nixpkgs",
                "currentValue": "nixos-unstable",
                "currentDigest": NIXPKGS_REV,
                "versioning": "nixpkgs",
                "sourceUrl": "https://github.com/NixOS/nixpkgs",
            },
        ]
        assert COMPAT_REV not in result.output

    def test_table_output(self, runner: CliRunner, flake_lock: Path) -> None:
        result = runner.invoke(cli, ["extract"])

        assert result.exit_code == 0
        assert "Flake Inputs" in result.output
        assert "edolstra/flake-compat" in result.output
        assert NIXPKGS_REV[:7] in result.output

    def test_accepts_flake_nix(self, runner: CliRunner, flake_lock: Path) -> None:
        flake_nix = flake_lock.with_name("flake.nix")
        flake_nix.write_text("{ outputs = _: { }; }", encoding="utf-8")

        result = runner.invoke(cli, ["extract", str(flake_nix), "-f", "json"])

        assert result.exit_code == 0
        assert len(json.loads(result.output)) == 3

    def test_invalid_lock_file(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "flake.lock").write_text("{}", encoding="utf-8")

        result = runner.invoke(cli, ["extract"])

        assert result.exit_code == 1
        assert "No updatable inputs" in result.output

    def test_missing_lock_file(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["extract"])

        assert result.exit_code == 2

    def test_unreadable_lock_next_to_flake_nix(self, runner: CliRunner, tmp_path: Path) -> None:
        flake_nix = tmp_path / "flake.nix"
        flake_nix.write_text("{ }", encoding="utf-8")

        result = runner.invoke(cli, ["extract", str(flake_nix)])

        assert result.exit_code == 1
        assert "File not found" in result.output
