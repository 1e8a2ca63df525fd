from __future__ import annotations

import pytest
from pathlib import Path

from flakekeeper.exceptions import FileOperationError
from flakekeeper.utils.filesystem import (
    resolve_lock_file,
    safe_read_file,
)


@pytest.fixture
def lock_file(tmp_path: Path) -> Path:
    path = tmp_path / "flake.lock"
    path.write_text('{"nodes": {}}', encoding="utf-8")
    return path


@pytest.mark.unit
class TestSafeReadFile:
    """Tests for safe_read_file."""

    def test_reads_content(self, lock_file: Path) -> None:
        assert safe_read_file(lock_file) == '{"nodes": {}}'

    def test_accepts_string_path(self, lock_file: Path) -> None:
        assert safe_read_file(str(lock_file)) == '{"nodes": {}}'

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(tmp_path / "flake.lock")

        assert exc_info.value.operation == "read"

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(tmp_path)

        assert "Not a file" in exc_info.value.message

    def test_size_limit(self, lock_file: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(lock_file, max_size=4)

        assert "too large" in exc_info.value.message

    def test_size_limit_disabled(self, lock_file: Path) -> None:
        assert safe_read_file(lock_file, max_size=None)

    def test_decode_error(self, tmp_path: Path) -> None:
        path = tmp_path / "flake.lock"
        path.write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(path)

        assert isinstance(exc_info.value.original_error, UnicodeDecodeError)


@pytest.mark.unit
class TestResolveLockFile:
    """Tests for resolve_lock_file."""

    def test_directory(self, tmp_path: Path) -> None:
        assert resolve_lock_file(tmp_path) == tmp_path / "flake.lock"

    def test_flake_nix(self, tmp_path: Path) -> None:
        assert resolve_lock_file(tmp_path / "flake.nix") == tmp_path / "flake.lock"

    def test_other_path_unchanged(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.lock"
        assert resolve_lock_file(str(path)) == path

