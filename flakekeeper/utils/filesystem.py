"""
Filesystem utilities for flakekeeper.

This module provides safe helpers for locating and reading ``flake.lock``
files. All filesystem errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from flakekeeper.utils.logger import get_logger
from flakekeeper.exceptions import FileOperationError
from flakekeeper.constants import FLAKE_LOCK_FILENAME, MAX_FILE_SIZE


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Validate and resolve an existing file path."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Safely read a text file with optional size limits.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    logger.debug("Reading %s (%d bytes)", path, size)
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def resolve_lock_file(path: PathLike) -> Path:
    """Return the ``flake.lock`` that belongs to ``path``.

    A directory or a ``flake.nix`` path maps to the sibling
    ``flake.lock``; any other path is returned as given.

    Example:
        >>> resolve_lock_file("project/flake.nix")
        PosixPath('project/flake.lock')
    """
    candidate = Path(path)
    if candidate.is_dir():
        return candidate / FLAKE_LOCK_FILENAME
    if candidate.name == "flake.nix":
        return candidate.with_name(FLAKE_LOCK_FILENAME)
    return candidate

