from __future__ import annotations

import pytest
from typing import Optional

from flakekeeper.utils.version_utils import get_update_type


@pytest.mark.unit
class TestGetUpdateType:
    """Tests for get_update_type."""

    @pytest.mark.parametrize(
        "current,target,expected",
        [
            ("1.0.0", "2.0.0", "major"),
            ("3.13.1", "3.15.2", "minor"),
            ("1.1.0", "1.1.1", "patch"),
            ("1.1.0", "1.1.0", "same"),
            ("1.1", "1.1.0", "same"),
            ("v1.0.0", "1.0.0+rev-abc", "same"),
            ("0.2511.5835", "0.2511.5900", "patch"),
            ("2.0.0", "1.9.9", "downgrade"),
            ("1.0.0rc1", "1.0.0", "update"),
            ("1.0.0", "1.0.0.post1", "update"),
        ],
    )
    def test_classification(self, current: str, target: str, expected: str) -> None:
        assert get_update_type(current, target) == expected

    @pytest.mark.parametrize(
        "current,target,expected",
        [
            (None, "1.0.0", "new"),
            ("1.0.0", None, "unknown"),
            (None, None, "unknown"),
            ("nixos-unstable", "1.0.0", "unknown"),
            ("1.0.0", "latest", "unknown"),
        ],
    )
    def test_edge_cases(
        self, current: Optional[str], target: Optional[str], expected: str
    ) -> None:
        assert get_update_type(current, target) == expected
