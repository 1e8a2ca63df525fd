from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from flakekeeper.config import (
    FlakeKeeperConfig,
    discover_config_file,
    load_config,
    _parse_section,
    _pyproject_has_section,
    _read_toml,
)
from flakekeeper.exceptions import ConfigError


@pytest.mark.unit
class TestFlakeKeeperConfig:
    """Tests for FlakeKeeperConfig dataclass."""

    def test_default_initialization(self) -> None:
        config = FlakeKeeperConfig()

        assert config.registry_url == "https://api.flakehub.com"
        assert config.timeout == 30
        assert config.max_retries == 3
        assert config.source_path is None

    def test_to_log_dict(self) -> None:
        config = FlakeKeeperConfig(timeout=5, source_path=Path("/test/path.toml"))

        assert config.to_log_dict() == {
            "registry_url": "https://api.flakehub.com",
            "timeout": 5,
            "max_retries": 3,
        }


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file."""

    def test_explicit_path_priority(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[flakekeeper]\n", encoding="utf-8")
        (tmp_path / "flakekeeper.toml").write_text("[flakekeeper]\n", encoding="utf-8")

        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file(config_file)

        assert result == config_file.resolve()

    def test_explicit_path_not_found_raises_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(tmp_path / "nonexistent.toml")

        assert "not found" in str(exc_info.value)

    def test_discovers_flakekeeper_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "flakekeeper.toml"
        config_file.write_text("[flakekeeper]\n", encoding="utf-8")

        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == config_file

    def test_discovers_pyproject_toml_with_section(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.flakekeeper]\ntimeout = 5\n", encoding="utf-8")

        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == config_file

    def test_ignores_pyproject_toml_without_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n", encoding="utf-8")

        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() is None

    def test_flakekeeper_toml_before_pyproject(self, tmp_path: Path) -> None:
        flakekeeper_toml = tmp_path / "flakekeeper.toml"
        flakekeeper_toml.write_text("[flakekeeper]\n", encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.flakekeeper]\n", encoding="utf-8")

        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == flakekeeper_toml


@pytest.mark.unit
class TestPyprojectHasSection:
    """Tests for _pyproject_has_section."""

    def test_true_when_section_exists(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.flakekeeper]\n", encoding="utf-8")

        assert _pyproject_has_section(config_file) is True

    def test_false_on_errors(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("invalid ][[", encoding="utf-8")

        assert _pyproject_has_section(config_file) is False
        assert _pyproject_has_section(tmp_path / "nonexistent.toml") is False


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml."""

    def test_invalid_toml(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "invalid.toml"
        toml_file.write_text("invalid ][[ toml", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            _read_toml(toml_file)

        assert "Invalid TOML" in str(exc_info.value)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _read_toml(tmp_path / "nonexistent.toml")

        assert "Cannot read" in str(exc_info.value)


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section."""

    def test_empty_section(self) -> None:
        assert _parse_section({}, config_path="test.toml") == FlakeKeeperConfig()

    def test_all_options(self) -> None:
        result = _parse_section(
            {"registry_url": "https://flakehub.example.com/", "timeout": 5, "max_retries": 0},
            config_path="test.toml",
        )

        assert result.registry_url == "https://flakehub.example.com"
        assert result.timeout == 5
        assert result.max_retries == 0

    def test_unknown_keys(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"check_conflicts": True}, config_path="test.toml")

        assert "Unknown configuration keys" in str(exc_info.value)
        assert "check_conflicts" in str(exc_info.value)

    @pytest.mark.parametrize(
        "section,option",
        [
            ({"registry_url": "ftp://flakehub"}, "registry_url"),
            ({"registry_url": 1}, "registry_url"),
            ({"timeout": "10"}, "timeout"),
            ({"timeout": True}, "timeout"),
            ({"timeout": 0}, "timeout"),
            ({"max_retries": -1}, "max_retries"),
            ({"max_retries": 1.5}, "max_retries"),
        ],
    )
    def test_invalid_values(self, section: dict, option: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section(section, config_path="test.toml")

        assert exc_info.value.option == option


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_when_no_config_found(self, tmp_path: Path) -> None:
        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result == FlakeKeeperConfig()

    def test_loads_flakekeeper_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "flakekeeper.toml"
        config_file.write_text("[flakekeeper]\ntimeout = 10\n", encoding="utf-8")

        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result.timeout == 10
        assert result.source_path == config_file

    def test_loads_pyproject_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.flakekeeper]\nmax_retries = 1\n", encoding="utf-8")

        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result.max_retries == 1
        assert result.source_path == config_file

    def test_loads_explicit_config_path(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text(
            '[flakekeeper]\nregistry_url = "http://localhost:8080"\n', encoding="utf-8"
        )

        result = load_config(config_file)

        assert result.registry_url == "http://localhost:8080"
        assert result.source_path == config_file.resolve()

    def test_empty_section_keeps_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "flakekeeper.toml"
        config_file.write_text("[flakekeeper]\n", encoding="utf-8")

        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result.timeout == 30
        assert result.source_path == config_file

    def test_invalid_toml_raises(self, tmp_path: Path) -> None:
        (tmp_path / "flakekeeper.toml").write_text("invalid ][[ toml", encoding="utf-8")

        with patch("flakekeeper.config.Path.cwd", return_value=tmp_path):
            with pytest.raises(ConfigError):
                load_config()
