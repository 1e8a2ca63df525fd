"""Configuration file loader for flakekeeper.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``flakekeeper.toml`` — settings under ``[flakekeeper]`` table
- ``pyproject.toml`` — settings under ``[tool.flakekeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``FLAKEKEEPER_CONFIG``
2. ``flakekeeper.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.flakekeeper]`` section

Configuration precedence: defaults < config file < CLI args.

Example (``flakekeeper.toml``)::

    [flakekeeper]
    registry_url = "https://api.flakehub.com"
    timeout = 10
    max_retries = 2
"""

from __future__ import annotations

import tomli
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from flakekeeper.exceptions import ConfigError
from flakekeeper.utils.logger import get_logger
from flakekeeper.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    FLAKEHUB_API_URL,
)

logger = get_logger("config")

_KNOWN_KEYS = frozenset({"registry_url", "timeout", "max_retries"})


@dataclass
class FlakeKeeperConfig:
    """Parsed and validated flakekeeper configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        registry_url: Base URL of the FlakeHub API.
        timeout: HTTP timeout in seconds.
        max_retries: Retries for failed registry requests.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    registry_url: str = FLAKEHUB_API_URL
    timeout: int = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "registry_url": self.registry_url,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    flakekeeper_toml = cwd / "flakekeeper.toml"
    if flakekeeper_toml.is_file():
        logger.debug("Found flakekeeper.toml: %s", flakekeeper_toml)
        return flakekeeper_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.flakekeeper] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.flakekeeper] section.

    Parse errors count as "no section" so a broken pyproject.toml that is
    not ours does not stop the tool.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and "flakekeeper" in tool


def load_config(config_path: Optional[Path] = None) -> FlakeKeeperConfig:
    """Load and validate flakekeeper configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`FlakeKeeperConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return FlakeKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("flakekeeper", {})
    else:
        section = raw.get("flakekeeper", {})

    if not section:
        logger.debug("Config file found but no flakekeeper section — using defaults")
        return FlakeKeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomli.load(fh)
    except tomli.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> FlakeKeeperConfig:
    """Parse and validate a ``[flakekeeper]`` table.

    Raises:
        ConfigError: Unknown keys or values of the wrong type or range.
    """
    config = FlakeKeeperConfig()

    unknown = set(section.keys()) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "registry_url" in section:
        val = section["registry_url"]
        if not isinstance(val, str) or not val.startswith(("http://", "https://")):
            raise ConfigError(
                "registry_url must be an http(s) URL",
                config_path=config_path,
                option="registry_url",
            )
        config.registry_url = val.rstrip("/")

    if "timeout" in section:
        config.timeout = _int_option(section, "timeout", minimum=1, config_path=config_path)

    if "max_retries" in section:
        config.max_retries = _int_option(
            section, "max_retries", minimum=0, config_path=config_path
        )

    return config


def _int_option(
    section: Dict[str, Any],
    name: str,
    *,
    minimum: int,
    config_path: str,
) -> int:
    val = section[name]
    # bool is an int subclass; ``timeout = true`` is a mistake
    if isinstance(val, bool) or not isinstance(val, int):
        raise ConfigError(
            f"{name} must be an integer, got {type(val).__name__}",
            config_path=config_path,
            option=name,
        )
    if val < minimum:
        raise ConfigError(
            f"{name} must be >= {minimum}, got {val}",
            config_path=config_path,
            option=name,
        )
    return val
