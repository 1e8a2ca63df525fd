"""
Shared context object for flakekeeper CLI commands.

This module defines the global Click context used to share configuration
and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from flakekeeper.config import FlakeKeeperConfig


class FlakeKeeperContext:
    """Global context object for flakekeeper CLI commands.

    An instance of this class is created once per CLI invocation and
    passed to commands using Click's context mechanism.

    Attributes:
        config_path: Path to the flakekeeper configuration file, if provided.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration, set by the top-level command.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: Optional[FlakeKeeperConfig] = None

    def get_config(self) -> FlakeKeeperConfig:
        """Return the loaded configuration, or defaults when none was loaded."""
        return self.config if self.config is not None else FlakeKeeperConfig()


#: Click decorator for injecting :class:`FlakeKeeperContext` into commands.
pass_context = click.make_pass_decorator(FlakeKeeperContext, ensure=True)
