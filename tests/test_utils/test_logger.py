from __future__ import annotations

import io
import logging
import pytest
from typing import Generator

from flakekeeper.utils import logger as logger_module
from flakekeeper.utils.logger import (
    ColoredFormatter,
    disable_logging,
    format_context,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Restore the flakekeeper logger after each test."""
    yield
    disable_logging()


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger namespacing."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            (None, "flakekeeper"),
            ("flakekeeper", "flakekeeper"),
            ("core.extractor", "flakekeeper.core.extractor"),
            ("flakekeeper.core.resolver", "flakekeeper.core.resolver"),
        ],
    )
    def test_names(self, name: str, expected: str) -> None:
        assert get_logger(name).name == expected


@pytest.mark.unit
class TestLevelForVerbosity:
    """Tests for level_for_verbosity."""

    @pytest.mark.parametrize(
        "verbose,level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_mapping(self, verbose: int, level: int) -> None:
        assert level_for_verbosity(verbose) == level


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging and disable_logging."""

    def test_messages_reach_stream(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.INFO, stream=stream, use_color=False)

        get_logger("core.extractor").info("Found %d dependency(ies)", 3)

        assert stream.getvalue() == "INFO: Found 3 dependency(ies)\n"
        assert is_logging_configured() is True

    def test_level_filters(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.WARNING, stream=stream, use_color=False)

        get_logger("cache").debug("Cache hit: ns:k")

        assert stream.getvalue() == ""

    def test_verbose_format_includes_logger_name(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.DEBUG, verbose=True, stream=stream, use_color=False)

        get_logger("http").debug("Retrying in 1.00s")

        assert "flakekeeper.http - DEBUG - Retrying in 1.00s" in stream.getvalue()

    def test_repeated_setup_replaces_handler(self) -> None:
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())

        assert len(logging.getLogger("flakekeeper").handlers) == 1

    def test_disable_logging(self) -> None:
        setup_logging(stream=io.StringIO())
        disable_logging()

        assert logger_module.is_logging_configured() is False
        handlers = logging.getLogger("flakekeeper").handlers
        assert all(isinstance(h, logging.NullHandler) for h in handlers)


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def _record(self) -> logging.LogRecord:
        return logging.LogRecord("flakekeeper", logging.ERROR, __file__, 1, "boom", None, None)

    def test_plain_when_disabled(self) -> None:
        formatter = ColoredFormatter("%(levelname)s %(message)s", use_color=False)

        assert formatter.format(self._record()) == "ERROR boom"

    def test_colors_without_mutating_record(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(ColoredFormatter, "_should_use_color", staticmethod(lambda: True))
        formatter = ColoredFormatter("%(levelname)s %(message)s")
        record = self._record()

        output = formatter.format(record)

        assert output.startswith("\033[31mERROR\033[0m")
        assert record.levelname == "ERROR"


@pytest.mark.unit
class TestFormatContext:
    """Tests for format_context."""

    def test_drops_none(self) -> None:
        assert format_context(file="flake.lock", input="nixpkgs", rev=None) == (
            "file=flake.lock input=nixpkgs"
        )

    def test_empty(self) -> None:
        assert format_context() == ""
