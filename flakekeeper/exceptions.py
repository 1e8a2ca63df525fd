"""
Custom exception hierarchy for flakekeeper.

This module defines structured exception types used across flakekeeper.
All exceptions inherit from :class:`FlakeKeeperError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class FlakeKeeperError(Exception):
    """Base exception for all flakekeeper errors.

    All flakekeeper-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class LockFileError(FlakeKeeperError):
    """Raised when a ``flake.lock`` document is structurally invalid.

    Args:
        message: Error description.
        file_path: Path to the lock file being parsed.
        node: Name of the offending graph node, if known.
    """

    __slots__ = ("file_path", "node")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        node: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)
        _add_if(details, "node", node)

        super().__init__(message, details)

        self.file_path = file_path
        self.node = node


class NetworkError(FlakeKeeperError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class RegistryError(NetworkError):
    """Raised for failures reported by a package registry.

    Args:
        message: Error description.
        package_name: Name of the package involved.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("package_name",)

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.package_name = package_name
        if package_name is not None:
            self.details["package"] = package_name


class ExternalHostError(NetworkError):
    """Raised when a remote host fails in a way that is likely temporary.

    Timeouts, connection failures, rate limiting and server-side errors
    end up here so callers can retry the whole run later instead of
    treating the dependency as broken.

    Args:
        message: Error description.
        host_type: Datasource identifier the host belongs to.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("host_type",)

    def __init__(
        self,
        message: str,
        *,
        host_type: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.host_type = host_type
        if host_type is not None:
            self.details["host_type"] = host_type


class DatasourceError(FlakeKeeperError):
    """Raised when a datasource lookup fails permanently.

    Args:
        message: Error description.
        datasource: Datasource identifier.
        package_name: Package being looked up.
        original_error: Underlying exception.
    """

    __slots__ = ("datasource", "package_name", "original_error")

    def __init__(
        self,
        message: str,
        *,
        datasource: Optional[str] = None,
        package_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "datasource", datasource)
        _add_if(details, "package", package_name)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.datasource = datasource
        self.package_name = package_name
        self.original_error = original_error


class FileOperationError(FlakeKeeperError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/validate).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(FlakeKeeperError):
    """Raised when the configuration file is invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Name of the offending option.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class SchemaError(FlakeKeeperError):
    """Raised when a registry payload does not match the expected shape.

    Args:
        message: Error description.
        field: Name of the offending field, if known.
    """

    __slots__ = ("field",)

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "field", field)

        super().__init__(message, details)

        self.field = field
