from __future__ import annotations

import httpx
import pytest
from unittest.mock import MagicMock

from flakekeeper.core.cache import PackageCache
from flakekeeper.core.datasource import Datasource
from flakekeeper.utils.http import HTTPClient
from flakekeeper.exceptions import (
    DatasourceError,
    ExternalHostError,
    NetworkError,
    RegistryError,
    SchemaError,
)


class _ExampleDatasource(Datasource):
    default_registry_urls = ("https://registry.example.com", "https://mirror.example.com")


@pytest.fixture
def datasource() -> Datasource:
    return _ExampleDatasource("example", MagicMock(spec=HTTPClient))


@pytest.mark.unit
class TestDatasourceInit:
    """Tests for Datasource construction."""

    def test_creates_cache_when_missing(self, datasource: Datasource) -> None:
        assert isinstance(datasource.cache, PackageCache)

    def test_keeps_given_cache(self) -> None:
        cache = PackageCache()
        datasource = Datasource("example", MagicMock(spec=HTTPClient), cache)
        assert datasource.cache is cache

    def test_cache_namespace(self, datasource: Datasource) -> None:
        assert datasource.cache_namespace == "datasource-example"


@pytest.mark.unit
class TestResolveRegistryUrl:
    """Tests for Datasource.resolve_registry_url."""

    def test_explicit_url_wins(self, datasource: Datasource) -> None:
        assert datasource.resolve_registry_url("https://other") == "https://other"

    def test_first_default(self, datasource: Datasource) -> None:
        assert datasource.resolve_registry_url(None) == "https://registry.example.com"

    def test_no_default_raises(self) -> None:
        datasource = Datasource("bare", MagicMock(spec=HTTPClient))

        with pytest.raises(DatasourceError):
            datasource.resolve_registry_url(None)


@pytest.mark.unit
class TestHandleGenericErrors:
    """Tests for Datasource.handle_generic_errors."""

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ReadTimeout("slow"),
            httpx.ConnectError("refused"),
            NetworkError("failed", url="https://registry.example.com/x"),
            NetworkError("limited", status_code=429),
            NetworkError("server", status_code=500),
            RegistryError("gateway", status_code=504),
        ],
        ids=["timeout", "connect", "no-response", "429", "500", "504"],
    )
    def test_transient_errors(self, datasource: Datasource, error: Exception) -> None:
        with pytest.raises(ExternalHostError) as exc_info:
            datasource.handle_generic_errors(error, package_name="pkg")

        assert exc_info.value.host_type == "example"
        assert exc_info.value.__cause__ is error

    def test_transient_error_keeps_status_and_url(self, datasource: Datasource) -> None:
        error = NetworkError("server", url="https://registry.example.com/x", status_code=502)

        with pytest.raises(ExternalHostError) as exc_info:
            datasource.handle_generic_errors(error)

        assert exc_info.value.status_code == 502
        assert exc_info.value.url == "https://registry.example.com/x"

    @pytest.mark.parametrize(
        "error",
        [
            NetworkError("forbidden", status_code=403, response_body="denied"),
            NetworkError("bad payload", response_body="<html>"),
            SchemaError("'revision' is required", field="revision"),
            KeyError("x"),
        ],
        ids=["403", "bad-payload", "schema", "unexpected"],
    )
    def test_permanent_errors(self, datasource: Datasource, error: Exception) -> None:
        with pytest.raises(DatasourceError) as exc_info:
            datasource.handle_generic_errors(error, package_name="pkg")

        assert exc_info.value.datasource == "example"
        assert exc_info.value.package_name == "pkg"
        assert exc_info.value.original_error is error

    @pytest.mark.parametrize(
        "error",
        [
            ExternalHostError("already classified", host_type="example"),
            DatasourceError("already classified", datasource="example"),
        ],
    )
    def test_classified_errors_pass_through(
        self, datasource: Datasource, error: Exception
    ) -> None:
        with pytest.raises(type(error)) as exc_info:
            datasource.handle_generic_errors(error)

        assert exc_info.value is error

    def test_message_falls_back_to_class_name(self, datasource: Datasource) -> None:
        with pytest.raises(DatasourceError) as exc_info:
            datasource.handle_generic_errors(RuntimeError())

        assert "RuntimeError" in exc_info.value.message
