"""Integration tests for the composition root.

These tests verify that the bootstrap process correctly loads configuration,
renders the schema for the configured deployment, and wires the Dgraph store.
"""

import json
import logging
import os
import sys
from unittest.mock import AsyncMock, patch

import pytest

from dgauth import main as composition
from dgauth.config import Settings, load_settings
from dgauth.tests.fakes.dgraph import FakeDgraphServer

PEM = "-----BEGIN PUBLIC KEY-----\\nMIIB\\n-----END PUBLIC KEY-----"


class TestConfigurationLoading:
    """Test configuration loading and validation."""

    def test_load_settings_with_defaults(self) -> None:
        """Load settings with default values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.dgraph_endpoint == "http://localhost:8080/graphql"
        assert settings.dgraph_jwt_algorithm == "HS256"
        assert settings.dgraph_auth_header == "Authorization"
        assert settings.run_mode == "cli"
        assert settings.log_level == "INFO"
        assert settings.secure is False

    def test_load_settings_from_env(self) -> None:
        """Load settings from environment variables."""
        with patch.dict(
            os.environ,
            {
                "DGRAPH_ENDPOINT": "https://db.example.com/graphql",
                "DGRAPH_AUTH_TOKEN": "key",
                "DGRAPH_JWT_SECRET": "secret",
                "DGRAPH_JWT_ALGORITHM": "RS256",
                "RUN_MODE": "load_schema",
            },
        ):
            settings = load_settings()

        assert settings.dgraph_endpoint == "https://db.example.com/graphql"
        assert settings.dgraph_auth_token == "key"
        assert settings.dgraph_jwt_algorithm == "RS256"
        assert settings.run_mode == "load_schema"
        assert settings.secure is True

    def test_load_settings_from_env_file(self, tmp_path) -> None:
        """Load settings from an explicit .env file."""
        env_file = tmp_path / "test.env"
        env_file.write_text("DGRAPH_AUTH_HEADER=X-My-Auth\nLOG_FORMAT=json\n")

        settings = load_settings(str(env_file))

        assert settings.dgraph_auth_header == "X-My-Auth"
        assert settings.log_format == "json"

    def test_validates_endpoint_scheme(self) -> None:
        """Endpoint validation rejects non-HTTP URLs."""
        with pytest.raises(Exception):  # ValidationError
            Settings(dgraph_endpoint="localhost:8080/graphql")

    def test_validates_timeout(self) -> None:
        """Timeout validation rejects zero."""
        with pytest.raises(Exception):  # ValidationError
            Settings(request_timeout_seconds=0)

    def test_validates_algorithm(self) -> None:
        """Only HS256 and RS256 are accepted."""
        with pytest.raises(Exception):  # ValidationError
            Settings(dgraph_jwt_algorithm="ES256")

    def test_unescapes_pem_newlines(self) -> None:
        """Single-line PEM keys get real newlines."""
        settings = Settings(dgraph_jwt_verification_key=PEM)

        assert settings.dgraph_jwt_verification_key.count("\n") == 2


class TestLoggingConfiguration:
    """Test log output formats."""

    def test_json_lines_escape_messages(self) -> None:
        """Messages with quotes still produce valid JSON lines."""
        record = logging.LogRecord(
            name="dgauth.main",
            level=logging.ERROR,
            pathname=__file__,
            lineno=1,
            msg='Dgraph rejected GraphQL request: query="{ x }"',
            args=(),
            exc_info=None,
        )

        line = composition.JSONFormatter().format(record)

        decoded = json.loads(line)
        assert decoded["message"] == 'Dgraph rejected GraphQL request: query="{ x }"'
        assert decoded["level"] == "ERROR"
        assert decoded["name"] == "dgauth.main"

    def test_json_lines_include_exceptions(self) -> None:
        """Tracebacks are embedded in the JSON object."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "dgauth.main", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        decoded = json.loads(composition.JSONFormatter().format(record))

        assert "RuntimeError: boom" in decoded["exc_info"]

    def test_configure_logging_installs_json_formatter(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            composition.configure_logging("WARNING", "json")

            assert isinstance(root.handlers[0].formatter, composition.JSONFormatter)
            assert root.level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestSchemaLoaderWiring:
    """build_schema_loader picks the schema matching the configuration."""

    @pytest.mark.asyncio
    async def test_unsecure_schema(self) -> None:
        server = FakeDgraphServer()
        loader = composition.build_schema_loader(
            Settings(dgraph_endpoint="http://dgraph:8080/graphql")
        )

        assert await loader(transport=server.transport) is True
        assert "@auth" not in server.schemas[0]
        assert str(server.requests[0].url) == "http://dgraph:8080/admin/schema"

    @pytest.mark.asyncio
    async def test_hs256_verifies_with_secret(self) -> None:
        server = FakeDgraphServer()
        loader = composition.build_schema_loader(
            Settings(dgraph_jwt_secret="secret", dgraph_auth_token="key")
        )

        await loader(transport=server.transport)

        schema = server.schemas[0]
        line = next(
            line for line in schema.splitlines() if line.startswith("# Dgraph.Authorization")
        )
        authorization = json.loads(line[len("# Dgraph.Authorization "):])
        assert authorization["VerificationKey"] == "secret"
        assert authorization["Algo"] == "HS256"
        assert server.requests[0].headers["X-Auth-Token"] == "key"

    def test_rs256_requires_verification_key(self) -> None:
        settings = Settings(dgraph_jwt_secret="private", dgraph_jwt_algorithm="RS256")

        with pytest.raises(ValueError, match="verification key"):
            composition.build_schema_loader(settings)

    def test_explicit_admin_url(self) -> None:
        loader = composition.build_schema_loader(
            Settings(dgraph_admin_url="http://admin:9000/admin/schema")
        )

        assert loader.keywords["admin_url"] == "http://admin:9000/admin/schema"


class TestBootstrap:
    """Run mode selection."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("loaded,exit_code", [(True, 0), (False, 1)])
    async def test_load_schema_mode(self, loaded: bool, exit_code: int) -> None:
        settings = Settings(run_mode="load_schema")
        loader = AsyncMock(return_value=loaded)

        with (
            patch.object(composition, "load_settings", return_value=settings),
            patch.object(composition, "configure_logging"),
            patch.object(composition, "load_schema", loader),
        ):
            assert await composition.bootstrap() == exit_code

        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cli_mode_closes_store(self) -> None:
        settings = Settings(dgraph_auth_token="key")
        cli = AsyncMock()

        with (
            patch.object(composition, "load_settings", return_value=settings),
            patch.object(composition, "configure_logging"),
            patch.object(composition, "_run_cli_interactive", cli),
            patch(
                "dgauth.adapters.dgraph.client.DgraphClient.close",
                new_callable=AsyncMock,
            ) as close,
        ):
            assert await composition.bootstrap() == 0

        cli.assert_awaited_once()
        close.assert_awaited_once()

    def test_main_exits_with_bootstrap_code(self) -> None:
        with patch.object(composition, "bootstrap", AsyncMock(return_value=1)):
            with pytest.raises(SystemExit) as exc_info:
                composition.main()

        assert exc_info.value.code == 1
