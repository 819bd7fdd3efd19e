"""Tests for the riven-tui command line entry point."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from riven_tui import __version__
from riven_tui.api.errors import ApiError, TransportError
from riven_tui.cli.main import app

# ========== Fixtures ==========


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(clean_env):
    path = clean_env / "riven.yaml"
    path.write_text(
        "api:\n"
        "  endpoint: http://riven.test\n"
        "  token: secret-token\n"
        "logging:\n"
        f"  file: {clean_env / 'riven-tui.log'}\n"
    )
    return path


# ========== Tests ==========


@pytest.mark.unit
class TestCli:
    """Tests for main()."""

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == f"Riven TUI v{__version__}"

    def test_missing_token_exits(self, runner, clean_env):
        result = runner.invoke(app, [])
        assert result.exit_code == 1
        assert "Configuration error: API token is required" in result.output

    def test_missing_config_file_exits(self, runner, clean_env):
        result = runner.invoke(app, ["--config", str(clean_env / "absent.yaml")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_connectivity_failure_exits(self, runner, config_file):
        check = AsyncMock(side_effect=TransportError("request failed: connection refused"))
        launch = MagicMock()
        with patch("riven_tui.cli.main.check_connectivity", check), patch("riven_tui.cli.main.launch", launch):
            result = runner.invoke(app, ["-c", str(config_file)])
        assert result.exit_code == 1
        assert "Failed to connect to Riven at http://riven.test" in result.output
        launch.assert_not_called()

    def test_unauthorized_exits(self, runner, config_file):
        check = AsyncMock(side_effect=ApiError(401, "invalid token"))
        with patch("riven_tui.cli.main.check_connectivity", check), patch("riven_tui.cli.main.launch"):
            result = runner.invoke(app, ["-c", str(config_file)])
        assert result.exit_code == 1
        assert "status 401" in result.output

    def test_launches_app(self, runner, config_file):
        launch = MagicMock()
        with (
            patch("riven_tui.cli.main.check_connectivity", AsyncMock()),
            patch("riven_tui.cli.main.configure_from_settings") as configure,
            patch("riven_tui.cli.main.launch", launch),
        ):
            result = runner.invoke(app, ["--config", str(config_file)])
        assert result.exit_code == 0, result.output
        configure.assert_called_once()
        settings = launch.call_args.args[0]
        assert settings.api.endpoint == "http://riven.test"
        assert settings.api.token == "secret-token"

    def test_legacy_env_warning(self, runner, clean_env, monkeypatch):
        monkeypatch.setenv("RIVEN_API_KEY", "old-token")
        with (
            patch("riven_tui.cli.main.check_connectivity", AsyncMock()),
            patch("riven_tui.cli.main.configure_from_settings"),
            patch("riven_tui.cli.main.launch") as launch,
        ):
            result = runner.invoke(app, [])
        assert result.exit_code == 0, result.output
        assert "Warning: RIVEN_API_KEY is deprecated" in result.output
        assert launch.call_args.args[0].api.token == "old-token"
