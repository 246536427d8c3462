"""Unit tests for the ``python -m ftc_platform_mcp`` entry point."""

from unittest.mock import patch

import pytest

from ftc_platform_mcp.__main__ import main


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("VERCEL_API_BASE_URL", "http://mock/api/mastra")
    monkeypatch.setenv("MCP_HOST", "127.0.0.1")
    monkeypatch.setenv("MCP_PORT", "3999")
    monkeypatch.delenv("MCP_LOG_FORMAT", raising=False)


class TestMain:
    def test_missing_api_key_exits_with_status_1(self, monkeypatch):
        monkeypatch.delenv("MASTRA_API_KEY", raising=False)

        with (
            patch("ftc_platform_mcp.__main__.setup_logging"),
            patch("ftc_platform_mcp.__main__.uvicorn.run") as mock_run,
        ):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        mock_run.assert_not_called()

    def test_runs_uvicorn_with_configured_address(self, monkeypatch):
        monkeypatch.setenv("MASTRA_API_KEY", "k")
        monkeypatch.setenv("MCP_LOG_LEVEL", "WARNING")

        with (
            patch("ftc_platform_mcp.__main__.setup_logging") as mock_setup,
            patch("ftc_platform_mcp.__main__.uvicorn.run") as mock_run,
        ):
            main()

        mock_setup.assert_called_once_with(log_level="WARNING", log_format="detailed")
        mock_run.assert_called_once()
        kwargs = mock_run.call_args[1]
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 3999
        assert kwargs["log_config"] is None
