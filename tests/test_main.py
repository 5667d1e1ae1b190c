"""Tests for main entry point."""

from unittest.mock import patch, MagicMock

import pytest

from sales_mcp_server.config import Config, ServerConfig
from sales_mcp_server.main import main


class TestMain:
    """Test main function and CLI argument parsing."""

    @patch('sales_mcp_server.main.uvicorn.run')
    @patch('sales_mcp_server.main.create_app')
    @patch('sales_mcp_server.main.load_config')
    def test_main_uses_config_defaults(self, mock_load_config, mock_create_app, mock_uvicorn_run):
        config = Config(server=ServerConfig(host="0.0.0.0", port=8088))
        mock_load_config.return_value = config
        mock_app = MagicMock()
        mock_create_app.return_value = mock_app

        assert main([]) == 0

        mock_load_config.assert_called_once_with(None)
        mock_create_app.assert_called_once_with(config=config)
        mock_uvicorn_run.assert_called_once_with(
            mock_app,
            host="0.0.0.0",
            port=8088,
            reload=False
        )

    @patch('sales_mcp_server.main.uvicorn.run')
    @patch('sales_mcp_server.main.create_app')
    @patch('sales_mcp_server.main.load_config')
    def test_main_all_custom_args(self, mock_load_config, mock_create_app, mock_uvicorn_run):
        mock_load_config.return_value = Config()
        mock_app = MagicMock()
        mock_create_app.return_value = mock_app

        main(['--config', 'gateway.json', '--host', '192.168.1.100', '--port', '9000', '--reload'])

        mock_load_config.assert_called_once_with('gateway.json')
        mock_uvicorn_run.assert_called_once_with(
            mock_app,
            host="192.168.1.100",
            port=9000,
            reload=True
        )

    @patch('sales_mcp_server.main.uvicorn.run')
    @patch('sales_mcp_server.main.load_config')
    def test_main_bad_config(self, mock_load_config, mock_uvicorn_run, capsys):
        mock_load_config.side_effect = ValueError("Failed to load config from x.json: boom")

        assert main(['--config', 'x.json']) == 1

        mock_uvicorn_run.assert_not_called()
        assert "Failed to load config" in capsys.readouterr().err

    def test_main_invalid_port(self):
        with pytest.raises(SystemExit):
            main(['--port', 'not-a-number'])
