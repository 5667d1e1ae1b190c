"""Command line entry point for the Sales MCP Server."""

import argparse
import sys

import uvicorn

from .config import load_config
from .server import create_app


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sales-mcp-server",
        description="MCP and REST gateway for the sales backend"
    )
    parser.add_argument("--config", default=None, help="Path to JSON config file (default: $CONFIG_PATH or config.json)")
    parser.add_argument("--host", default=None, help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (overrides config)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    host = args.host or config.server.host
    port = args.port or config.server.port

    app = create_app(config=config)
    uvicorn.run(
        app,
        host=host,
        port=port,
        reload=args.reload
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
