"""Run the backends (``http``, ``mcp flight-tracker``) or the forum flight API (``api``)."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from flightforum.client import ClientConfig, McpClient, serve_api
from flightforum.foundation.config import get_settings
from flightforum.observability import configure_logging

from .app import default_servers, serve_http, serve_mcp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m flightforum.servers", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    http = sub.add_parser("http", help="serve every backend on POST /call_tool")
    http.add_argument("--host", default="127.0.0.1")
    http.add_argument("--port", type=int, default=8000)

    mcp = sub.add_parser("mcp", help="serve one backend over the MCP protocol")
    mcp.add_argument("server", choices=[s.name for s in default_servers()])
    mcp.add_argument("--transport", choices=["stdio", "sse", "streamable-http"], default="stdio")
    mcp.add_argument("--host", default="127.0.0.1")
    mcp.add_argument("--port", type=int, default=8080)

    api = sub.add_parser("api", help="serve /api/flightDetails and /api/searchFlights over the tool client")
    api.add_argument("--host", default="127.0.0.1")
    api.add_argument("--port", type=int, default=3000)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.logging.format, settings.logging.level)

    if args.command == "http":
        serve_http(host=args.host, port=args.port)
        return
    if args.command == "api":
        serve_api(McpClient(ClientConfig.from_settings(settings)), host=args.host, port=args.port)
        return
    server = next(s for s in default_servers() if s.name == args.server)
    serve_mcp(server, transport=args.transport, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
