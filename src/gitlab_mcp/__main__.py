"""Command-line entry point: ``python -m gitlab_mcp`` or ``gitlab-mcp``."""

import argparse
import logging
import sys

from pydantic import ValidationError

from .config import get_config
from .gitlab.client import GitLabClient
from .logging_config import configure_logging
from .server import create_server

logger = logging.getLogger("gitlab_mcp.main")

TRANSPORTS = ("stdio", "sse", "streamable-http")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitlab-mcp",
        description="Expose a GitLab instance to MCP clients",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default="stdio",
        help="MCP transport (default: stdio)",
    )
    parser.add_argument(
        "--host", default="127.0.0.1", help="Bind address for HTTP transports (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port", type=int, default=8000, help="Port for HTTP transports (default: 8000)"
    )
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the server until the transport closes.

    Returns:
        Exit code (0 = clean shutdown, 1 = invalid configuration)
    """
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.debug else None)

    try:
        config = get_config()
    except ValidationError as e:
        logger.error(
            "invalid_configuration",
            extra={"errors": e.errors(include_url=False, include_input=False)},
        )
        return 1

    server = create_server(GitLabClient(config))
    logger.info(
        "gitlab_mcp_starting",
        extra={"transport": args.transport, "gitlab_url": config.url, "read_only": config.read_only},
    )
    if args.transport == "stdio":
        server.run(transport="stdio")
    else:
        server.run(transport=args.transport, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
