"""
Main entry point for running the ENBUILD MCP server.

Flags take precedence; anything not given on the command line falls back
to the environment (a .env file in the working directory is loaded first).
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

# Add project root to path
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from dotenv import load_dotenv

from src.enbuild.config import LOG_LEVELS, TRANSPORTS, Settings
from src.enbuild.errors import ConfigurationError

logger = logging.getLogger("enbuild")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CLIENT_LOGGER = "src.enbuild"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="MCP Server for ENBUILD Platform",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with stdio (for MCP clients like Claude Desktop)
  python run_servers.py --token $ENBUILD_API_TOKEN --base-url https://enbuild.example.com

  # Run with SSE transport on port 8080
  python run_servers.py --transport sse --port 8080

  # Run with streamable HTTP transport
  python run_servers.py --transport http --port 8080

Environment fallbacks:
  ENBUILD_API_TOKEN, ENBUILD_USERNAME, ENBUILD_PASSWORD, ENBUILD_BASE_URL,
  ENBUILD_DEBUG, ENBUILD_TIMEOUT, ENBUILD_MCP_TRANSPORT, ENBUILD_MCP_HOST,
  ENBUILD_MCP_PORT, ENBUILD_LOG_LEVEL
"""
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default=None,
        help="Transport type (default: stdio)"
    )
    parser.add_argument("--host", default=None, help="Host for SSE/HTTP transport (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port for SSE/HTTP transport (default: 8080)")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Log level (default: info)"
    )
    parser.add_argument("--token", default=None, help="API token for ENBUILD")
    parser.add_argument("--username", default=None, help="ENBUILD username (alternative to --token)")
    parser.add_argument("--password", default=None, help="ENBUILD password (alternative to --token)")
    parser.add_argument("--base-url", default=None, help="Base URL for the ENBUILD API")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Enable debug mode for the ENBUILD client"
    )
    return parser


def load_settings(argv: Optional[List[str]] = None) -> Settings:
    """
    Parse flags and resolve them against the environment.

    Raises:
        ConfigurationError: If the resulting settings cannot start a server
    """
    args = build_parser().parse_args(argv)
    settings = Settings.from_env(
        transport=args.transport,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        token=args.token,
        username=args.username,
        password=args.password,
        base_url=args.base_url,
        debug=args.debug,
    )
    return settings.validate()


def configure_logging(settings: Settings) -> None:
    """
    Send logs to stderr; stdout belongs to the stdio transport.

    --debug only raises the ENBUILD client loggers to DEBUG. The root level
    always follows --log-level so the MCP SDK and uvicorn stay quiet.
    """
    level = getattr(logging, settings.log_level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger(CLIENT_LOGGER).setLevel(logging.DEBUG if settings.debug else logging.NOTSET)


def run_mcp_server(settings: Settings) -> None:
    """Run the MCP server on the configured transport."""
    from src.mcp.mcp_server import RUNNERS

    runner = RUNNERS.get(settings.transport)
    if runner is None:
        raise ConfigurationError(
            f"invalid transport type: {settings.transport}. Must be 'stdio', 'sse' or 'http'"
        )
    logger.info("Starting ENBUILD MCP server with transport: %s", settings.transport)
    runner(settings)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point with CLI argument parsing."""
    load_dotenv()

    try:
        settings = load_settings(argv)
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR, format=LOG_FORMAT, stream=sys.stderr)
        logger.error("Error: %s", e)
        sys.exit(1)

    configure_logging(settings)

    try:
        run_mcp_server(settings)
    except ConfigurationError as e:
        logger.error("Error: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down ENBUILD MCP server")


if __name__ == "__main__":
    main()
