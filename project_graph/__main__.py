"""
Command-line entry point.

Usage:
    python -m project_graph [stdio]
    python -m project_graph http [--port PORT] [--host HOST] [--log-level LEVEL]

Environment variables:
    MEMORY_FILE_PATH: Graph document (default: memory.json)
    SESSIONS_FILE_PATH: Sessions document (default: sessions.json)
    KG_HTTP_PORT: Server port (default: 8765)
    KG_HTTP_HOST: Server host (default: 127.0.0.1)
    KG_LOG_LEVEL: Logging level (default: INFO)
"""

import argparse
import asyncio
import logging
import os
import sys

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Project Graph Server")
    parser.add_argument("transport", nargs="?", choices=("stdio", "http"), default="stdio",
                        help="Transport to serve (default: stdio)")
    parser.add_argument("--port", type=int, default=None, help="HTTP port (default: 8765)")
    parser.add_argument("--host", default=None, help="HTTP host (default: 127.0.0.1)")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")

    args = parser.parse_args()

    # Set environment variables from args if provided
    if args.port:
        os.environ["KG_HTTP_PORT"] = str(args.port)
    if args.host:
        os.environ["KG_HTTP_HOST"] = args.host
    if args.log_level:
        os.environ["KG_LOG_LEVEL"] = args.log_level.upper()

    if args.transport == "stdio":
        from .server import main as serve_stdio

        try:
            asyncio.run(serve_stdio())
        except KeyboardInterrupt:
            logger.info("Server stopped by user")
        return

    from .config import GraphConfig, configure_logging

    config = GraphConfig.from_env()
    configure_logging(config.log_level)

    print(f"Starting Project Graph HTTP Server on {config.http_host}:{config.http_port}", file=sys.stderr)
    print(f"Log level: {config.log_level}", file=sys.stderr)

    try:
        import uvicorn
        from .api import app

        uvicorn.run(
            app,
            host=config.http_host,
            port=config.http_port,
            log_level=config.log_level.lower(),
        )
    except KeyboardInterrupt:
        print("\nServer stopped by user", file=sys.stderr)
    except Exception as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
