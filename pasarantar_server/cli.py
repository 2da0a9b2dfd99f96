"""Command-line interface for the PasarAntar MCP Server."""

import argparse
import asyncio
import os
import sys


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="PasarAntar MCP Server - browse, fill a cart and order from PasarAntar"
    )
    parser.add_argument(
        "--api-url",
        help="PasarAntar API root (overrides PASARANTAR_API_URL)",
    )
    parser.add_argument(
        "--storage-file",
        help="Local storage file for cart and checkout info (overrides PASARANTAR_STORAGE_FILE)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides PASARANTAR_LOG_LEVEL)",
    )

    args = parser.parse_args()

    if args.api_url:
        os.environ["PASARANTAR_API_URL"] = args.api_url
    if args.storage_file:
        os.environ["PASARANTAR_STORAGE_FILE"] = args.storage_file
    if args.log_level:
        os.environ["PASARANTAR_LOG_LEVEL"] = args.log_level

    from .server import main as server_main

    try:
        asyncio.run(server_main())
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
