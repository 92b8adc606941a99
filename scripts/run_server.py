"""Script to launch the Support Chat API."""

from __future__ import annotations

import argparse
import os
import sys

import uvicorn

# Ensure project root is on sys.path (so imports work when run directly)
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from core.settings import get_settings  # noqa: E402


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the Support Chat API.")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.APP.HOST,
        help=f"Host to bind the server to (default: {settings.APP.HOST})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.APP.PORT,
        help=f"Port to bind the server to (default: {settings.APP.PORT})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (default: off)",
    )
    args = parser.parse_args()

    uvicorn.run(
        "api.main:create_fastapi_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.APP.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
