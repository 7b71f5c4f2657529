#!/usr/bin/env python3
"""
Serve the relay API with uvicorn.

Port defaults to $PORT (5000 when unset).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from src.utils.settings import load_settings


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the SSLCommerz relay API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=None, help="Overrides $PORT")
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(args.verbose)
    port = args.port or load_settings().port
    logging.getLogger(__name__).info("Server running on http://localhost:%d", port)

    uvicorn.run("src.api.main:app", host=args.host, port=port, reload=args.reload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
