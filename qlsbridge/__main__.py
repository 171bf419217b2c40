"""Command-line entry point: ``python -m qlsbridge``."""

import argparse
from typing import List, Optional

import uvicorn

from qlsbridge.config import Settings
from qlsbridge.main import create_app


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve aggregated QLStats player rankings")
    parser.add_argument("--port", type=int, default=None, help="The HTTP server port")
    parser.add_argument(
        "--gzip",
        action="store_true",
        default=None,
        help="Use gzip compression on responses",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="The deadline, in seconds, for each HTTP request",
    )
    return parser.parse_args(argv)


def build_settings(argv: Optional[List[str]] = None) -> Settings:
    """Environment settings with any command-line flags applied on top."""
    args = _parse_args(argv)
    overrides = {}
    if args.port is not None:
        overrides["port"] = args.port
    if args.gzip:
        overrides["use_gzip"] = True
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    settings = Settings.from_env()
    return Settings(**{**settings.model_dump(), **overrides})


def main(argv: Optional[List[str]] = None) -> None:
    settings = build_settings(argv)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
