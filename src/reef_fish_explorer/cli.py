"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import functools
import http.server
import sys

import requests

from reef_fish_explorer import __version__
from reef_fish_explorer.cache import open_cache
from reef_fish_explorer.config import get_settings
from reef_fish_explorer.flows.build import build_all
from reef_fish_explorer.flows.fetch import fetch_all
from reef_fish_explorer.schemas import Result


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="reef-fish-explorer",
        description="Fetch, summarize and plot OBIS reef fish survey data",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    # 'refresh' command - fetch data and build report
    refresh_parser = subparsers.add_parser("refresh", help="Fetch data and build report")
    refresh_parser.add_argument(
        "--dataset-id",
        type=str,
        default=None,
        help="OBIS dataset UUID (default: dataset_id from settings)",
    )
    refresh_parser.add_argument(
        "--no-measurements",
        action="store_true",
        help="Fetch occurrences without measurement-or-fact records",
    )
    refresh_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a measurement has no matching occurrence",
    )

    # 'serve' command - serve built report locally
    serve_parser = subparsers.add_parser("serve", help="Serve report locally")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to serve on (default: api_port from settings)",
    )

    subparsers.add_parser("clear-cache", help="Delete every cached query result")

    return parser


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Dataset: {settings.dataset_id or '(not set)'}")
    with open_cache(settings.cache_dir) as cache:
        print(f"Cache: {settings.cache_dir} ({len(cache.keys())} entries)")
    print(f"Output: {settings.output_dir}")
    return 0


def refresh(dataset_id: str, include_measurements: bool, strict: bool) -> Result:
    """Fetch (or reuse) the dataset, then build the report."""
    fetched = fetch_all(dataset_id, include_measurements=include_measurements)
    built = build_all(dataset_id, include_measurements=include_measurements, strict=strict)
    if "error" in built:
        return Result(success=False, message="Build failed", error=str(built["error"]))
    return Result(
        success=True,
        message=f"Report written to {built['output']}",
        data={"fetch": fetched, "build": built},
    )


def cmd_refresh(args: argparse.Namespace) -> int:
    """Handle the 'refresh' command: fetch data then build report."""
    settings = get_settings()
    dataset_id = args.dataset_id or settings.dataset_id
    if not dataset_id:
        print(
            "No dataset id given. Pass --dataset-id or set REEF_DATASET_ID.",
            file=sys.stderr,
        )
        return 1
    include_measurements = settings.include_measurements and not args.no_measurements

    if args.debug:
        print(f"Debug mode enabled. Settings: {settings}")

    try:
        result = refresh(dataset_id, include_measurements, args.strict)
    except (ValueError, requests.RequestException) as e:
        result = Result(success=False, message="Refresh failed", error=str(e))

    if result.success:
        print(f"Done. {result.message}")
        return 0
    print(f"Error: {result.error}", file=sys.stderr)
    return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command: serve the built report locally."""
    settings = get_settings()
    port = args.port if args.port is not None else settings.api_port
    site_dir = settings.output_dir

    if not site_dir.exists():
        print("No report directory found. Run 'reef-fish-explorer refresh' first.", file=sys.stderr)
        return 1

    handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(site_dir))

    with http.server.HTTPServer(("", port), handler) as server:
        print(f"Serving report on http://localhost:{port}/report.html (Ctrl+C to stop)")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nServer stopped.")

    return 0


def cmd_clear_cache(_args: argparse.Namespace) -> int:
    """Handle the 'clear-cache' command."""
    settings = get_settings()
    with open_cache(settings.cache_dir) as cache:
        removed = cache.clear()
    print(f"Removed {removed} cached result(s) from {settings.cache_dir}")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "refresh": cmd_refresh,
        "serve": cmd_serve,
        "clear-cache": cmd_clear_cache,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
