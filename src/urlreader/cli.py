"""Command-line interface for urlreader."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

# Diagnostics must run even when dependencies are broken
if "--doctor" in sys.argv:
    from .doctor import run_doctor

    sys.exit(run_doctor())

# Verify core dependencies
try:
    import aiohttp  # noqa: F401
    import bs4  # noqa: F401
    import html2text  # noqa: F401
    import playwright  # noqa: F401
    import pypdf  # noqa: F401
    import rich  # noqa: F401
except ImportError as e:
    print(f"\nERROR: Missing required dependency: {e.name}", file=sys.stderr)
    print("\nurlreader requires all core dependencies to be installed.", file=sys.stderr)
    print("\nRecommended fixes:", file=sys.stderr)
    print("  1. For pip users: pip install --upgrade --force-reinstall urlreader", file=sys.stderr)
    print("  2. For development: pip install -e .[dev]", file=sys.stderr)
    print("\nTo diagnose issues, run: urlreader --doctor", file=sys.stderr)
    sys.exit(1)

from pydantic import ValidationError
from rich.console import Console

from . import __version__
from .core import Reader, ensure_trailing_newline
from .errors import InvalidURLError, ReaderError
from .logging_config import setup_logging
from .models.config import ReaderConfig
from .models.events import EventType, ReaderEvent


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="urlreader",
        description="Convert any web page or PDF to clean Markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a page and print Markdown
  urlreader https://example.com/article

  # Percent-encoded input is decoded once
  urlreader https%3A%2F%2Fexample.com%2Fpaper.pdf > paper.md

  # Run the HTTP service
  urlreader --serve --port 8080

  # Use a YAML config file
  urlreader --serve --config reader.yaml
        """,
    )

    parser.add_argument(
        "url",
        nargs="?",
        help="URL to convert",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--doctor",
        action="store_true",
        help="Run diagnostic checks",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML config file (default: read from environment)",
    )

    # Server
    server_group = parser.add_argument_group("server")
    server_group.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP service instead of converting a single URL",
    )
    server_group.add_argument(
        "--host",
        type=str,
        default=None,
        help="Interface to bind (default: 0.0.0.0)",
    )
    server_group.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: $PORT or 8080)",
    )

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress output",
    )

    return parser


def load_config(args: argparse.Namespace) -> ReaderConfig:
    """Build the reader configuration from a file or the environment plus flags."""
    config = ReaderConfig.from_yaml_file(args.config) if args.config else ReaderConfig.from_env()

    server_overrides: dict = {}
    if args.host:
        server_overrides["host"] = args.host
    if args.port is not None:
        server_overrides["port"] = args.port

    updates: dict = {}
    if server_overrides:
        updates["server"] = config.server.model_copy(update=server_overrides)
    if args.verbose:
        updates["log_level"] = "DEBUG"
    elif args.quiet:
        updates["log_level"] = "ERROR"

    return config.model_copy(update=updates) if updates else config


def run_server(config: ReaderConfig) -> int:
    """Serve the HTTP API until interrupted."""
    import uvicorn

    from .api import create_app

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
    )
    return 0


def run_convert(args: argparse.Namespace, config: ReaderConfig) -> int:
    """Convert a single URL and print Markdown to stdout."""
    console = Console(stderr=True)

    def show_event(event: ReaderEvent) -> None:
        if event.type == EventType.PDF_DETECTED:
            console.print(f"[cyan]PDF detected:[/cyan] {event.url}")
        elif event.type == EventType.BROWSER_RENDER_STARTED:
            console.print(f"[cyan]Rendering:[/cyan] {event.url}")
        elif event.type == EventType.EXTRACTION_SKIPPED:
            console.print(f"[yellow]Extraction skipped:[/yellow] {event.message}")
        elif event.type == EventType.CONVERTED:
            console.print(f"[green]{event.message}[/green]")

    async def run() -> str:
        async with Reader(config) as reader:
            return await reader.convert(args.url, emit=show_event if args.verbose else None)

    try:
        markdown = asyncio.run(run())
    except InvalidURLError as e:
        if not args.quiet:
            console.print(f"[red]Invalid URL:[/red] {e}")
        return 2
    except ReaderError as e:
        if not args.quiet:
            console.print(f"[red]Error:[/red] {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    sys.stdout.write(ensure_trailing_newline(markdown))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.doctor:
        from .doctor import run_doctor

        return run_doctor()

    console = Console(stderr=True)

    if not args.serve and not args.url:
        console.print("[red]Error:[/red] Please provide a URL to convert, or --serve")
        return 1

    try:
        config = load_config(args)
    except (ValidationError, OSError, ValueError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    setup_logging(config.log_level, log_file=str(config.log_file) if config.log_file else None)

    if args.serve:
        return run_server(config)
    return run_convert(args, config)


if __name__ == "__main__":
    sys.exit(main())
