"""Command-line interface for webcapture."""

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

# Verify core dependencies
try:
    import aiohttp  # noqa: F401
    import bs4  # noqa: F401
    import html2text  # noqa: F401
    import pydantic  # noqa: F401
    import rich  # noqa: F401
except ImportError as e:
    print(f"\nERROR: Missing required dependency: {e.name}", file=sys.stderr)
    print("\nwebcapture requires all core dependencies to be installed.", file=sys.stderr)
    print("\nRecommended fixes:", file=sys.stderr)
    print("  1. For pip users: pip install --upgrade --force-reinstall web-capture", file=sys.stderr)
    print("  2. For development: pip install -e .[dev]", file=sys.stderr)
    print("\nTo diagnose issues, run: webcapture --doctor", file=sys.stderr)
    sys.exit(1)

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .core import Capturer, normalize_url
from .logging_config import setup_logging
from .models.capture import BrowserEngine, OutputFormat
from .models.config import CaptureConfig

ENDPOINTS = [
    ("/html?url=<URL>&engine=<ENGINE>", "Render page as HTML"),
    ("/markdown?url=<URL>", "Convert page to Markdown"),
    ("/image?url=<URL>&engine=<ENGINE>", "Screenshot page as PNG"),
    ("/fetch?url=<URL>", "Proxy fetch content"),
    ("/stream?url=<URL>", "Stream content"),
]


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="webcapture",
        description="Capture web pages as HTML, Markdown, or PNG",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start the API server on port 3000
  webcapture --serve

  # Start the API server on a custom port
  webcapture --serve --port 8080

  # Capture a page as HTML to stdout
  webcapture https://example.com

  # Capture a page as Markdown to a file
  webcapture https://example.com --format markdown --output page.md

  # Screenshot a page using Playwright
  webcapture https://example.com --format png --engine playwright -o screenshot.png
        """,
    )

    parser.add_argument(
        "url",
        nargs="?",
        help="URL to capture",
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
        type=Path,
        metavar="FILE",
        help="YAML configuration file",
    )

    # Capture
    capture_group = parser.add_argument_group("capture settings")
    capture_group.add_argument(
        "--format",
        "-f",
        default="html",
        help="Output format: html, markdown, md, image, png, screenshot (default: html)",
    )
    capture_group.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file (default: stdout for text, <host>_<timestamp>.png for images)",
    )
    capture_group.add_argument(
        "--engine",
        "-e",
        default=None,
        help="Browser engine: puppeteer, playwright (default: puppeteer, or BROWSER_ENGINE env)",
    )

    # Server
    server_group = parser.add_argument_group("server settings")
    server_group.add_argument(
        "--serve",
        "-s",
        action="store_true",
        help="Start as HTTP API server",
    )
    server_group.add_argument(
        "--host",
        default=None,
        help="Interface to bind (default: 0.0.0.0)",
    )
    server_group.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 3000, or PORT env)",
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


def load_config(args: argparse.Namespace) -> CaptureConfig:
    """
    Build the effective configuration.

    Precedence, lowest first: built-in defaults, the --config file,
    PORT and BROWSER_ENGINE environment variables, command line flags.
    """
    config = CaptureConfig.from_yaml_file(args.config) if args.config else CaptureConfig()
    config = config.with_env_overrides()

    if args.host:
        config.server.host = args.host
    if args.port is not None:
        config.server.port = args.port
    if args.engine:
        config.browser.engine = BrowserEngine.parse(args.engine, default=config.browser.engine)

    if args.verbose:
        config.log_level = "DEBUG"
    elif args.quiet:
        config.log_level = "ERROR"

    return config


def default_image_path(url: str, timestamp_ms: Optional[int] = None) -> Path:
    """Name a screenshot after the host and time: ``example_com_1700000000000.png``."""
    host = urlparse(url).hostname or "capture"
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return Path(f"{host.replace('.', '_')}_{timestamp_ms}.png")


def write_result(
    result: Union[str, bytes],
    output_format: OutputFormat,
    url: str,
    output: Optional[Path],
    console: Console,
) -> Optional[Path]:
    """
    Write a capture to ``output``, or stdout for text when no path is given.

    Returns:
        The file written, or None when the result went to stdout
    """
    if isinstance(result, bytes):
        path = output or default_image_path(url)
        path.write_bytes(result)
        console.print(f"Screenshot saved to: {path}")
        return path

    if output is None:
        sys.stdout.write(result)
        sys.stdout.flush()
        return None

    output.write_text(result, encoding="utf-8")
    label = "Markdown" if output_format is OutputFormat.MARKDOWN else "HTML"
    console.print(f"{label} saved to: {output}")
    return output


def run_capture(args: argparse.Namespace, config: CaptureConfig) -> int:
    """Capture a single URL and exit."""
    console = Console(stderr=True)

    if not args.url:
        console.print("[red]Error:[/red] Missing URL or --serve flag")
        console.print("Run with --help for usage information")
        return 1

    try:
        output_format = OutputFormat.parse(args.format)
        url = normalize_url(args.url)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1

    engine = config.browser.engine

    async def run() -> Union[str, bytes]:
        async with Capturer(config) as capturer:
            if args.quiet:
                return await capturer.capture(url, output_format, engine)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task(f"[cyan]Capturing {url} as {output_format.value}...", total=None)
                return await capturer.capture(url, output_format, engine)

    try:
        result = asyncio.run(run())
        quiet_console = Console(stderr=True, quiet=args.quiet)
        write_result(result, output_format, url, args.output, quiet_console)
    except Exception as e:
        console.print(f"[red]Error:[/red] Error capturing {url}: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    return 0


def run_serve(args: argparse.Namespace, config: CaptureConfig) -> int:
    """Run the HTTP API server until interrupted."""
    from .server import run_server

    console = Console(stderr=True, quiet=args.quiet)

    console.print(f"[bold blue]webcapture[/bold blue] v{__version__}")
    console.print(f"Listening on http://{config.server.host}:{config.server.port}")
    console.print()
    console.print("Available endpoints:")
    for path, description in ENDPOINTS:
        console.out(f"  GET {path:<36} {description}")
    console.print()

    try:
        run_server(config, print_fn=console.out)
    except OSError as e:
        console.print(f"[red]Error:[/red] Could not start server: {e}")
        return 1

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.doctor:
        from .doctor import run_doctor

        return run_doctor(output_dir=args.output.parent if args.output else None)

    try:
        config = load_config(args)
    except Exception as e:
        Console(stderr=True).print(f"[red]Configuration error:[/red] {e}")
        return 1

    setup_logging(level=config.log_level, log_file=config.log_file)

    if args.serve:
        return run_serve(args, config)
    return run_capture(args, config)


if __name__ == "__main__":
    sys.exit(main())
