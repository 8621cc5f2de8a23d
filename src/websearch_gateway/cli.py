#!/usr/bin/env python3
"""Command-line interface for websearch-gateway.

Usage:
    # Single search
    python -m websearch_gateway "python asyncio tutorial"

    # More results, JSON output
    python -m websearch_gateway --max-results 10 --format json "rust borrow checker"

    # Interactive mode
    python -m websearch_gateway --interactive

    # HTTP server for the desktop frontend
    python -m websearch_gateway --serve --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import TextIO

from websearch_gateway import __version__
from websearch_gateway.config import settings
from websearch_gateway.gateway.search_gateway import SearchError, SearchGateway
from websearch_gateway.types.search import SearchOutcome

CLI_CLIENT_ID = "cli"

# =============================================================================
# Output Formatting
# =============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    BOLD = "\033[1m"
    DIM = "\033[2m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RESET = "\033[0m"


def supports_color() -> bool:
    """Check if terminal supports colors."""
    return (
        hasattr(sys.stdout, "isatty")
        and sys.stdout.isatty()
        and os.environ.get("TERM") != "dumb"
        and os.environ.get("NO_COLOR") is None
    )


def colorize(text: str, color: str) -> str:
    """Apply color if supported."""
    if supports_color():
        return f"{color}{text}{Colors.RESET}"
    return text


def format_outcome_pretty(outcome: SearchOutcome, file: TextIO = sys.stdout) -> None:
    """Format search results for human-readable terminal output."""
    source = "cache" if outcome.cached else "web"
    print(colorize("=" * 60, Colors.DIM), file=file)
    print(
        colorize(f"{outcome.result_count} result(s) for: {outcome.query} ({source})", Colors.BOLD),
        file=file,
    )
    print(colorize("=" * 60, Colors.DIM), file=file)

    if not outcome.results:
        print(colorize("No results found.", Colors.YELLOW), file=file)
        return

    for index, result in enumerate(outcome.results, start=1):
        print(file=file)
        print(f"{index}. {colorize(result.title, Colors.CYAN + Colors.BOLD)}", file=file)
        print(colorize(f"   {result.display_url}  {result.url}", Colors.DIM), file=file)
        print(f"   {result.snippet}", file=file)


def format_outcome_json(outcome: SearchOutcome, file: TextIO = sys.stdout) -> None:
    """Format search results as JSON, in the same shape the HTTP API returns."""
    payload = {
        "success": True,
        "query": outcome.query,
        "results": [result.model_dump(by_alias=True) for result in outcome.results],
        "cached": outcome.cached,
        "resultCount": outcome.result_count,
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False), file=file)


def _output_outcome(outcome: SearchOutcome, output_format: str) -> None:
    if output_format == "json":
        format_outcome_json(outcome)
    else:
        format_outcome_pretty(outcome)


# =============================================================================
# Execution Modes
# =============================================================================


def run_single_search(
    query: str,
    max_results: int | None = None,
    output_format: str = "pretty",
    gateway: SearchGateway | None = None,
) -> int:
    """Run one search and display the results.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    gateway = gateway or SearchGateway()
    try:
        outcome = asyncio.run(gateway.search(query, max_results=max_results, client_id=CLI_CLIENT_ID))
    except KeyboardInterrupt:
        print("\n\nInterrupted.", file=sys.stderr)
        return 130
    except SearchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _output_outcome(outcome, output_format)
    return 0


def run_interactive(max_results: int | None = None, gateway: SearchGateway | None = None) -> int:
    """Run in interactive REPL mode.

    One gateway serves the whole session, so repeated queries hit the cache.

    Returns:
        Exit code (0 for normal exit).
    """
    gateway = gateway or SearchGateway()
    print(colorize("\nWeb search interactive mode", Colors.CYAN + Colors.BOLD))
    print("Commands: 'quit' to exit, 'clear' to drop the cache, 'status' for cache info")
    print(colorize("-" * 44, Colors.DIM))

    while True:
        try:
            query = input(colorize("\n> ", Colors.GREEN)).strip()
        except KeyboardInterrupt:
            print(colorize("\n\nInterrupted. Type 'quit' to exit.", Colors.YELLOW))
            continue
        except EOFError:
            print(colorize("\nGoodbye!", Colors.CYAN))
            break

        if not query:
            continue

        command = query.lower()
        if command in ("quit", "exit", "q"):
            print(colorize("\nGoodbye!", Colors.CYAN))
            break
        if command == "clear":
            gateway.clear_cache()
            print("Cache cleared.")
            continue
        if command == "status":
            print(json.dumps(gateway.get_status(), indent=2))
            continue

        run_single_search(query, max_results=max_results, gateway=gateway)

    return 0


def run_server(host: str | None = None, port: int | None = None) -> int:
    """Serve the HTTP API with uvicorn until interrupted."""
    import uvicorn

    from websearch_gateway.api.server import app

    host = host or settings.api_host
    port = port or settings.api_port
    print(f"Starting web search gateway on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
    return 0


# =============================================================================
# Main Entry Point
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        prog="websearch-gateway",
        description="Privacy-first DuckDuckGo web search for local LLM apps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s "python asyncio tutorial"
  %(prog)s --max-results 10 --format json "rust borrow checker" > results.json
  %(prog)s --interactive
  %(prog)s --serve --port 8000
        """,
    )

    parser.add_argument("query", nargs="?", help="Search terms")
    parser.add_argument(
        "-n",
        "--max-results",
        type=int,
        default=None,
        help=f"Maximum number of results (default: {settings.default_max_results})",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["pretty", "json"],
        default="pretty",
        help="Output format (default: pretty)",
    )
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Run in interactive mode (REPL)",
    )
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API server")
    parser.add_argument("--host", default=None, help="Server host (with --serve)")
    parser.add_argument("--port", type=int, default=None, help="Server port (with --serve)")
    parser.add_argument("--version", action="version", version=f"websearch-gateway {__version__}")

    args = parser.parse_args(argv)

    if args.max_results is not None and args.max_results < 1:
        parser.error("--max-results must be a positive integer")

    if args.serve:
        return run_server(host=args.host, port=args.port)
    elif args.interactive:
        return run_interactive(max_results=args.max_results)
    elif args.query:
        return run_single_search(
            args.query,
            max_results=args.max_results,
            output_format=args.format,
        )
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
