"""Entry point for the Redis health check — `redis-healthcheck` console script."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from contextlib import nullcontext

import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from redis_healthcheck.config import load_config, settings
from redis_healthcheck.health.checks import Status
from redis_healthcheck.health.engine import LogLevel, RedisHealthCheck, StatusMessage

console = Console()
err_console = Console(stderr=True)

STATUS_STYLES = {
    Status.OK: "green",
    Status.WARNING: "yellow",
    Status.ERROR: "red",
}

EXIT_CODES = {
    Status.OK: 0,
    Status.WARNING: 1,
    Status.ERROR: 2,
}


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(Panel("Starting Redis Health Check API", style="bold green"))
    uvicorn.run(
        "redis_healthcheck.api.server:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


def run_check(output: str = "table") -> int:
    """Run the health check once and print it. Returns the process exit code."""
    config = load_config()
    check = RedisHealthCheck(config=config)

    # Keep stdout clean for machine-readable output
    spinner = (
        console.status(f"[bold green]Checking Redis at {config.host}:{config.port}...")
        if output == "table" else nullcontext()
    )
    with spinner:
        messages = check.perform_checks()

    report = check.report
    if report is None:
        return _print_failure(messages, output)

    if output == "html":
        print(report.html)
    elif output == "json":
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        for result in report.results:
            style = STATUS_STYLES[result.status]
            table = Table(show_header=False, box=None, padding=(0, 2))
            table.add_column("label", style="bold")
            table.add_column("value")
            for label, value in result.details.items():
                table.add_row(str(label), str(value))
            console.print(Panel(
                table,
                title=f"[{style}]{result.title}[/{style}]",
                subtitle=result.summary,
                border_style=style,
            ))
        console.print(f"\n[bold {STATUS_STYLES[report.status]}]{report.summary}[/]")

    return EXIT_CODES[report.status]


def _print_failure(messages: list[StatusMessage], output: str) -> int:
    message = messages[0]
    if output == "json":
        print(json.dumps(
            {"messages": [m.to_dict() for m in messages], "report": None},
            indent=2, ensure_ascii=False,
        ))
    else:
        # No fragment to render; stdout stays empty for --html
        target = err_console if output == "html" else console
        style = "red" if message.level == LogLevel.ERROR else "yellow"
        target.print(Panel(message.title or message.message, title=message.message, style=style))
    return EXIT_CODES[Status.ERROR] if message.level == LogLevel.ERROR else EXIT_CODES[Status.WARNING]


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Redis cache health check")
    sub = parser.add_subparsers(dest="command")

    # Server mode
    sub.add_parser("serve", help="Start the API server")

    # One-shot check
    check_parser = sub.add_parser("check", help="Run the health check once")
    fmt = check_parser.add_mutually_exclusive_group()
    fmt.add_argument("--html", action="store_const", const="html", dest="output",
                     help="Print the HTML fragment")
    fmt.add_argument("--json", action="store_const", const="json", dest="output",
                     help="Print the check data as JSON")

    args = parser.parse_args()

    if args.command == "serve":
        run_server()
    elif args.command == "check":
        sys.exit(run_check(args.output or "table"))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
