"""Clover command line entry point."""

from __future__ import annotations

import asyncio
import contextlib
import signal

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from clover.auth import acquire_token, extract_auth_payload
from clover.concurrency import wait_until_stopped
from clover.config import Settings, load_settings
from clover.errors import AuthError, ExtractionError, RunInterrupted
from clover.http import HttpClient
from clover.logging_utils import configure_logging
from clover.orchestrator import Orchestrator, RunSummary, parse_session_count

console = Console(markup=True, highlight=False)

app = typer.Typer(
    name="clover",
    help="Play mini-app game sessions concurrently from a launch URL.",
    add_completion=False,
    rich_markup_mode="rich",
)


def _install_interrupt_handler(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    # Unsupported off the main thread and on Windows; KeyboardInterrupt covers those.
    with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
        loop.add_signal_handler(signal.SIGINT, stop_event.set)


async def _play(http: HttpClient, payload: str, count: int, settings: Settings) -> RunSummary:
    token = await acquire_token(http, payload, settings)
    console.print("[green]Token successfully retrieved.[/green]")
    console.print(f"[cyan]Starting {count} games in parallel...[/cyan]")
    return await Orchestrator(http, token, settings).run(count)


async def run_from_payload(payload: str, count: int, settings: Settings) -> RunSummary:
    """Acquire a token and run ``count`` sessions, abandoning them on SIGINT."""
    stop_event = asyncio.Event()
    _install_interrupt_handler(stop_event)
    async with HttpClient(settings) as http:
        return await wait_until_stopped(_play(http, payload, count, settings), stop_event)


def _interrupted() -> typer.Exit:
    console.print("\n[yellow]Received interrupt signal. Stopping...[/yellow]")
    return typer.Exit(0)


@app.command()
def play(
    url: str = typer.Argument(..., help="Mini-app launch URL carrying #tgWebAppData=..."),
    count: str | None = typer.Argument(None, help="Number of concurrent game sessions (default 1)"),
    pacing: float | None = typer.Option(None, "--pacing", min=0, help="Override the gameplay wait in seconds"),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
) -> None:
    """Exchange the URL's auth payload for a token and play COUNT games concurrently."""
    try:
        _play_command(url, count, pacing, log_level)
    except KeyboardInterrupt:
        raise _interrupted() from None


def _play_command(url: str, count: str | None, pacing: float | None, log_level: str | None) -> None:
    settings = load_settings(pacing_seconds=pacing, log_level=log_level)
    configure_logging(profile="console", level=settings.log_level)

    try:
        payload = extract_auth_payload(url)
    except ExtractionError as exc:
        console.print(f"[red]Failed to extract authentication data from URL: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    sessions = parse_session_count(count)
    try:
        summary = asyncio.run(run_from_payload(payload, sessions, settings))
    except RunInterrupted:
        raise _interrupted() from None
    except AuthError as exc:
        logger.error("run.aborted error={}", exc)
        console.print(f"[red]Failed to get authentication token: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    console.print(f"[green]Games completed! Success: {summary}[/green]")


def main() -> None:
    app()
