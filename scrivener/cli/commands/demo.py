"""``scrivener demo`` — exercise the engine from several producer threads.

Each thread writes one record per severity through a :class:`Channel`;
the engine fans them out to standard output (and optionally a file), then
drains and shuts down.  A summary panel is printed at the end.
"""

from __future__ import annotations

import sys
import threading
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from scrivener.callsite import Channel
from scrivener.core.engine import Engine
from scrivener.models.severity import Severity

console = Console(stderr=True)


def _produce(channel: Channel, worker: int) -> None:
    for severity in Severity:
        channel.log(severity, "worker ", worker, " says ", severity.label.lower())


def demo_cmd(
    threads: int = typer.Option(
        3, "--threads", "-t", min=1, help="Number of producer threads."
    ),
    min_level: str = typer.Option(
        "trace", "--min-level", "-l", help="Minimum severity to record."
    ),
    app_name: str = typer.Option(
        "scrivener-demo", "--app-name", help="Application name shown in each line."
    ),
    log_file: Path = typer.Option(
        None, "--file", "-f", help="Also write every record to this file."
    ),
) -> None:
    """Run several producer threads against one engine and report the outcome."""
    try:
        engine = Engine(app_name=app_name, min_level=min_level)
    except ValueError as exc:
        console.print(f"[red]Invalid option:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    engine.add_output(sys.stdout)
    if log_file is not None and not engine.add_output(log_file):
        console.print(f"[red]Could not open log file:[/red] {log_file}")
        raise typer.Exit(code=1)

    channel = Channel(engine)
    engine.start()
    try:
        workers = [
            threading.Thread(target=_produce, args=(channel, i), name=f"producer-{i}")
            for i in range(threads)
        ]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()
    finally:
        engine.shutdown()

    if engine.fault is not None:
        console.print(f"[red]Engine faulted:[/red] {engine.fault!r}")
        raise typer.Exit(code=2)

    console.print(
        Panel(
            f"[bold]Threads:[/bold] {threads}\n"
            f"[bold]Minimum level:[/bold] {Severity.parse(min_level).label}\n"
            f"[bold]Records written:[/bold] {engine.dispatched}"
            + (f"\n[bold]File:[/bold] {log_file}" if log_file else ""),
            title="Scrivener demo",
            border_style="cyan",
        )
    )
