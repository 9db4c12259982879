"""``scrivener pipe`` — log standard input line by line.

Every input line becomes one record at ``--level``.  Records go to standard
output unless ``--no-stdout`` is given, to ``--file`` when set, and to the
system log with ``--syslog``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console

from scrivener.core.engine import Engine, EngineFaultedError
from scrivener.models.record import Record
from scrivener.models.severity import Severity

console = Console(stderr=True)


def pipe_cmd(
    level: str = typer.Option(
        "notify", "--level", "-L", help="Severity given to every input line."
    ),
    min_level: str = typer.Option(
        "notify", "--min-level", "-l", help="Minimum severity to record."
    ),
    app_name: str = typer.Option(
        "scrivener", "--app-name", help="Application name shown in each line."
    ),
    log_file: Path = typer.Option(
        None, "--file", "-f", help="Write records to this file."
    ),
    append: bool = typer.Option(
        False, "--append", "-a", help="Append to --file instead of truncating it."
    ),
    to_stdout: bool = typer.Option(
        True, "--stdout/--no-stdout", help="Write records to standard output."
    ),
    use_syslog: bool = typer.Option(
        False, "--syslog", help="Also send records to the system log."
    ),
) -> None:
    """Read standard input and log each line through a fresh engine."""
    try:
        severity = Severity.parse(level)
        engine = Engine(app_name=app_name, min_level=min_level)
    except ValueError as exc:
        console.print(f"[red]Invalid option:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    if to_stdout:
        engine.add_output(sys.stdout)
    if log_file is not None and not engine.add_output(log_file, append=append):
        console.print(f"[red]Could not open log file:[/red] {log_file}")
        raise typer.Exit(code=1)
    if use_syslog:
        engine.enable_syslog()

    engine.start()
    try:
        for raw in sys.stdin:
            engine.write(Record(severity=severity, text=raw.rstrip("\n")))
    except EngineFaultedError as exc:
        console.print(f"[red]Engine faulted:[/red] {exc.fault!r}")
        raise typer.Exit(code=2) from exc
    finally:
        engine.shutdown()

    if engine.fault is not None:
        console.print(f"[red]Engine faulted:[/red] {engine.fault!r}")
        raise typer.Exit(code=2)
