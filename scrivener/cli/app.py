"""Main Typer application — imports and registers all CLI commands.

Entry point: ``scrivener`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer

from scrivener.cli.commands.demo import demo_cmd
from scrivener.cli.commands.pipe import pipe_cmd
from scrivener.config import EngineSettings

app = typer.Typer(
    name="scrivener",
    help="Scrivener: in-process asynchronous logging engine.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="demo", help="Log one record per severity from several threads.")(demo_cmd)
app.command(name="pipe", help="Log each line of standard input through an engine.")(pipe_cmd)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show the engine's own diagnostics."
    ),
) -> None:
    """Configure stdlib logging for the engine's internal diagnostics."""
    level = "DEBUG" if verbose else EngineSettings().log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
