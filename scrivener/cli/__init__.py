"""Scrivener CLI — Typer-based command-line interface.

Provides the ``scrivener`` command with subcommands for a multi-threaded
demo run and for piping standard input through an engine into streams,
files and the system log.

Summaries use Rich for formatted terminal display.
"""
