"""Scrivener concurrency core: record queue, writer thread and engine."""
