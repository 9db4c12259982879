"""Record-to-text rendering shared by every line-oriented sink."""

from __future__ import annotations

from scrivener.models.record import Record


def format_line(record: Record, app_name: str, template: str) -> str:
    """Render *record* with *template* and terminate it with a newline.

    Available placeholders: ``app``, ``level``, ``text``, ``timestamp``,
    ``thread``, ``file``, ``function`` and ``line``.

    Examples
    --------
    >>> from scrivener.models import Record, Severity
    >>> format_line(Record(severity=Severity.WARN, text="disk low"),
    ...             "billing", "{app} | {level} | {text}")
    'billing | WARN | disk low\\n'
    """
    rendered = template.format(
        app=app_name,
        level=record.severity.label,
        text=record.text,
        timestamp=record.created_at.isoformat(),
        thread=record.thread_name,
        file=record.file,
        function=record.function,
        line=record.line,
    )
    if not rendered.endswith("\n"):
        rendered += "\n"
    return rendered
