"""File sink — a plain text log file opened and closed by the engine.

Layout: one formatted line per record, UTF-8, no header.  The file is
opened for append or truncated on open, and flushed after every line.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileSink:
    """Managed sink owning an open file handle.

    Parameters
    ----------
    path:
        Location of the log file.  The parent directory must exist.
    append:
        Append to an existing file instead of truncating it.

    Raises
    ------
    OSError
        If the file cannot be opened.
    """

    def __init__(self, path: Path | str, *, append: bool = False) -> None:
        self._path = Path(path)
        self._append = append
        self._file = open(self._path, "a" if append else "w", encoding="utf-8")
        logger.debug(
            "FileSink: opened %s (%s)", self._path, "append" if append else "truncate"
        )

    @property
    def sink_name(self) -> str:
        return f"file:{self._path}"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._file.closed

    def accept(self, line: str) -> None:
        self._file.write(line)
        self._file.flush()

    def close(self) -> None:
        """Flush and close the handle.  Safe to call more than once."""
        if not self._file.closed:
            self._file.close()
            logger.debug("FileSink: closed %s", self._path)

    def __repr__(self) -> str:
        return f"FileSink({str(self._path)!r}, append={self._append})"
