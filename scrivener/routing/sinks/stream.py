"""Stream sink — writes lines to a text stream owned by the caller.

The engine never opens or closes the wrapped stream.  The caller must keep
it alive for at least as long as the engine may write to it.
"""

from __future__ import annotations

from typing import TextIO


class StreamSink:
    """External sink around a caller-owned text stream.

    Parameters
    ----------
    stream:
        Any object with a ``write(str)`` method; ``flush()`` is called
        after every line when present.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    @property
    def sink_name(self) -> str:
        name = getattr(self._stream, "name", None)
        return f"stream:{name}" if name else f"stream:{type(self._stream).__name__}"

    @property
    def stream(self) -> TextIO:
        return self._stream

    def accept(self, line: str) -> None:
        self._stream.write(line)
        flush = getattr(self._stream, "flush", None)
        if flush is not None:
            flush()

    def __repr__(self) -> str:
        return f"StreamSink({self.sink_name})"
