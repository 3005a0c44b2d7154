"""
Diagnostics sink — funnel build-engine output into a caller's writer.

The caller supplies any object with a ``write(str)`` method (a file, an
``io.StringIO``, a script host's error writer). ``LineSink`` buffers partial
output and forwards whole lines only, each terminated by ``\\n``.
"""
from __future__ import annotations

import traceback
from typing import Optional, Protocol


class Writer(Protocol):
    def write(self, text: str) -> object: ...


class LineSink:
    """Line-buffered adapter over a writer-like object."""

    def __init__(self, writer: Writer):
        self.writer = writer
        self._pending = ""
        self.closed = False

    def write(self, text: str) -> None:
        if not text:
            return
        self._pending += text.replace("\r\n", "\n")
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self.println(line)

    def println(self, line: str) -> None:
        self.writer.write(line + "\n")

    def flush(self) -> None:
        """Emit any trailing partial line."""
        if self._pending:
            line, self._pending = self._pending, ""
            self.println(line)
        flush = getattr(self.writer, "flush", None)
        if callable(flush):
            flush()

    def close(self) -> None:
        """Flush the tail. The underlying writer stays open; the caller owns it."""
        if not self.closed:
            self.flush()
            self.closed = True


def make_sink(writer: Optional[Writer]) -> Optional[LineSink]:
    return None if writer is None else LineSink(writer)


def report_exception(exc: BaseException, writer: Writer) -> None:
    """Write a full traceback for *exc* to *writer*."""
    text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    writer.write(text)
    flush = getattr(writer, "flush", None)
    if callable(flush):
        flush()
