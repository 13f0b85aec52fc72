"""Diagnostic sink for malformed inbound payloads."""

import sys
from typing import Protocol, TextIO

# Prefix of the single-line record written when an emit payload fails to decode
DECODE_ERROR_PREFIX = "json.Unmarshal()"


class DiagnosticSink(Protocol):
    def write(self, line: str) -> None: ...


class StderrSink:
    """Writes one line per diagnostic to standard error (or a given stream)."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    def write(self, line: str) -> None:
        stream = self._stream or sys.stderr
        stream.write(line.rstrip("\n") + "\n")
        stream.flush()


def decode_error_line(reason: str) -> str:
    """Format a decode failure as a single diagnostic line."""
    return f"{DECODE_ERROR_PREFIX} {' '.join(reason.split())}"
