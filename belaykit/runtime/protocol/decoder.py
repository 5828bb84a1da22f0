from __future__ import annotations

import json
import logging
from typing import Any

from .line_stream import TaggedLine

logger = logging.getLogger(__name__)


def decode_line(body: bytes) -> dict[str, Any] | None:
    """Decode one line as a JSON object; anything else yields None."""
    text = body.decode("utf-8", errors="replace").strip()
    if not text:
        return None
    try:
        payload = json.loads(text)
    except (ValueError, RecursionError):
        # deeply nested input exhausts the parser stack
        return None
    if isinstance(payload, dict):
        return payload
    return None


class DiagnosticBuffer:
    """Raw text of stderr lines that were not structured events."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def append(self, text: str) -> None:
        self._lines.append(text)

    def text(self) -> str:
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"

    def __bool__(self) -> bool:
        return bool(self._lines)


class LineDecoder:
    """Tolerant per-line decoder; undecodable lines are skipped, never raised."""

    def __init__(self) -> None:
        self.diagnostics = DiagnosticBuffer()
        self.skipped = 0

    def feed(self, line: TaggedLine) -> dict[str, Any] | None:
        payload = decode_line(line.body)
        if payload is not None:
            return payload
        text = line.body.decode("utf-8", errors="replace")
        if not text.strip():
            return None
        self.skipped += 1
        if line.from_stderr:
            self.diagnostics.append(text)
        else:
            logger.debug("skipping non-JSON stdout line: %.200s", text)
        return None
