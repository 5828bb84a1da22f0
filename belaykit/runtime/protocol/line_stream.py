from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from ...config import config

logger = logging.getLogger(__name__)

_CLOSED = object()


@dataclass(frozen=True)
class TaggedLine:
    """One newline-delimited record read from the engine process."""

    body: bytes
    from_stderr: bool


class LineMultiplexer:
    """
    Fan-in of the stdout and stderr pipes into one async stream of tagged lines.

    One reader task per pipe feeds a bounded queue; the stream ends once both
    readers have reached end-of-file (or failed). Order is preserved within a
    pipe, not across pipes.
    """

    def __init__(
        self,
        stdout: asyncio.StreamReader | None,
        stderr: asyncio.StreamReader | None,
        *,
        max_line_bytes: int | None = None,
        queue_size: int | None = None,
        prefix: str = "Engine",
    ) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._max_line_bytes = int(max_line_bytes or config.STREAM.MAX_LINE_BYTES)
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=int(queue_size or config.STREAM.QUEUE_SIZE))
        self._prefix = prefix
        self._readers: list[asyncio.Task[None]] = []
        self._closer: asyncio.Task[None] | None = None
        self._exhausted = False

    def start(self) -> "LineMultiplexer":
        if self._closer is not None:
            return self
        self._readers = [
            asyncio.create_task(self._read(self._stdout, False)),
            asyncio.create_task(self._read(self._stderr, True)),
        ]
        self._closer = asyncio.create_task(self._close_when_drained())
        return self

    def __aiter__(self) -> "LineMultiplexer":
        return self.start()

    async def __anext__(self) -> TaggedLine:
        if self._exhausted:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._exhausted = True
            raise StopAsyncIteration
        return item

    async def aclose(self) -> None:
        """Stop both readers and discard anything still buffered."""
        tasks = [*self._readers, *([self._closer] if self._closer is not None else [])]
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=float(config.PROCESS.READER_JOIN_SECONDS))
            if pending:
                logger.warning("[%s] %d pipe reader(s) did not stop in time", self._prefix, len(pending))
        while not self._queue.empty():
            self._queue.get_nowait()
        self._exhausted = True

    async def _close_when_drained(self) -> None:
        await asyncio.gather(*self._readers, return_exceptions=True)
        await self._queue.put(_CLOSED)

    async def _read(self, stream: asyncio.StreamReader | None, from_stderr: bool) -> None:
        if stream is None:
            return
        tag = "ERR" if from_stderr else "OUT"
        while True:
            try:
                raw = await stream.readline()
            except ValueError:
                # StreamReader drops the oversized record before raising
                logger.warning("[%s %s] line exceeds stream limit; skipped", self._prefix, tag)
                continue
            except OSError:
                logger.warning("[%s %s] pipe read failed; reader stopped", self._prefix, tag, exc_info=True)
                return
            if not raw:
                return
            if len(raw) > self._max_line_bytes:
                logger.warning(
                    "[%s %s] line of %d bytes exceeds %d; skipped",
                    self._prefix,
                    tag,
                    len(raw),
                    self._max_line_bytes,
                )
                continue
            await self._queue.put(TaggedLine(body=raw.rstrip(b"\r\n"), from_stderr=from_stderr))
