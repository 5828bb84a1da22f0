import asyncio

import pytest

from belaykit.runtime.protocol.line_stream import LineMultiplexer, TaggedLine


def _reader(*chunks: bytes, limit: int = 2**16) -> asyncio.StreamReader:
    reader = asyncio.StreamReader(limit=limit)
    for chunk in chunks:
        reader.feed_data(chunk)
    reader.feed_eof()
    return reader


async def _collect(mux: LineMultiplexer) -> list[TaggedLine]:
    return [line async for line in mux]


@pytest.mark.asyncio
async def test_lines_from_both_pipes_are_tagged():
    stdout = _reader(b'{"a":1}\n{"a":2}\n')
    stderr = _reader(b"warning: slow\n")
    lines = await _collect(LineMultiplexer(stdout, stderr))

    out = [line.body for line in lines if not line.from_stderr]
    err = [line.body for line in lines if line.from_stderr]
    assert out == [b'{"a":1}', b'{"a":2}']
    assert err == [b"warning: slow"]


@pytest.mark.asyncio
async def test_order_is_preserved_within_one_pipe():
    body = b"".join(f"line-{i}\n".encode() for i in range(200))
    lines = await _collect(LineMultiplexer(_reader(body), _reader(), queue_size=4))
    assert [line.body for line in lines] == [f"line-{i}".encode() for i in range(200)]


@pytest.mark.asyncio
async def test_final_line_without_newline_and_crlf():
    lines = await _collect(LineMultiplexer(_reader(b"first\r\nlast"), _reader()))
    assert [line.body for line in lines] == [b"first", b"last"]


@pytest.mark.asyncio
async def test_overlong_line_is_skipped_and_reading_continues():
    stdout = _reader(b"x" * 64 + b"\n" + b"ok\n")
    lines = await _collect(LineMultiplexer(stdout, _reader(), max_line_bytes=16))
    assert [line.body for line in lines] == [b"ok"]


@pytest.mark.asyncio
async def test_line_over_stream_limit_is_skipped():
    stdout = _reader(b"y" * 200 + b"\n" + b"after\n", limit=32)
    lines = await _collect(LineMultiplexer(stdout, _reader()))
    assert lines[-1].body == b"after"
    assert all(len(line.body) <= 32 for line in lines)


@pytest.mark.asyncio
async def test_missing_pipe_is_treated_as_empty():
    lines = await _collect(LineMultiplexer(_reader(b"only\n"), None))
    assert lines == [TaggedLine(body=b"only", from_stderr=False)]


@pytest.mark.asyncio
async def test_aclose_stops_readers_on_open_pipes():
    stdout = asyncio.StreamReader()
    stdout.feed_data(b"first\n")
    stderr = asyncio.StreamReader()
    mux = LineMultiplexer(stdout, stderr).start()

    first = await mux.__anext__()
    assert first.body == b"first"

    await asyncio.wait_for(mux.aclose(), timeout=2)
    with pytest.raises(StopAsyncIteration):
        await mux.__anext__()


class _FailingReader:
    """Yields the given lines, then fails the way a broken pipe does."""

    def __init__(self, *lines: bytes) -> None:
        self._lines = list(lines)

    async def readline(self) -> bytes:
        if self._lines:
            return self._lines.pop(0)
        raise OSError("read failed")


@pytest.mark.asyncio
async def test_pipe_error_stops_that_reader_only(caplog):
    stderr = _reader(b"err-1\n", b"err-2\n")
    with caplog.at_level("WARNING"):
        lines = await asyncio.wait_for(
            _collect(LineMultiplexer(_FailingReader(b"first\n"), stderr, prefix="Codex")),
            timeout=2,
        )

    assert [line.body for line in lines if not line.from_stderr] == [b"first"]
    assert [line.body for line in lines if line.from_stderr] == [b"err-1", b"err-2"]
    assert "[Codex OUT] pipe read failed" in caplog.text
