from belaykit.runtime.protocol.decoder import LineDecoder, decode_line
from belaykit.runtime.protocol.line_stream import TaggedLine


def test_decode_line_accepts_objects_only():
    assert decode_line(b'{"type":"result"}') == {"type": "result"}
    assert decode_line(b"  {\"a\": 1}  ") == {"a": 1}
    assert decode_line(b"[1, 2]") is None
    assert decode_line(b'"text"') is None
    assert decode_line(b"not json") is None
    assert decode_line(b"") is None


def test_decoder_routes_stderr_garbage_to_diagnostics():
    decoder = LineDecoder()
    assert decoder.feed(TaggedLine(b"Error: auth failed", from_stderr=True)) is None
    assert decoder.feed(TaggedLine(b"retrying", from_stderr=True)) is None
    assert decoder.diagnostics.text() == "Error: auth failed\nretrying\n"
    assert decoder.skipped == 2


def test_decoder_skips_stdout_garbage_without_diagnostics():
    decoder = LineDecoder()
    assert decoder.feed(TaggedLine(b"Loading...", from_stderr=False)) is None
    assert not decoder.diagnostics
    assert decoder.diagnostics.text() == ""
    assert decoder.skipped == 1


def test_decoder_returns_json_from_stderr():
    decoder = LineDecoder()
    payload = decoder.feed(TaggedLine(b'{"type":"turn.started"}', from_stderr=True))
    assert payload == {"type": "turn.started"}
    assert not decoder.diagnostics


def test_decoder_ignores_blank_lines():
    decoder = LineDecoder()
    assert decoder.feed(TaggedLine(b"   ", from_stderr=True)) is None
    assert decoder.skipped == 0
    assert not decoder.diagnostics


def test_decoder_skips_deeply_nested_lines():
    decoder = LineDecoder()
    assert decoder.feed(TaggedLine(b"[" * 200_000, from_stderr=False)) is None
    assert decoder.feed(TaggedLine(b'{"a":' * 100_000, from_stderr=True)) is None
    assert decoder.skipped == 2
    assert decoder.feed(TaggedLine(b'{"type":"turn.started"}', from_stderr=False)) == {"type": "turn.started"}


def test_decode_line_tolerates_out_of_range_literals():
    assert decode_line(b'{"duration_ms": 1e999}') == {"duration_ms": float("inf")}
    assert decode_line(b"{\"n\": " + b"9" * 5000 + b"}") is None
