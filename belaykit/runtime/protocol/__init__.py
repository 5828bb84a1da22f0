from .decoder import DiagnosticBuffer, LineDecoder, decode_line
from .line_stream import LineMultiplexer, TaggedLine

__all__ = [
    "DiagnosticBuffer",
    "LineDecoder",
    "decode_line",
    "LineMultiplexer",
    "TaggedLine",
]
