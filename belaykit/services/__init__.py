from .composite import compose_handlers
from .event_logger import EventLogger
from .freeplay import FreeplayProvider
from .trace_writer import TraceWriterProvider

__all__ = ["EventLogger", "FreeplayProvider", "TraceWriterProvider", "compose_handlers"]
