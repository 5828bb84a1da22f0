from .command_builder import ClaudeCommandBuilder
from .execution_adapter import ClaudeExecutionAdapter
from .stream_parser import ClaudeStreamParser

__all__ = [
    "ClaudeCommandBuilder",
    "ClaudeExecutionAdapter",
    "ClaudeStreamParser",
]
