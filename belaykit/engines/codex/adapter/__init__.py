from .command_builder import CodexCommandBuilder
from .execution_adapter import CodexExecutionAdapter
from .stream_parser import CodexStreamParser

__all__ = [
    "CodexCommandBuilder",
    "CodexExecutionAdapter",
    "CodexStreamParser",
]
