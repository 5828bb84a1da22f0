from .contracts import CommandBuilder, Emit, StreamParser
from .base_execution_adapter import EngineExecutionAdapter
from .types import RunArtifacts, RunState

__all__ = [
    "CommandBuilder",
    "Emit",
    "StreamParser",
    "EngineExecutionAdapter",
    "RunArtifacts",
    "RunState",
]
