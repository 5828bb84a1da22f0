"""
Data Models for belaykit.

This module defines the core Pydantic models shared by every engine adapter
and every consumer of a run. It covers:
- The normalized streaming event vocabulary (EventType, Event)
- Run lifecycle states (RunStatus) and per-run options (RunOptions)
- Observability records (CompletionRecord, TraceConfig)
- The value returned by a run (RunResult)
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """
    Enum of normalized event kinds emitted during a run.
    """
    SYSTEM = "system"                   # Session initialization
    ASSISTANT_START = "assistant_start" # A model turn is about to begin
    ASSISTANT = "assistant"             # A chunk of assistant text
    TOOL_USE = "tool_use"               # The assistant invoked a tool
    TOOL_RESULT = "tool_result"         # A tool returned its output
    RESULT = "result"                   # Terminal success
    RESULT_ERROR = "result_error"       # Terminal failure
    PHASE = "phase"                     # Caller-emitted phase boundary, never produced by adapters


TERMINAL_EVENT_TYPES = frozenset({EventType.RESULT, EventType.RESULT_ERROR})


class Event(BaseModel):
    """
    A provider-independent record of one observable occurrence during a run.

    Which fields are populated depends on `type`: session_id/subtype for
    system events, tool_* for tool events, cost/duration/turns for results,
    phase_name for caller-emitted phase markers.
    """
    type: EventType
    text: str = ""
    raw_json: Optional[Dict[str, Any]] = None

    session_id: str = ""
    subtype: str = ""

    tool_name: str = ""
    tool_id: str = ""
    tool_input: Any = None

    cost_usd: float = 0.0
    duration_ms: int = 0
    num_turns: int = 0
    is_error: bool = False

    phase_name: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENT_TYPES


EventHandler = Callable[[Event], None]


class RunStatus(str, Enum):
    """
    Lifecycle state of a single run.
    """
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"


class TraceConfig(BaseModel):
    """Configuration for a new observability trace."""
    name: str
    display_name: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CompletionRecord(BaseModel):
    """
    Immutable snapshot of one finished run, handed to observability sinks.
    """
    model_config = ConfigDict(frozen=True)

    trace_id: str = ""
    session_id: str = ""
    prompt: str = ""
    response: str = ""
    model: str = ""
    cost_usd: float = 0.0
    duration_ms: int = 0
    num_turns: int = 0
    is_error: bool = False
    input_tokens: int = 0
    output_tokens: int = 0


class RunOptions(BaseModel):
    """
    Per-run configuration. Empty values mean "not set"; which options an
    engine honours is decided by its adapter.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    model: str = ""
    max_turns: int = 0
    max_output_tokens: int = 0
    allowed_tools: List[str] = Field(default_factory=list)
    disallowed_tools: List[str] = Field(default_factory=list)
    system_prompt: str = ""
    output_stream: Any = None
    event_handler: Optional[EventHandler] = None
    trace_id: str = ""
    timeout_sec: Optional[float] = None

    def set_options(self) -> List[str]:
        """Names of options that carry a value, in declaration order."""
        names: List[str] = []
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is None or value == "" or value == [] or value == 0:
                continue
            names.append(name)
        return names


class RunResult(BaseModel):
    """
    Value returned by a successful run.
    """
    text: str
    status: RunStatus = RunStatus.COMPLETED
    session_id: str = ""
    cost_usd: float = 0.0
    duration_ms: int = 0
    num_turns: int = 0
