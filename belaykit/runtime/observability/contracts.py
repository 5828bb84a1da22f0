from __future__ import annotations

from typing import Any, Protocol

from ...models import CompletionRecord, TraceConfig


class ObservabilityProvider(Protocol):
    """
    Sink for trace lifecycle calls and completion records.

    Implementations must be safe for concurrent use and must handle their own
    failures; nothing they raise is allowed to change a run's outcome.
    """

    def start_session(self, metadata: dict[str, Any] | None = None) -> str:
        ...

    def start_trace(self, config: TraceConfig, inputs: dict[str, Any] | None = None) -> str:
        ...

    def end_trace(self, trace_id: str, outputs: dict[str, Any] | None = None) -> None:
        ...

    def record_completion(self, record: CompletionRecord) -> None:
        ...
