"""
Trace tree observability provider.

Builds a trace → phase → tool_call tree from completion records and
normalized events, and writes it as one JSON file per trace when the trace
ends. Compose its event handler next to any other handler:

    writer = TraceWriterProvider()
    adapter = CodexExecutionAdapter(
        observability=writer,
        event_handler=compose_handlers(EventLogger(), writer.event_handler()),
    )
    trace_id = writer.start_trace(TraceConfig(name="extract"))
    await adapter.run(prompt, trace_id=trace_id)
    writer.end_trace(trace_id)
"""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from belaykit.config import config
from belaykit.models import CompletionRecord, Event, EventHandler, EventType, TraceConfig
from belaykit.pricing import ModelPricing, estimate_tokens
from belaykit.services.event_logger import classify_event_tokens

logger = logging.getLogger(__name__)


def short_id() -> str:
    return uuid.uuid4().hex[:8]


class TraceNode(BaseModel):
    id: str
    node_type: str
    agent_name: str
    model: str = ""
    duration_ms: int = 0
    cost_usd: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0
    context_window: int = 0
    children: List["TraceNode"] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "node_type": self.node_type,
            "agent_name": self.agent_name,
        }
        if self.model:
            payload["model"] = self.model
        payload["duration_ms"] = self.duration_ms
        payload["cost_usd"] = self.cost_usd
        payload["input_tokens"] = self.input_tokens
        payload["output_tokens"] = self.output_tokens
        if self.context_window:
            payload["context_window"] = self.context_window
        if self.children:
            payload["children"] = [child.to_payload() for child in self.children]
        return payload


class TraceWriterProvider:
    """ObservabilityProvider that persists trace trees as JSON files."""

    def __init__(
        self,
        directory: str | Path | None = None,
        *,
        pricing: ModelPricing | None = None,
        context_window: int = 0,
    ) -> None:
        self.directory = Path(directory or config.TRACE.DIR)
        self.pricing = pricing or ModelPricing()
        self.context_window = context_window

        self._lock = threading.Lock()
        self._root: Optional[TraceNode] = None
        self._current_phase: Optional[TraceNode] = None
        self._start_time = 0.0
        self._phase_start = 0.0
        self._tool_start: Dict[str, float] = {}
        self._tool_nodes: Dict[str, TraceNode] = {}
        self._input_tokens = 0
        self._output_tokens = 0

    def start_session(self, metadata: dict[str, Any] | None = None) -> str:
        _ = metadata
        return short_id()

    def start_trace(self, config: TraceConfig, inputs: dict[str, Any] | None = None) -> str:
        _ = inputs
        with self._lock:
            trace_id = short_id()
            self._start_time = time.monotonic()
            self._root = TraceNode(id=trace_id, node_type="trace", agent_name=config.name)
            self._current_phase = None
            self._tool_start = {}
            self._tool_nodes = {}
            self._input_tokens = 0
            self._output_tokens = 0
            return trace_id

    def end_trace(self, trace_id: str, outputs: dict[str, Any] | None = None) -> None:
        _ = outputs
        with self._lock:
            if self._root is None:
                return
            self._finalize_current_phase()
            self._root.duration_ms = int((time.monotonic() - self._start_time) * 1000)
            self._write_trace(trace_id, self._root)
            self._root = None
            self._current_phase = None

    def record_completion(self, record: CompletionRecord) -> None:
        with self._lock:
            if self._root is None:
                return
            if self._current_phase is None:
                self._open_phase("default", started=time.monotonic() - record.duration_ms / 1000)

            phase = self._current_phase
            assert phase is not None
            phase.model = record.model
            phase.duration_ms += record.duration_ms

            in_tok, out_tok = record.input_tokens, record.output_tokens
            if in_tok == 0 and out_tok == 0:
                in_tok, out_tok = self._input_tokens, self._output_tokens
            phase.input_tokens += in_tok
            phase.output_tokens += out_tok

            cost = record.cost_usd
            if cost == 0 and (in_tok > 0 or out_tok > 0):
                cost = self.pricing.cost(in_tok, out_tok)
            phase.cost_usd += cost

    def event_handler(self) -> EventHandler:
        """Handler capturing phase markers and tool timings for the open trace."""

        def handle(event: Event) -> None:
            with self._lock:
                if self._root is None:
                    return
                inp, out = classify_event_tokens(event)
                if event.type == EventType.RESULT_ERROR:
                    inp = estimate_tokens(event.text)
                self._input_tokens += inp
                self._output_tokens += out

                if event.type == EventType.PHASE:
                    self._handle_phase(event)
                elif event.type == EventType.TOOL_USE:
                    self._handle_tool_use(event)
                elif event.type == EventType.TOOL_RESULT:
                    self._handle_tool_result(event)

        return handle

    def _open_phase(self, name: str, *, started: float) -> None:
        assert self._root is not None
        self._current_phase = TraceNode(id=short_id(), node_type="phase", agent_name=name)
        self._phase_start = started
        self._root.children.append(self._current_phase)

    def _handle_phase(self, event: Event) -> None:
        assert self._root is not None
        self._finalize_current_phase()
        self._root.children.append(
            TraceNode(id=short_id(), node_type="marker", agent_name=f"→ {event.phase_name}")
        )
        self._open_phase(event.phase_name, started=time.monotonic())

    def _handle_tool_use(self, event: Event) -> None:
        if self._current_phase is None:
            self._open_phase("default", started=time.monotonic())
        assert self._current_phase is not None
        node = TraceNode(
            id=short_id(),
            node_type="tool_call",
            agent_name=event.tool_name,
            input_tokens=self._input_tokens,
            output_tokens=self._output_tokens,
            context_window=self.context_window,
        )
        self._tool_start[event.tool_id] = time.monotonic()
        self._tool_nodes[event.tool_id] = node
        self._current_phase.children.append(node)

    def _handle_tool_result(self, event: Event) -> None:
        node = self._tool_nodes.pop(event.tool_id, None)
        if node is None:
            return
        started = self._tool_start.pop(event.tool_id, None)
        if started is not None:
            node.duration_ms = int((time.monotonic() - started) * 1000)

    def _finalize_current_phase(self) -> None:
        phase = self._current_phase
        if phase is None:
            return
        if phase.duration_ms == 0 and self._phase_start:
            phase.duration_ms = int((time.monotonic() - self._phase_start) * 1000)

    def _write_trace(self, trace_id: str, root: TraceNode) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self.directory / f"{trace_id}.json"
            path.write_text(json.dumps(root.to_payload(), indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError:
            logger.warning("failed to write trace %s to %s", trace_id, self.directory, exc_info=True)
