from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable

from belaykit.engines.claude.models import DEFAULT_CONTEXT_WINDOW
from belaykit.models import Event, EventType
from belaykit.pricing import ModelPricing, estimate_tokens

MAX_TOOL_INPUT_LEN = 200
MAX_TOOL_RESULT_LEN = 500
THERMOBAR_WIDTH = 20


def classify_event_tokens(event: Event) -> tuple[int, int]:
    """Estimated (input, output) tokens an event adds to the context."""
    if event.type == EventType.ASSISTANT:
        return 0, estimate_tokens(event.text)
    if event.type == EventType.TOOL_USE:
        return 0, estimate_tokens(event.tool_name) + estimate_tokens(_tool_input_text(event.tool_input))
    if event.type == EventType.TOOL_RESULT:
        return estimate_tokens(event.text), 0
    if event.type == EventType.SYSTEM:
        return estimate_tokens(event.subtype) + estimate_tokens(event.session_id), 0
    if event.type in (EventType.ASSISTANT_START, EventType.PHASE):
        return 0, 0
    return estimate_tokens(event.text), 0


def format_token_count(n: int) -> str:
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return str(n)


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    return f"{seconds / 60:.1f}m"


def format_thermobar(total_tokens: int, context_window: int) -> str:
    pct = total_tokens / context_window * 100 if context_window > 0 else 0.0
    pct = max(0.0, min(pct, 100.0))
    filled = min(int(pct / 100 * THERMOBAR_WIDTH), THERMOBAR_WIDTH)
    return f"[{'#' * filled}{'.' * (THERMOBAR_WIDTH - filled)}] {pct:.1f}%"


def build_tag_prefix(tag: str, model: str, agent: str) -> str:
    parts = [tag]
    if model:
        parts.append(model)
    if agent:
        parts.append(agent)
    return "[" + ":".join(parts) + "]"


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def _tool_input_text(tool_input: Any) -> str:
    if tool_input is None:
        return ""
    if isinstance(tool_input, str):
        return tool_input
    try:
        return json.dumps(tool_input, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return str(tool_input)


class EventLogger:
    """
    Event handler that renders normalized events as log lines.

    Tool activity is indented under the assistant turn header; when token
    tracking is on, headers and results carry a context-window bar plus
    estimated token counts, cost and elapsed time. Safe to share between
    concurrent runs.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        system: bool = True,
        assistant: bool = True,
        tool_use: bool = True,
        tool_result: bool = True,
        result: bool = True,
        tokens: bool = True,
        content: bool = True,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
        agent_name: str = "",
        model_name: str = "",
        pricing: ModelPricing | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._logger = logger or logging.getLogger("belaykit.events")
        self.system = system
        self.assistant = assistant
        self.tool_use = tool_use
        self.tool_result = tool_result
        self.result = result
        self.tokens = tokens
        self.content = content
        self.context_window = context_window
        self.pricing = pricing or ModelPricing()
        self._clock = clock
        self._assistant_prefix = build_tag_prefix("assistant", model_name, agent_name)

        self._lock = threading.Lock()
        self._session_start = clock()
        self.input_tokens = 0
        self.output_tokens = 0
        self._in_turn = False

    def __call__(self, event: Event) -> None:
        with self._lock:
            self._handle(event)

    def _handle(self, event: Event) -> None:
        if event.type == EventType.SYSTEM and event.subtype == "init":
            self.input_tokens = 0
            self.output_tokens = 0
            self._session_start = self._clock()
            self._in_turn = False

        if self.tokens:
            inp, out = classify_event_tokens(event)
            self.input_tokens += inp
            self.output_tokens += out

        if event.type == EventType.SYSTEM:
            if self.system:
                self._emit(f"[system] {event.subtype or 'event'} session={event.session_id or '-'}")
        elif event.type == EventType.ASSISTANT_START:
            if self.assistant:
                self._in_turn = True
                self._emit(self._header())
        elif event.type == EventType.ASSISTANT:
            if not self.assistant:
                return
            if not self._in_turn:
                self._in_turn = True
                self._emit(self._header())
            if self.content:
                self._emit("  " + event.text)
        elif event.type == EventType.TOOL_USE:
            if not self.tool_use:
                return
            if not self._in_turn and self.assistant:
                self._in_turn = True
                self._emit(self._header())
            body = " " + event.tool_name
            tool_input = _tool_input_text(event.tool_input)
            if self.content and tool_input:
                body += " " + truncate(tool_input, MAX_TOOL_INPUT_LEN)
            self._emit(self._indent() + "[tool_use]" + body)
        elif event.type == EventType.TOOL_RESULT:
            if not self.tool_result:
                return
            body = " " + truncate(event.text, MAX_TOOL_RESULT_LEN) if self.content else ""
            self._emit(self._indent() + "[tool_result]" + body)
        elif event.type == EventType.RESULT:
            if not self.result:
                return
            self._in_turn = False
            line = f"[result] turns={event.num_turns} duration={event.duration_ms}ms"
            if self.tokens:
                line += "  " + self._stats()
            self._emit(line)
        elif event.type == EventType.RESULT_ERROR:
            if not self.result:
                return
            self._in_turn = False
            body = " " + event.text if self.content else ""
            self._logger.error("[error]%s", body)

    def _header(self) -> str:
        if not self.tokens:
            return self._assistant_prefix
        return f"{self._assistant_prefix}  {self._stats()}"

    def _stats(self) -> str:
        total = self.input_tokens + self.output_tokens
        cost = self.pricing.cost(self.input_tokens, self.output_tokens)
        elapsed = self._clock() - self._session_start
        return (
            f"{format_thermobar(total, self.context_window)}  "
            f"~{format_token_count(self.input_tokens)} in + ~{format_token_count(self.output_tokens)} out"
            f" | ${cost:.4f} | {format_duration(elapsed)}"
        )

    def _indent(self) -> str:
        return "  " if self._in_turn else ""

    def _emit(self, line: str) -> None:
        self._logger.info("%s", line)
