from __future__ import annotations

import logging
from typing import Any

from belaykit.models import Event, EventType
from belaykit.runtime.adapter.common.payload_fields import (
    content_text,
    dict_field,
    float_field,
    int_field,
    list_field,
    str_field,
)
from belaykit.runtime.adapter.contracts import Emit
from belaykit.runtime.adapter.types import RunState

logger = logging.getLogger(__name__)


class ClaudeStreamParser:
    """
    Maps `--output-format stream-json` envelopes onto normalized events.

    Every line carries one `type` discriminator (system, assistant, user,
    result) that selects a handling branch.
    """

    def handle_line(
        self,
        payload: dict[str, Any],
        state: RunState,
        emit: Emit,
        output_stream: Any = None,
    ) -> None:
        event_type = str_field(payload, "type")
        if event_type == "system":
            self._handle_system(payload, state, emit)
        elif event_type == "assistant":
            self._handle_assistant(payload, state, emit, output_stream)
        elif event_type == "user":
            self._handle_user(payload, state, emit)
        elif event_type == "result":
            self._handle_result(payload, state, emit)

    def _handle_system(self, payload: dict[str, Any], state: RunState, emit: Emit) -> None:
        session_id = str_field(payload, "session_id")
        subtype = str_field(payload, "subtype")
        if session_id:
            state.session_id = session_id
        emit(
            Event(
                type=EventType.SYSTEM,
                session_id=session_id,
                subtype=subtype,
                raw_json=payload,
            )
        )
        if subtype == "init":
            state.num_turns += 1
            emit(Event(type=EventType.ASSISTANT_START))

    def _handle_assistant(
        self,
        payload: dict[str, Any],
        state: RunState,
        emit: Emit,
        output_stream: Any,
    ) -> None:
        message = dict_field(payload, "message")
        if message is None:
            return
        for block in list_field(message, "content"):
            if not isinstance(block, dict):
                continue
            block_type = str_field(block, "type")
            if block_type == "text":
                text = str_field(block, "text")
                state.append_text(text)
                emit(Event(type=EventType.ASSISTANT, text=text, raw_json=payload))
                if output_stream is not None:
                    output_stream.write(text)
            elif block_type == "tool_use":
                emit(
                    Event(
                        type=EventType.TOOL_USE,
                        tool_name=str_field(block, "name"),
                        tool_id=str_field(block, "id"),
                        tool_input=block.get("input"),
                        raw_json=payload,
                    )
                )

    def _handle_user(self, payload: dict[str, Any], state: RunState, emit: Emit) -> None:
        message = dict_field(payload, "message")
        if message is None:
            return
        had_tool_results = False
        for block in list_field(message, "content"):
            if not isinstance(block, dict) or str_field(block, "type") != "tool_result":
                continue
            had_tool_results = True
            emit(
                Event(
                    type=EventType.TOOL_RESULT,
                    text=content_text(block.get("content")),
                    tool_id=str_field(block, "tool_use_id"),
                    is_error=bool(block.get("is_error")),
                    raw_json=payload,
                )
            )
        # Best-effort: the model usually starts a new turn after tool output
        if had_tool_results:
            state.num_turns += 1
            emit(Event(type=EventType.ASSISTANT_START))

    def _handle_result(self, payload: dict[str, Any], state: RunState, emit: Emit) -> None:
        if state.result_emitted:
            logger.debug("ignoring additional result envelope")
            return
        text = str_field(payload, "result")
        subtype = str_field(payload, "subtype")
        is_error = bool(payload.get("is_error")) or subtype == "error"

        cost = float_field(payload, "total_cost_usd")
        if cost is None:
            cost = float_field(payload, "cost_usd")
        if cost is not None:
            state.cost_usd = cost
        duration = int_field(payload, "duration_ms")
        if duration is not None:
            state.duration_ms = duration
        num_turns = int_field(payload, "num_turns")
        if num_turns is not None:
            state.num_turns = num_turns

        state.result_text = text
        state.result_emitted = True
        state.terminal_is_error = is_error
        state.pending_completion = True
        if is_error:
            state.last_error = text or subtype
        emit(
            Event(
                type=EventType.RESULT_ERROR if is_error else EventType.RESULT,
                text=text,
                subtype=subtype,
                cost_usd=state.cost_usd,
                duration_ms=state.duration_ms,
                num_turns=state.num_turns,
                is_error=is_error,
                raw_json=payload,
            )
        )
