from __future__ import annotations

import logging
from typing import Any

from belaykit.models import Event, EventType
from belaykit.runtime.adapter.common.payload_fields import (
    dict_field,
    float_field,
    int_field,
    list_field,
    str_field,
)
from belaykit.runtime.adapter.contracts import Emit
from belaykit.runtime.adapter.types import RunState

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "codex run failed"

_ASSISTANT_MARKERS = ("assistant", "message", "output_text")
_FAILURE_MARKERS = ("error", "failed")
_TEXT_KEYS = ("delta", "text", "output_text")


class CodexStreamParser:
    """
    Maps `codex exec --json` lines onto normalized events.

    Lifecycle markers are matched exactly; everything else goes through a
    substring heuristic on the type string to find assistant text.
    """

    def handle_line(
        self,
        payload: dict[str, Any],
        state: RunState,
        emit: Emit,
        output_stream: Any = None,
    ) -> None:
        event_type = str_field(payload, "type")

        if event_type == "thread.started":
            thread_id = str_field(payload, "thread_id")
            if thread_id:
                state.session_id = thread_id
                emit(
                    Event(
                        type=EventType.SYSTEM,
                        session_id=thread_id,
                        subtype="init",
                        raw_json=payload,
                    )
                )
        elif event_type == "turn.started":
            state.num_turns += 1
            emit(Event(type=EventType.ASSISTANT_START, raw_json=payload))
        elif event_type == "turn.failed":
            self._handle_turn_failed(payload, state, emit)

        # Last seen value wins; partial per-turn figures are not summed
        cost = float_field(payload, "cost_usd")
        if cost is not None:
            state.cost_usd = cost
        duration = int_field(payload, "duration_ms")
        if duration is not None:
            state.duration_ms = duration

        text = extract_assistant_text(event_type, payload)
        if text:
            state.append_text(text)
            if output_stream is not None:
                output_stream.write(text)
            emit(Event(type=EventType.ASSISTANT, text=text, raw_json=payload))

    def _handle_turn_failed(self, payload: dict[str, Any], state: RunState, emit: Emit) -> None:
        message = extract_error_message(payload) or DEFAULT_FAILURE_MESSAGE
        state.last_error = message
        if state.result_emitted:
            logger.debug("ignoring turn.failed after terminal event: %s", message)
            return
        state.result_emitted = True
        state.terminal_is_error = True
        emit(
            Event(
                type=EventType.RESULT_ERROR,
                text=message,
                is_error=True,
                raw_json=payload,
            )
        )


def looks_like_assistant_event(event_type: str) -> bool:
    if not event_type:
        return False
    if any(marker in event_type for marker in _FAILURE_MARKERS):
        return False
    return any(marker in event_type for marker in _ASSISTANT_MARKERS)


def extract_assistant_text(event_type: str, payload: dict[str, Any]) -> str:
    if not looks_like_assistant_event(event_type):
        return ""

    for key in _TEXT_KEYS:
        value = str_field(payload, key)
        if value:
            return value

    message = dict_field(payload, "message")
    if message is not None:
        value = str_field(message, "text")
        if value:
            return value

    item = dict_field(payload, "item")
    if item is not None:
        value = str_field(item, "text")
        if value:
            return value
        for block in list_field(item, "content"):
            if isinstance(block, dict):
                value = str_field(block, "text")
                if value:
                    return value

    return ""


def extract_error_message(payload: dict[str, Any]) -> str:
    message = str_field(payload, "message")
    if message:
        return message
    error = dict_field(payload, "error")
    if error is not None:
        return str_field(error, "message")
    return ""
