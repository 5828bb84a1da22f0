import io

from belaykit.engines.claude.adapter.stream_parser import ClaudeStreamParser
from belaykit.models import Event, EventType
from belaykit.runtime.adapter.types import RunState


def _run(lines, output_stream=None):
    parser = ClaudeStreamParser()
    state = RunState()
    events: list[Event] = []
    for payload in lines:
        parser.handle_line(payload, state, events.append, output_stream)
    return state, events


def test_system_init_emits_system_then_assistant_start():
    state, events = _run([{"type": "system", "subtype": "init", "session_id": "sess-1"}])
    assert [e.type for e in events] == [EventType.SYSTEM, EventType.ASSISTANT_START]
    assert events[0].session_id == "sess-1"
    assert events[0].subtype == "init"
    assert events[0].raw_json == {"type": "system", "subtype": "init", "session_id": "sess-1"}
    assert state.session_id == "sess-1"
    assert state.num_turns == 1


def test_assistant_blocks_emit_text_and_tool_use():
    sink = io.StringIO()
    state, events = _run(
        [
            {
                "type": "assistant",
                "message": {
                    "content": [
                        {"type": "text", "text": "Looking"},
                        {"type": "tool_use", "id": "tu_1", "name": "Read", "input": {"path": "a.py"}},
                        {"type": "thinking", "thinking": "..."},
                    ]
                },
            }
        ],
        output_stream=sink,
    )
    assert [e.type for e in events] == [EventType.ASSISTANT, EventType.TOOL_USE]
    assert events[0].text == "Looking"
    assert events[1].tool_name == "Read"
    assert events[1].tool_id == "tu_1"
    assert events[1].tool_input == {"path": "a.py"}
    assert state.assistant_text == "Looking"
    assert sink.getvalue() == "Looking"


def test_tool_results_start_a_new_turn():
    state, events = _run(
        [
            {
                "type": "user",
                "message": {
                    "content": [
                        {"type": "tool_result", "tool_use_id": "tu_1", "content": "file body"},
                        {
                            "type": "tool_result",
                            "tool_use_id": "tu_2",
                            "content": [{"type": "text", "text": "boom"}],
                            "is_error": True,
                        },
                    ]
                },
            }
        ]
    )
    assert [e.type for e in events] == [
        EventType.TOOL_RESULT,
        EventType.TOOL_RESULT,
        EventType.ASSISTANT_START,
    ]
    assert events[0].text == "file body"
    assert events[0].tool_id == "tu_1"
    assert events[1].text == "boom"
    assert events[1].is_error is True
    assert state.num_turns == 1


def test_user_message_without_tool_results_emits_nothing():
    _, events = _run([{"type": "user", "message": {"content": [{"type": "text", "text": "hi"}]}}])
    assert events == []


def test_result_success_populates_state():
    state, events = _run(
        [
            {
                "type": "result",
                "subtype": "success",
                "result": "done",
                "total_cost_usd": 0.12,
                "duration_ms": 3400,
                "num_turns": 3,
            }
        ]
    )
    assert len(events) == 1
    event = events[0]
    assert event.type == EventType.RESULT
    assert event.text == "done"
    assert event.cost_usd == 0.12
    assert event.duration_ms == 3400
    assert event.num_turns == 3
    assert state.result_emitted is True
    assert state.terminal_is_error is False
    assert state.pending_completion is True


def test_result_error_flag_and_subtype():
    _, flagged = _run([{"type": "result", "is_error": True, "result": "quota exceeded"}])
    assert flagged[0].type == EventType.RESULT_ERROR
    assert flagged[0].is_error is True

    state, by_subtype = _run([{"type": "result", "subtype": "error", "cost_usd": 0.5}])
    assert by_subtype[0].type == EventType.RESULT_ERROR
    assert by_subtype[0].cost_usd == 0.5
    assert state.last_error == "error"


def test_error_prefixed_subtype_without_flag_is_success():
    state, events = _run([{"type": "result", "subtype": "error_max_turns", "is_error": False, "result": "partial"}])
    assert events[0].type == EventType.RESULT
    assert events[0].is_error is False
    assert state.terminal_is_error is False


def test_non_finite_numbers_are_ignored():
    state, events = _run(
        [
            {
                "type": "result",
                "result": "done",
                "total_cost_usd": float("nan"),
                "cost_usd": 0.4,
                "duration_ms": float("inf"),
                "num_turns": 10**400,
            }
        ]
    )
    assert events[0].type == EventType.RESULT
    assert state.cost_usd == 0.4
    assert state.duration_ms == 0
    assert state.num_turns == 0


def test_second_result_is_ignored():
    _, events = _run(
        [
            {"type": "result", "result": "first"},
            {"type": "result", "result": "second", "is_error": True},
        ]
    )
    assert len(events) == 1
    assert events[0].text == "first"


def test_unknown_types_and_missing_fields_are_tolerated():
    state, events = _run(
        [
            {"type": "stream_event", "delta": "x"},
            {"type": "assistant"},
            {"type": "assistant", "message": {"content": "not a list"}},
            {"no_type": True},
        ]
    )
    assert events == []
    assert state.num_turns == 0
