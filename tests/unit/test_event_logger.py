import logging

from belaykit.models import Event, EventType
from belaykit.pricing import ModelPricing
from belaykit.services.event_logger import (
    EventLogger,
    build_tag_prefix,
    classify_event_tokens,
    format_duration,
    format_thermobar,
    format_token_count,
    truncate,
)

LOGGER_NAME = "belaykit.tests.events"


def _messages(caplog) -> list[str]:
    return [record.getMessage() for record in caplog.records if record.name == LOGGER_NAME]


def test_formatting_helpers():
    assert format_token_count(999) == "999"
    assert format_token_count(1_500) == "1.5K"
    assert format_token_count(2_300_000) == "2.3M"
    assert format_duration(0.25) == "250ms"
    assert format_duration(12.34) == "12.3s"
    assert format_duration(90) == "1.5m"
    assert format_thermobar(50_000, 200_000) == "[#####...............] 25.0%"
    assert format_thermobar(10, 0) == "[....................] 0.0%"
    assert format_thermobar(500, 100).endswith("100.0%")
    assert build_tag_prefix("assistant", "opus", "planner") == "[assistant:opus:planner]"
    assert build_tag_prefix("assistant", "", "") == "[assistant]"
    assert truncate("abcdef", 3) == "abc..."
    assert truncate("abc", 3) == "abc"


def test_classify_event_tokens():
    assert classify_event_tokens(Event(type=EventType.ASSISTANT, text="abcdefgh")) == (0, 2)
    assert classify_event_tokens(Event(type=EventType.TOOL_RESULT, text="abcd")) == (1, 0)
    assert classify_event_tokens(Event(type=EventType.ASSISTANT_START)) == (0, 0)
    assert classify_event_tokens(Event(type=EventType.TOOL_USE, tool_name="Read", tool_input={"p": 1})) == (0, 3)


def test_turn_layout_and_tool_indentation(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    handler = EventLogger(logging.getLogger(LOGGER_NAME), tokens=False, model_name="opus", agent_name="fixer")

    handler(Event(type=EventType.SYSTEM, subtype="init", session_id="s1"))
    handler(Event(type=EventType.ASSISTANT_START))
    handler(Event(type=EventType.ASSISTANT, text="Let me look"))
    handler(Event(type=EventType.TOOL_USE, tool_name="Read", tool_input={"path": "a.py"}))
    handler(Event(type=EventType.TOOL_RESULT, text="x" * 600))
    handler(Event(type=EventType.RESULT, num_turns=2, duration_ms=1200))

    messages = _messages(caplog)
    assert messages[0] == "[system] init session=s1"
    assert messages[1] == "[assistant:opus:fixer]"
    assert messages[2] == "  Let me look"
    assert messages[3] == '  [tool_use] Read {"path":"a.py"}'
    assert messages[4] == "  [tool_result] " + "x" * 500 + "..."
    assert messages[5] == "[result] turns=2 duration=1200ms"


def test_toggles_suppress_output(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    handler = EventLogger(
        logging.getLogger(LOGGER_NAME),
        system=False,
        tool_use=False,
        tool_result=False,
        tokens=False,
        content=False,
    )
    handler(Event(type=EventType.SYSTEM, subtype="init"))
    handler(Event(type=EventType.TOOL_USE, tool_name="Bash"))
    handler(Event(type=EventType.TOOL_RESULT, text="out"))
    handler(Event(type=EventType.ASSISTANT, text="hidden"))

    assert _messages(caplog) == ["[assistant]"]


def test_result_error_logged_at_error_level(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    handler = EventLogger(logging.getLogger(LOGGER_NAME), tokens=False)
    handler(Event(type=EventType.RESULT_ERROR, text="quota exceeded", is_error=True))

    records = [r for r in caplog.records if r.name == LOGGER_NAME]
    assert records[-1].levelno == logging.ERROR
    assert records[-1].getMessage() == "[error] quota exceeded"


def test_token_stats_reset_on_init(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    now = [100.0]
    handler = EventLogger(
        logging.getLogger(LOGGER_NAME),
        pricing=ModelPricing(input_per_mtok=1_000_000, output_per_mtok=0),
        clock=lambda: now[0],
    )
    handler(Event(type=EventType.TOOL_RESULT, text="a" * 400))
    assert handler.input_tokens == 100

    handler(Event(type=EventType.SYSTEM, subtype="init", session_id=""))
    # counters restart with the init event itself
    assert handler.input_tokens == 1

    handler(Event(type=EventType.TOOL_RESULT, text="b" * 8))
    now[0] = 102.5
    handler(Event(type=EventType.RESULT, num_turns=1, duration_ms=10))

    result_line = _messages(caplog)[-1]
    assert result_line.startswith("[result] turns=1 duration=10ms  [")
    assert "~3 in + ~0 out" in result_line
    assert "$3.0000" in result_line
    assert result_line.endswith("| 2.5s")
