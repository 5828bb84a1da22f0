from datetime import timedelta
from unittest.mock import MagicMock

from belaykit.models import CompletionRecord, TraceConfig
from belaykit.services.freeplay import FreeplayProvider


def test_trace_lifecycle_is_forwarded():
    client = MagicMock()
    client.start_session.return_value = "sess-1"
    client.start_trace.return_value = "trace-1"
    provider = FreeplayProvider(client)

    assert provider.start_session({"name": "pipeline"}) == "sess-1"
    client.start_session.assert_called_once_with({"name": "pipeline"})

    trace_id = provider.start_trace(
        TraceConfig(name="extract", display_name="Extract fields", metadata={"batch": 3}),
        {"doc": "a.pdf"},
    )
    assert trace_id == "trace-1"
    client.start_trace.assert_called_once_with(
        {"agent_name": "extract", "display_name": "Extract fields", "custom_metadata": {"batch": 3}},
        {"doc": "a.pdf"},
    )

    provider.end_trace("trace-1", {"fields": 42})
    client.end_trace.assert_called_once_with("trace-1", {"fields": 42})


def test_record_completion_maps_fields_and_window():
    client = MagicMock()
    provider = FreeplayProvider(client)

    provider.record_completion(
        CompletionRecord(
            trace_id="trace-1",
            prompt="p",
            response="r",
            model="claude-sonnet-4-5",
            cost_usd=0.12,
            duration_ms=1500,
            num_turns=3,
        )
    )

    data = client.record_completion.call_args.args[0]
    assert data["trace_id"] == "trace-1"
    assert data["provider"] == "anthropic"
    assert data["model"] == "claude-sonnet-4-5"
    assert data["cost_usd"] == 0.12
    assert data["num_turns"] == 3
    assert data["end_time"] - data["start_time"] == timedelta(milliseconds=1500)
    assert data["end_time"].tzinfo is not None


def test_record_completion_failure_is_logged(caplog):
    client = MagicMock()
    client.record_completion.side_effect = RuntimeError("api down")
    provider = FreeplayProvider(client)

    with caplog.at_level("WARNING"):
        provider.record_completion(CompletionRecord(trace_id="trace-9"))

    assert "failed to record completion for trace trace-9" in caplog.text
