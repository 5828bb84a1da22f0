"""
Freeplay observability provider.

Forwards trace lifecycle calls and completion records to an already
configured Freeplay client (API key, project and environment are the
client's concern):

    provider = FreeplayProvider(freeplay_client)
    adapter = ClaudeExecutionAdapter(observability=provider)
    provider.start_session({"name": "my-pipeline"})
    trace_id = provider.start_trace(TraceConfig(name="extract"), inputs)
    await adapter.run(prompt, trace_id=trace_id)
    provider.end_trace(trace_id, {"fields": 42})
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Protocol

from belaykit.models import CompletionRecord, TraceConfig

logger = logging.getLogger(__name__)

COMPLETION_PROVIDER = "anthropic"


class FreeplayClient(Protocol):
    def start_session(self, metadata: Optional[Dict[str, Any]] = None) -> str:
        ...

    def start_trace(self, config: Dict[str, Any], inputs: Optional[Dict[str, Any]] = None) -> str:
        ...

    def end_trace(self, trace_id: str, outputs: Optional[Dict[str, Any]] = None) -> None:
        ...

    def record_completion(self, data: Dict[str, Any]) -> None:
        ...


class FreeplayProvider:
    """ObservabilityProvider backed by a Freeplay client."""

    def __init__(self, client: FreeplayClient) -> None:
        self.client = client

    def start_session(self, metadata: Optional[Dict[str, Any]] = None) -> str:
        return self.client.start_session(metadata)

    def start_trace(self, config: TraceConfig, inputs: Optional[Dict[str, Any]] = None) -> str:
        return self.client.start_trace(
            {
                "agent_name": config.name,
                "display_name": config.display_name,
                "custom_metadata": dict(config.metadata),
            },
            inputs,
        )

    def end_trace(self, trace_id: str, outputs: Optional[Dict[str, Any]] = None) -> None:
        self.client.end_trace(trace_id, outputs)

    def record_completion(self, record: CompletionRecord) -> None:
        end_time = datetime.now(timezone.utc)
        start_time = end_time - timedelta(milliseconds=record.duration_ms)
        try:
            self.client.record_completion(
                {
                    "trace_id": record.trace_id,
                    "prompt": record.prompt,
                    "response": record.response,
                    "model": record.model,
                    "provider": COMPLETION_PROVIDER,
                    "start_time": start_time,
                    "end_time": end_time,
                    "cost_usd": record.cost_usd,
                    "duration_ms": record.duration_ms,
                    "num_turns": record.num_turns,
                }
            )
        except Exception:
            logger.warning("[Freeplay] failed to record completion for trace %s", record.trace_id or "-", exc_info=True)
