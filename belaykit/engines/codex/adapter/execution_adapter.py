from __future__ import annotations

from belaykit.config import config
from belaykit.models import EventHandler
from belaykit.runtime.adapter.base_execution_adapter import EngineExecutionAdapter
from belaykit.runtime.observability.contracts import ObservabilityProvider
from .command_builder import CodexCommandBuilder
from .stream_parser import CodexStreamParser

# codex exec has no flags for turn limits, output caps or tool filtering
CODEX_SUPPORTED_OPTIONS = frozenset(
    {
        "model",
        "system_prompt",
        "output_stream",
        "event_handler",
        "trace_id",
        "timeout_sec",
    }
)


class CodexExecutionAdapter(EngineExecutionAdapter):
    def __init__(
        self,
        executable: str | None = None,
        default_model: str = "",
        event_handler: EventHandler | None = None,
        observability: ObservabilityProvider | None = None,
    ) -> None:
        super().__init__(
            engine="codex",
            executable=executable or str(config.ENGINES.CODEX_EXECUTABLE),
            default_model=default_model,
            event_handler=event_handler,
            observability=observability,
            supported_options=CODEX_SUPPORTED_OPTIONS,
            process_prefix="Codex",
        )
        self.command_builder = CodexCommandBuilder(self)
        self.stream_parser = CodexStreamParser()
