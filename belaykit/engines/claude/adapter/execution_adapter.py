from __future__ import annotations

from belaykit.config import config
from belaykit.models import EventHandler, RunOptions
from belaykit.runtime.adapter.base_execution_adapter import EngineExecutionAdapter
from belaykit.runtime.observability.contracts import ObservabilityProvider
from .command_builder import ClaudeCommandBuilder
from .stream_parser import ClaudeStreamParser

CLAUDE_SUPPORTED_OPTIONS = frozenset(RunOptions.model_fields)


class ClaudeExecutionAdapter(EngineExecutionAdapter):
    def __init__(
        self,
        executable: str | None = None,
        default_model: str = "",
        event_handler: EventHandler | None = None,
        observability: ObservabilityProvider | None = None,
    ) -> None:
        super().__init__(
            engine="claude",
            executable=executable or str(config.ENGINES.CLAUDE_EXECUTABLE),
            default_model=default_model,
            event_handler=event_handler,
            observability=observability,
            supported_options=CLAUDE_SUPPORTED_OPTIONS,
            process_prefix="Claude",
        )
        self.command_builder = ClaudeCommandBuilder(self)
        self.stream_parser = ClaudeStreamParser()
