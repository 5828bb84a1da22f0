from __future__ import annotations

from typing import Any, Callable, Dict

from belaykit.engines.claude.adapter.execution_adapter import ClaudeExecutionAdapter
from belaykit.engines.codex.adapter.execution_adapter import CodexExecutionAdapter
from belaykit.runtime.adapter.base_execution_adapter import EngineExecutionAdapter


class EngineAdapterRegistry:
    def __init__(self) -> None:
        self._factories: Dict[str, Callable[..., EngineExecutionAdapter]] = {
            "claude": ClaudeExecutionAdapter,
            "codex": CodexExecutionAdapter,
        }

    def engines(self) -> list[str]:
        return sorted(self._factories)

    def create(self, engine: str, **kwargs: Any) -> EngineExecutionAdapter:
        factory = self._factories.get(engine.strip().lower())
        if factory is None:
            raise KeyError(engine)
        return factory(**kwargs)


engine_adapter_registry = EngineAdapterRegistry()


def create_adapter(engine: str, **kwargs: Any) -> EngineExecutionAdapter:
    return engine_adapter_registry.create(engine, **kwargs)
