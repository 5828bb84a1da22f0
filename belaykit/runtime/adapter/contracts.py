from __future__ import annotations

from typing import Any, Callable, Protocol

from ...models import Event, RunOptions
from .types import RunArtifacts, RunState


Emit = Callable[[Event], None]


class CommandBuilder(Protocol):
    def prepare(self, options: RunOptions) -> RunArtifacts:
        ...

    def build(
        self,
        *,
        prompt: str,
        model: str,
        options: RunOptions,
        artifacts: RunArtifacts,
    ) -> list[str]:
        ...

    def build_env(self, options: RunOptions, base_env: dict[str, str]) -> dict[str, str]:
        ...


class StreamParser(Protocol):
    def handle_line(
        self,
        payload: dict[str, Any],
        state: RunState,
        emit: Emit,
        output_stream: Any = None,
    ) -> None:
        ...
