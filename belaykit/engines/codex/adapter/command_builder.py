from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from belaykit.models import RunOptions
from belaykit.runtime.adapter.types import RunArtifacts

if TYPE_CHECKING:
    from .execution_adapter import CodexExecutionAdapter

LAST_MESSAGE_PREFIX = "belaykit-codex-last-message-"


def compose_prompt(system_prompt: str, prompt: str) -> str:
    if not system_prompt:
        return prompt
    return f"System instructions:\n{system_prompt}\n\nUser prompt:\n{prompt}"


class CodexCommandBuilder:
    def __init__(self, adapter: "CodexExecutionAdapter") -> None:
        self._adapter = adapter

    def prepare(self, options: RunOptions) -> RunArtifacts:
        _ = options
        fd, path = tempfile.mkstemp(prefix=LAST_MESSAGE_PREFIX, suffix=".txt")
        os.close(fd)
        return RunArtifacts(last_message_path=Path(path))

    def build(
        self,
        *,
        prompt: str,
        model: str,
        options: RunOptions,
        artifacts: RunArtifacts,
    ) -> list[str]:
        if artifacts.last_message_path is None:
            raise RuntimeError("codex run requires a last-message file")
        args = [
            self._adapter.executable,
            "exec",
            "--json",
            "-o",
            str(artifacts.last_message_path),
        ]
        if model:
            args.extend(["-m", model])
        args.append(compose_prompt(options.system_prompt, prompt))
        return args

    def build_env(self, options: RunOptions, base_env: dict[str, str]) -> dict[str, str]:
        _ = options
        return dict(base_env)
