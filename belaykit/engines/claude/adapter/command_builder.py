from __future__ import annotations

from typing import TYPE_CHECKING

from belaykit.models import RunOptions
from belaykit.runtime.adapter.types import RunArtifacts

if TYPE_CHECKING:
    from .execution_adapter import ClaudeExecutionAdapter

MAX_OUTPUT_TOKENS_ENV = "CLAUDE_CODE_MAX_OUTPUT_TOKENS"


class ClaudeCommandBuilder:
    def __init__(self, adapter: "ClaudeExecutionAdapter") -> None:
        self._adapter = adapter

    def prepare(self, options: RunOptions) -> RunArtifacts:
        _ = options
        return RunArtifacts()

    def build(
        self,
        *,
        prompt: str,
        model: str,
        options: RunOptions,
        artifacts: RunArtifacts,
    ) -> list[str]:
        _ = artifacts
        args = [
            self._adapter.executable,
            "-p",
            prompt,
            "--output-format",
            "stream-json",
            "--verbose",
        ]
        for tool in options.allowed_tools:
            args.extend(["--allowedTools", tool])
        for tool in options.disallowed_tools:
            args.extend(["--disallowedTools", tool])
        if options.max_turns > 0:
            args.extend(["--max-turns", str(options.max_turns)])
        if model:
            args.extend(["--model", model])
        if options.system_prompt:
            args.extend(["--system-prompt", options.system_prompt])
        return args

    def build_env(self, options: RunOptions, base_env: dict[str, str]) -> dict[str, str]:
        env = dict(base_env)
        if options.max_output_tokens > 0:
            env[MAX_OUTPUT_TOKENS_ENV] = str(options.max_output_tokens)
        return env
