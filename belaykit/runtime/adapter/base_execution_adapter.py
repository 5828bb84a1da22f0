from __future__ import annotations

import asyncio
import logging
import os
import signal
import subprocess
from dataclasses import dataclass, field
from typing import Any

from ...config import config
from ...errors import (
    CLINotFoundError,
    ExitError,
    PipeSetupError,
    ProviderError,
    RunTimeoutError,
    SpawnError,
    UnsupportedOptionError,
)
from ...models import (
    CompletionRecord,
    Event,
    EventHandler,
    EventType,
    RunOptions,
    RunResult,
    RunStatus,
)
from ..observability.contracts import ObservabilityProvider
from ..protocol.decoder import LineDecoder
from ..protocol.line_stream import LineMultiplexer
from .contracts import CommandBuilder, Emit, StreamParser
from .types import RunArtifacts, RunState

logger = logging.getLogger(__name__)


@dataclass
class EngineExecutionAdapter:
    """
    Unified execution adapter compiled from standard components.

    Owns the engine process for the duration of one `run` call: spawns it,
    multiplexes its pipes through the tolerant decoder into the engine's
    stream parser, and resolves the terminal state once the process exits.
    """

    engine: str = "engine"
    executable: str = ""
    default_model: str = ""
    event_handler: EventHandler | None = None
    observability: ObservabilityProvider | None = None
    command_builder: CommandBuilder | None = None
    stream_parser: StreamParser | None = None
    supported_options: frozenset[str] = field(default_factory=frozenset)
    process_prefix: str = "Engine"

    async def run(
        self,
        prompt: str,
        options: RunOptions | None = None,
        **overrides: Any,
    ) -> RunResult:
        if self.command_builder is None or self.stream_parser is None:
            raise RuntimeError("execution adapter components are not initialized")

        run_options = self.resolve_options(options, overrides)
        self.validate_options(run_options)

        model = run_options.model or self.default_model
        handler = run_options.event_handler or self.event_handler

        artifacts = self.command_builder.prepare(run_options)
        try:
            command = self.command_builder.build(
                prompt=prompt,
                model=model,
                options=run_options,
                artifacts=artifacts,
            )
            env = self.command_builder.build_env(run_options, os.environ.copy())
            proc = await self._spawn(command, env)
            return await self._supervise(
                proc,
                prompt=prompt,
                model=model,
                options=run_options,
                handler=handler,
                artifacts=artifacts,
            )
        finally:
            artifacts.cleanup()

    def resolve_options(self, options: RunOptions | None, overrides: dict[str, Any]) -> RunOptions:
        for name in overrides:
            if name not in RunOptions.model_fields:
                raise UnsupportedOptionError(self.engine, name)
        if options is None:
            return RunOptions(**overrides)
        if overrides:
            return options.model_copy(update=overrides)
        return options

    def validate_options(self, options: RunOptions) -> None:
        for name in options.set_options():
            if name not in self.supported_options:
                raise UnsupportedOptionError(self.engine, name)

    async def _spawn(self, command: list[str], env: dict[str, str]) -> asyncio.subprocess.Process:
        try:
            proc = await self._create_subprocess(*command, env=env)
        except FileNotFoundError as exc:
            raise CLINotFoundError(self.engine, command[0]) from exc
        except OSError as exc:
            raise SpawnError(self.engine, exc) from exc
        if proc.stdout is None or proc.stderr is None:
            await self._terminate_process_tree(proc, self.process_prefix)
            raise PipeSetupError(f"{self.engine}: stdout/stderr pipes were not created")
        logger.debug("[%s] started pid=%s", self.process_prefix, proc.pid)
        return proc

    async def _create_subprocess(self, *cmd: str, env: dict[str, str]) -> asyncio.subprocess.Process:
        kwargs: dict[str, Any] = {
            "stdin": asyncio.subprocess.DEVNULL,
            "stdout": asyncio.subprocess.PIPE,
            "stderr": asyncio.subprocess.PIPE,
            "env": env,
            "limit": int(config.STREAM.MAX_LINE_BYTES),
        }
        if os.name == "nt":
            kwargs["creationflags"] = int(getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0))
        else:
            kwargs["start_new_session"] = True
        return await asyncio.create_subprocess_exec(*cmd, **kwargs)

    async def _supervise(
        self,
        proc: asyncio.subprocess.Process,
        *,
        prompt: str,
        model: str,
        options: RunOptions,
        handler: EventHandler | None,
        artifacts: RunArtifacts,
    ) -> RunResult:
        state = RunState(status=RunStatus.RUNNING)
        decoder = LineDecoder()
        lines = LineMultiplexer(proc.stdout, proc.stderr, prefix=self.process_prefix)
        emit = self._make_emitter(handler)
        try:
            returncode = await asyncio.wait_for(
                self._consume(proc, lines, decoder, state, emit, prompt=prompt, model=model, options=options),
                timeout=options.timeout_sec or None,
            )
        except asyncio.TimeoutError:
            state.status = RunStatus.CANCELED
            logger.error("[%s] timeout reached (%ss), terminating process", self.process_prefix, options.timeout_sec)
            await self._terminate_process_tree(proc, self.process_prefix)
            raise RunTimeoutError(self.engine, float(options.timeout_sec or 0)) from None
        except asyncio.CancelledError:
            state.status = RunStatus.CANCELED
            logger.info("[%s] run cancelled, terminating process", self.process_prefix)
            await self._terminate_process_tree(proc, self.process_prefix)
            raise
        except BaseException:
            state.status = RunStatus.FAILED
            await self._terminate_process_tree(proc, self.process_prefix)
            raise
        finally:
            await lines.aclose()

        return self._finalize(
            returncode,
            state,
            decoder,
            emit,
            prompt=prompt,
            model=model,
            options=options,
            artifacts=artifacts,
        )

    async def _consume(
        self,
        proc: asyncio.subprocess.Process,
        lines: LineMultiplexer,
        decoder: LineDecoder,
        state: RunState,
        emit: Emit,
        *,
        prompt: str,
        model: str,
        options: RunOptions,
    ) -> int:
        assert self.stream_parser is not None
        async for line in lines:
            payload = decoder.feed(line)
            if payload is None:
                continue
            self.stream_parser.handle_line(payload, state, emit, options.output_stream)
            if state.pending_completion:
                state.pending_completion = False
                self._record_completion(
                    state,
                    prompt=prompt,
                    model=model,
                    options=options,
                    response=state.result_text or "",
                    is_error=state.terminal_is_error,
                )
        return await proc.wait()

    def _finalize(
        self,
        returncode: int,
        state: RunState,
        decoder: LineDecoder,
        emit: Emit,
        *,
        prompt: str,
        model: str,
        options: RunOptions,
        artifacts: RunArtifacts,
    ) -> RunResult:
        stderr_text = decoder.diagnostics.text()

        if returncode != 0:
            state.status = RunStatus.FAILED
            if not state.result_emitted:
                message = state.last_error or stderr_text.strip() or f"{self.engine} exited with status {returncode}"
                state.last_error = message
                state.result_emitted = True
                state.terminal_is_error = True
                emit(
                    Event(
                        type=EventType.RESULT_ERROR,
                        text=message,
                        cost_usd=state.cost_usd,
                        duration_ms=state.duration_ms,
                        num_turns=state.num_turns,
                        is_error=True,
                    )
                )
            if not state.completion_recorded:
                self._record_completion(
                    state,
                    prompt=prompt,
                    model=model,
                    options=options,
                    response=state.last_error or state.result_text or "",
                    is_error=True,
                )
            logger.warning("[%s] exited with status %s", self.process_prefix, returncode)
            raise ExitError(self.engine, returncode, stderr_text)

        if state.result_emitted and state.terminal_is_error:
            state.status = RunStatus.FAILED
            if not state.completion_recorded:
                self._record_completion(
                    state,
                    prompt=prompt,
                    model=model,
                    options=options,
                    response=state.last_error or state.result_text or "",
                    is_error=True,
                )
            raise ProviderError(self.engine, state.last_error or state.result_text or "", stderr_text)

        if state.result_emitted:
            text = state.result_text or ""
        else:
            text = artifacts.read_last_message() or state.assistant_text
            state.result_text = text
            state.result_emitted = True
            emit(
                Event(
                    type=EventType.RESULT,
                    text=text,
                    cost_usd=state.cost_usd,
                    duration_ms=state.duration_ms,
                    num_turns=state.num_turns,
                )
            )
        if not state.completion_recorded:
            self._record_completion(
                state,
                prompt=prompt,
                model=model,
                options=options,
                response=text,
                is_error=False,
            )
        state.status = RunStatus.COMPLETED
        return RunResult(
            text=text,
            status=state.status,
            session_id=state.session_id,
            cost_usd=state.cost_usd,
            duration_ms=state.duration_ms,
            num_turns=state.num_turns,
        )

    def _make_emitter(self, handler: EventHandler | None) -> Emit:
        if handler is None:
            return _discard
        return handler

    def _record_completion(
        self,
        state: RunState,
        *,
        prompt: str,
        model: str,
        options: RunOptions,
        response: str,
        is_error: bool,
    ) -> None:
        state.completion_recorded = True
        if self.observability is None:
            return
        record = CompletionRecord(
            trace_id=options.trace_id,
            session_id=state.session_id,
            prompt=prompt,
            response=response,
            model=model,
            cost_usd=state.cost_usd,
            duration_ms=state.duration_ms,
            num_turns=state.num_turns,
            is_error=is_error,
        )
        try:
            self.observability.record_completion(record)
        except Exception:
            logger.warning("[%s] observability sink failed to record completion", self.process_prefix, exc_info=True)

    async def _terminate_process_tree(self, proc: asyncio.subprocess.Process, prefix: str) -> None:
        if proc.returncode is not None:
            return
        if os.name == "nt":
            await self._terminate_process_tree_windows(proc, prefix)
            return
        await self._terminate_process_tree_posix(proc, prefix)

    async def _terminate_process_tree_posix(self, proc: asyncio.subprocess.Process, prefix: str) -> None:
        grace = int(config.PROCESS.TERMINATE_GRACE_SECONDS)
        try:
            pgid = os.getpgid(proc.pid)
        except ProcessLookupError:
            return
        except OSError:
            pgid = None

        if pgid is not None and pgid == proc.pid:
            try:
                os.killpg(pgid, signal.SIGTERM)
                await asyncio.wait_for(proc.wait(), timeout=grace)
                return
            except asyncio.TimeoutError:
                logger.warning("[%s] process group SIGTERM timeout, escalating to SIGKILL", prefix)
                try:
                    os.killpg(pgid, signal.SIGKILL)
                    await asyncio.wait_for(proc.wait(), timeout=grace)
                    return
                except (ProcessLookupError, asyncio.TimeoutError):
                    pass
            except ProcessLookupError:
                return
            except OSError:
                logger.warning("[%s] process group termination failed", prefix, exc_info=True)
        elif pgid is not None:
            logger.warning(
                "[%s] subprocess is not process-group leader (pgid=%s,pid=%s); fallback terminate",
                prefix,
                pgid,
                proc.pid,
            )

        try:
            proc.terminate()
            await asyncio.wait_for(proc.wait(), timeout=3)
        except ProcessLookupError:
            return
        except asyncio.TimeoutError:
            try:
                proc.kill()
                await asyncio.wait_for(proc.wait(), timeout=3)
            except (ProcessLookupError, asyncio.TimeoutError):
                logger.warning("[%s] fallback terminate/kill failed", prefix, exc_info=True)

    async def _terminate_process_tree_windows(self, proc: asyncio.subprocess.Process, prefix: str) -> None:
        ctrl_break = getattr(signal, "CTRL_BREAK_EVENT", None)
        if ctrl_break is not None:
            try:
                proc.send_signal(ctrl_break)
                await asyncio.wait_for(proc.wait(), timeout=3)
                return
            except (OSError, asyncio.TimeoutError):
                pass

        try:
            proc.terminate()
            await asyncio.wait_for(proc.wait(), timeout=3)
            return
        except (OSError, asyncio.TimeoutError):
            pass

        try:
            proc.kill()
            await asyncio.wait_for(proc.wait(), timeout=3)
        except (OSError, asyncio.TimeoutError):
            logger.warning("[%s] windows terminate/kill failed", prefix, exc_info=True)


def _discard(event: Event) -> None:
    _ = event
