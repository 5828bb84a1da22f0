from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from ...models import RunStatus

logger = logging.getLogger(__name__)


@dataclass
class RunState:
    """
    Per-run accumulator folded by the stream parser.

    Owned by the single decode loop of one run; never shared across runs.
    """

    session_id: str = ""
    assistant_chunks: list[str] = field(default_factory=list)
    last_error: str = ""
    cost_usd: float = 0.0
    duration_ms: int = 0
    num_turns: int = 0
    result_text: str | None = None
    # Set once a terminal event went to the handler; exit handling must not emit another
    result_emitted: bool = False
    terminal_is_error: bool = False
    # The decoded terminal event carries final stats and should be recorded now
    pending_completion: bool = False
    completion_recorded: bool = False
    status: RunStatus = RunStatus.NOT_STARTED

    def append_text(self, text: str) -> None:
        self.assistant_chunks.append(text)

    @property
    def assistant_text(self) -> str:
        return "".join(self.assistant_chunks)


@dataclass
class RunArtifacts:
    """Scoped files an engine needs for one run; removed by cleanup()."""

    last_message_path: Path | None = None

    def read_last_message(self) -> str:
        if self.last_message_path is None:
            return ""
        try:
            data = self.last_message_path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return ""
        return data if data.strip() else ""

    def cleanup(self) -> None:
        if self.last_message_path is None:
            return
        try:
            os.remove(self.last_message_path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("failed to remove %s", self.last_message_path, exc_info=True)
