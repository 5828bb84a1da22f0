from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Dict, List, Optional, Set, Tuple

from belaykit.models import Event, EventType

from .notifier import SlackNotifier

logger = logging.getLogger(__name__)

Formatter = Callable[[Event], Tuple[str, Optional[List[Dict[str, Any]]]]]


def default_error_formatter(agent_name: str) -> Formatter:
    def fmt(event: Event) -> Tuple[str, Optional[List[Dict[str, Any]]]]:
        prefix = f"[{agent_name}] Error" if agent_name else "Error"
        return f"{prefix}: {event.text}", None

    return fmt


def default_result_formatter(agent_name: str) -> Formatter:
    def fmt(event: Event) -> Tuple[str, Optional[List[Dict[str, Any]]]]:
        prefix = f"[{agent_name}] Completed" if agent_name else "Completed"
        text = (
            f"{prefix}: turns={event.num_turns} duration={event.duration_ms}ms "
            f"cost=${event.cost_usd:.4f}"
        )
        return text, None

    return fmt


class SlackEventHandler:
    """
    Event handler dispatching Slack notifications per `SlackConfig.events`.

    Each notification runs as a background task on the running loop so the
    event stream never waits on Slack. Call `wait_pending()` before the loop
    shuts down to flush them.
    """

    def __init__(
        self,
        notifier: SlackNotifier,
        *,
        agent_name: str = "",
        error_formatter: Formatter | None = None,
        result_formatter: Formatter | None = None,
    ) -> None:
        self.notifier = notifier
        self.agent_name = agent_name
        self.error_formatter = error_formatter or default_error_formatter(agent_name)
        self.result_formatter = result_formatter or default_result_formatter(agent_name)
        self._session_started = False
        self._tasks: Set[asyncio.Task[None]] = set()

    def __call__(self, event: Event) -> None:
        if not self.notifier.is_enabled:
            return
        events = self.notifier.cfg.events

        if event.type == EventType.SYSTEM:
            if event.subtype == "init" and events.on_start and not self._session_started:
                self._session_started = True
                text = self._tagged("Session started")
                if event.session_id:
                    text += f" (session: {event.session_id})"
                self._dispatch(self.notifier.start_session(text))
        elif event.type == EventType.RESULT_ERROR:
            if events.on_error:
                text, blocks = self.error_formatter(event)
                self._dispatch(self.notifier.send(text, blocks))
        elif event.type == EventType.RESULT:
            if events.on_result:
                text, blocks = self.result_formatter(event)
                self._dispatch(self.notifier.end_session(text, blocks))
        elif event.type == EventType.TOOL_USE:
            if events.on_tool_use:
                self._dispatch(self.notifier.send(self._tagged(f"Tool: {event.tool_name}")))

    async def wait_pending(self) -> None:
        """Wait for every notification dispatched so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _tagged(self, text: str) -> str:
        return f"[{self.agent_name}] {text}" if self.agent_name else text

    def _dispatch(self, coro: Coroutine[Any, Any, None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning("slack notification dropped: no running event loop")
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("slack notification failed: %s", exc)
