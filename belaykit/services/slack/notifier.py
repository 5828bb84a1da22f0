from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .client import DEFAULT_API_BASE_URL, DEFAULT_BACKOFF_SECONDS, SlackClient
from .config import SlackConfig

Blocks = Optional[List[Dict[str, Any]]]


def format_mentions(user_ids: Sequence[str]) -> str:
    return " ".join(f"<@{user_id}>" for user_id in user_ids)


class SlackNotifier:
    """
    Thread-aware Slack notifications for one session.

    With a bot token, `start_session` posts a top-level message and later
    messages reply in its thread; with only a webhook, every message is a
    plain webhook post. Every method is a no-op when the config is not
    configured, so callers never need to check first.
    """

    def __init__(
        self,
        cfg: SlackConfig,
        *,
        api_base_url: str = DEFAULT_API_BASE_URL,
        backoff: Sequence[float] = DEFAULT_BACKOFF_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.cfg = cfg
        self.client: SlackClient | None = None
        if cfg.is_configured:
            self.client = SlackClient(cfg, api_base_url=api_base_url, backoff=backoff, transport=transport)
        self._lock = threading.Lock()
        self._thread_ts = ""

    @property
    def is_enabled(self) -> bool:
        return self.cfg.is_configured and self.client is not None

    @property
    def thread_ts(self) -> str:
        with self._lock:
            return self._thread_ts

    async def start_session(self, text: str, blocks: Blocks = None) -> None:
        if not self.is_enabled:
            return
        client = self.client
        assert client is not None
        if self.cfg.bot_token and self.cfg.channel:
            response = await client.post_with_retry(
                lambda: client.post_message(text, channel=self.cfg.channel, blocks=blocks)
            )
            with self._lock:
                self._thread_ts = str(response.get("ts", ""))
            return

        await client.post_with_retry(lambda: client.post_webhook(text, blocks))

    async def send(self, text: str, blocks: Blocks = None) -> None:
        if not self.is_enabled:
            return
        client = self.client
        assert client is not None
        thread_ts = self.thread_ts

        if thread_ts and self.cfg.bot_token:
            await client.post_with_retry(
                lambda: client.post_message(
                    text,
                    channel=self.cfg.channel,
                    blocks=blocks,
                    thread_ts=thread_ts,
                )
            )
        elif self.cfg.webhook_url:
            await client.post_with_retry(lambda: client.post_webhook(text, blocks))
        elif self.cfg.bot_token:
            await client.post_with_retry(
                lambda: client.post_message(text, channel=self.cfg.channel, blocks=blocks)
            )

    async def send_with_mentions(self, text: str, user_ids: Sequence[str], blocks: Blocks = None) -> None:
        if user_ids:
            text = f"{text}\n{format_mentions(user_ids)}"
        await self.send(text, blocks)

    async def end_session(self, text: str, blocks: Blocks = None) -> None:
        """Final session message, mentioning `notify_users`."""
        await self.send_with_mentions(text, self.cfg.notify_users, blocks)
