from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

import httpx

from belaykit.errors import BelayKitError

from .config import SlackConfig

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://slack.com/api"
DEFAULT_BACKOFF_SECONDS = (1.0, 2.0, 4.0)

T = TypeVar("T")


class SlackApiError(BelayKitError):
    """A Slack webhook or Web API call failed."""


class SlackClient:
    """Raw Slack calls via incoming webhook or `chat.postMessage`."""

    def __init__(
        self,
        cfg: SlackConfig,
        *,
        api_base_url: str = DEFAULT_API_BASE_URL,
        backoff: Sequence[float] = DEFAULT_BACKOFF_SECONDS,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.webhook_url = cfg.webhook_url
        self.bot_token = cfg.bot_token
        self.channel = cfg.channel
        self._api_base_url = api_base_url.rstrip("/")
        self._backoff = tuple(backoff)
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url or (self.bot_token and self.channel))

    async def post_webhook(self, text: str, blocks: Optional[List[Dict[str, Any]]] = None) -> None:
        if not self.webhook_url:
            raise SlackApiError("webhook URL not configured")
        payload: Dict[str, Any] = {"text": text}
        if blocks:
            payload["blocks"] = blocks
        async with self._http_client() as client:
            try:
                response = await client.post(self.webhook_url, json=payload)
            except httpx.HTTPError as exc:
                raise SlackApiError(f"send request: {exc}") from exc
        if response.status_code != 200:
            raise SlackApiError(f"webhook returned status {response.status_code}: {response.text}")

    async def post_message(
        self,
        text: str,
        *,
        channel: str = "",
        blocks: Optional[List[Dict[str, Any]]] = None,
        thread_ts: str = "",
    ) -> Dict[str, Any]:
        """Call chat.postMessage and return the decoded response (with `ts`)."""
        if not self.bot_token:
            raise SlackApiError("bot token not configured")
        payload: Dict[str, Any] = {"channel": channel or self.channel, "text": text}
        if blocks:
            payload["blocks"] = blocks
        if thread_ts:
            payload["thread_ts"] = thread_ts
        headers = {"Authorization": f"Bearer {self.bot_token}"}
        async with self._http_client() as client:
            try:
                response = await client.post(
                    f"{self._api_base_url}/chat.postMessage",
                    json=payload,
                    headers=headers,
                )
            except httpx.HTTPError as exc:
                raise SlackApiError(f"send request: {exc}") from exc
        try:
            result = response.json()
        except json.JSONDecodeError as exc:
            raise SlackApiError(f"decode response: {exc}") from exc
        if not isinstance(result, dict) or not result.get("ok"):
            error = result.get("error", "") if isinstance(result, dict) else ""
            raise SlackApiError(f"slack api error: {error}")
        return result

    async def post_with_retry(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Await `fn` until it succeeds, sleeping through the backoff schedule between attempts."""
        last_error: Exception | None = None
        for attempt in range(len(self._backoff) + 1):
            try:
                return await fn()
            except SlackApiError as exc:
                last_error = exc
                if attempt < len(self._backoff):
                    delay = self._backoff[attempt]
                    logger.debug("slack call failed (%s); retrying in %ss", exc, delay)
                    await asyncio.sleep(delay)
        raise SlackApiError(f"after {len(self._backoff)} retries: {last_error}") from last_error

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
