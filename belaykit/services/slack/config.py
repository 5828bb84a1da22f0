from __future__ import annotations

from pathlib import Path
from typing import Any, List

import yaml
from pydantic import BaseModel, Field


class SlackEventConfig(BaseModel):
    """Which event kinds trigger automatic notifications from SlackEventHandler."""
    on_error: bool = False
    on_result: bool = False
    on_start: bool = False
    on_tool_use: bool = False


class SlackConfig(BaseModel):
    """
    Slack notification settings.

    Either a webhook URL or a bot token plus channel is required; threading
    of session messages is only available with a bot token.
    """
    enabled: bool = False
    webhook_url: str = ""
    bot_token: str = ""
    channel: str = ""
    notify_users: List[str] = Field(default_factory=list)
    events: SlackEventConfig = Field(default_factory=SlackEventConfig)

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.webhook_url or (self.bot_token and self.channel))

    @classmethod
    def from_yaml(cls, path: str | Path, *, section: str | None = "slack") -> "SlackConfig":
        """Load settings from a YAML file, optionally nested under `section`."""
        with open(path, "r", encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Slack config in {path} must be a mapping")
        if section is not None and isinstance(data.get(section), dict):
            data = data[section]
        return cls.model_validate(data)
