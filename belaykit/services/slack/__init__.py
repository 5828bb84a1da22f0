from .client import SlackApiError, SlackClient
from .config import SlackConfig, SlackEventConfig
from .handler import SlackEventHandler
from .notifier import SlackNotifier

__all__ = [
    "SlackApiError",
    "SlackClient",
    "SlackConfig",
    "SlackEventConfig",
    "SlackEventHandler",
    "SlackNotifier",
]
