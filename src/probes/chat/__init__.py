"""Chat application probes (Messages, Telegram)."""

from ._patterns import CHAT_APPS
from .probe import ChatProbe

__all__ = ["CHAT_APPS", "ChatProbe"]
