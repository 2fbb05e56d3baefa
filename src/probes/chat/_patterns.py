"""
Chat application data locations.

Each entry is (path relative to home, label). Locations are emitted whole;
chat stores are not introspected.
"""

from __future__ import annotations

from typing import Any, Dict

from core.enums import Source

CHAT_APPS: Dict[str, Dict[str, Any]] = {
    "messages": {
        "display_name": "Messages",
        "source": Source.MESSAGES,
        "bundle_ids": ("com.apple.MobileSMS",),
        "locations": (
            ("Library/Messages/chat.db", "Message history"),
            ("Library/Messages/Attachments", "Attachments"),
        ),
    },
    "telegram": {
        "display_name": "Telegram",
        "source": Source.TELEGRAM,
        "bundle_ids": ("com.tdesktop.Telegram", "ru.keepcoder.Telegram"),
        "locations": (
            ("Library/Application Support/Telegram Desktop", "Telegram Desktop data"),
            ("Library/Group Containers/6N38VWS5BX.ru.keepcoder.Telegram", "Telegram data"),
        ),
    },
}
