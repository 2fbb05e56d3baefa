"""
Core Enumerations

Centralized enum definitions for consistent typing across the codebase.
Using StrEnum (Python 3.11+) for string-based enums that serialize naturally.
"""

from enum import StrEnum


class Source(StrEnum):
    """Application family that owns a discovered artifact."""

    SAFARI = "safari"
    CHROME = "chrome"
    EDGE = "edge"
    BRAVE = "brave"
    FIREFOX = "firefox"
    MESSAGES = "messages"
    TELEGRAM = "telegram"
    SYSTEM = "system"

    @classmethod
    def browsers(cls) -> tuple["Source", ...]:
        """Return sources that are web browsers."""
        return (cls.SAFARI, cls.CHROME, cls.EDGE, cls.BRAVE, cls.FIREFOX)

    @property
    def display_name(self) -> str:
        return _SOURCE_DISPLAY_NAMES[self]


_SOURCE_DISPLAY_NAMES = {
    Source.SAFARI: "Safari",
    Source.CHROME: "Google Chrome",
    Source.EDGE: "Microsoft Edge",
    Source.BRAVE: "Brave",
    Source.FIREFOX: "Firefox",
    Source.MESSAGES: "Messages",
    Source.TELEGRAM: "Telegram",
    Source.SYSTEM: "System",
}


class Category(StrEnum):
    """Kind of personal data an artifact represents."""

    HISTORY = "browsing_history"
    COOKIES = "cookies"
    DOWNLOADS = "downloads_history"
    CREDENTIALS = "stored_credentials"
    AUTOFILL = "autofill"
    SITE_DATA = "site_data"  # caches, local storage, IndexedDB
    PERMISSION_GRANT = "permission_grant"
    RECENT_ITEM = "recent_item"
    NETWORK_IDENTITY = "network_identity"
    CHAT = "chat_data"


class ScanState(StrEnum):
    """Scan orchestrator lifecycle."""

    IDLE = "idle"
    SCANNING = "scanning"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OutcomeStatus(StrEnum):
    """Per-artifact remediation result."""

    CLEANED = "cleaned"
    SKIPPED = "skipped"
    FAILED = "failed"


class ErrorKind(StrEnum):
    """Classified failure kinds surfaced by the store reader and remediation."""

    NOT_FOUND = "not_found"
    SCHEMA_MISSING = "schema_missing"
    IN_USE = "in_use"
    CORRUPT = "corrupt"
    PERMISSION_DENIED = "permission_denied"
    PARTIAL_WRITE = "partial_write"
