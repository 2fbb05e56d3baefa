"""Human-readable artifact labels."""

from __future__ import annotations

from typing import Tuple


def count_label(count: int, noun: Tuple[str, str]) -> str:
    """``count_label(1, ("cookie", "cookies")) -> "1 cookie"``."""
    singular, plural = noun
    return f"{count} {singular if count == 1 else plural}"


def scoped_label(owner: str, scope: str, text: str) -> str:
    """``"Google Chrome (Default): 50 history entries"``."""
    if scope:
        return f"{owner} ({scope}): {text}"
    return f"{owner}: {text}"
