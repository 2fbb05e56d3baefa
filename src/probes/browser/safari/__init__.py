"""Safari probe."""

from .probe import SafariProbe

__all__ = ["SafariProbe"]
