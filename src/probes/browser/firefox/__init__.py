"""Firefox probe."""

from .probe import FirefoxProbe

__all__ = ["FirefoxProbe"]
