"""Chromium family (Chrome, Edge, Brave) probe."""

from .probe import ChromiumProbe
from ._patterns import CHROMIUM_BROWSERS, CHROMIUM_STORES

__all__ = ["ChromiumProbe", "CHROMIUM_BROWSERS", "CHROMIUM_STORES"]
