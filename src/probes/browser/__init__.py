"""Browser family probes (Chromium, Safari, Firefox)."""

from .chromium import ChromiumProbe
from .firefox import FirefoxProbe
from .safari import SafariProbe

__all__ = ["ChromiumProbe", "FirefoxProbe", "SafariProbe"]
