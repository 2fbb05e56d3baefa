"""
Safari cookie jar parsing.

``Cookies.binarycookies`` is decoded with the ``binarycookies`` library.
Only the owning domain of each cookie is kept; values never leave the jar.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import List

import binarycookies


class CookieJarError(ValueError):
    """Raised when a file cannot be decoded as a binarycookies jar."""
    pass


def parse_cookie_domains(file_path: Path) -> List[str]:
    """
    Domain of every cookie in a Safari cookie jar, in file order.

    Raises:
        CookieJarError: File is not a readable binarycookies jar
    """
    try:
        with open(file_path, "rb") as f:
            jar = binarycookies.load(f)
    except Exception as exc:
        raise CookieJarError(f"Unreadable cookie jar {file_path}: {exc}") from exc

    return [getattr(cookie, "url", None) or getattr(cookie, "domain", "") or "" for cookie in jar]


def domain_counts(domains: List[str]) -> Counter:
    """Cookies per site, leading dots folded so ``.a.com`` and ``a.com`` agree."""
    return Counter(domain.lstrip(".") for domain in domains)
