"""
Safari file locations.

Safari is macOS-only and uses Apple-specific formats:
- History: History.db (SQLite)
- Cookies: Cookies.binarycookies (binary format)
- Downloads: Downloads.plist (plist)
- Site data: LocalStorage, Databases (IndexedDB), WebKit caches

Safari moved its data into a sandbox container on newer macOS releases, so
both the classic ``~/Library`` and the container layouts are listed.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from core.enums import Category

SAFARI_BUNDLE_IDS: Tuple[str, ...] = ("com.apple.Safari", "com.apple.SafariTechnologyPreview")

# Relative to the user's home directory
SAFARI_ROOTS: Dict[str, List[str]] = {
    "profile": [
        "Library/Safari",
        "Library/Containers/com.apple.Safari/Data/Library/Safari",
    ],
    "cookies": [
        "Library/Cookies",
        "Library/Containers/com.apple.Safari/Data/Library/Cookies",
    ],
    "cache": [
        "Library/Caches/com.apple.Safari",
        "Library/Containers/com.apple.Safari/Data/Library/Caches/com.apple.Safari",
    ],
}

HISTORY_DB = "History.db"
HISTORY_COUNT_TABLE = "history_visits"
DOWNLOADS_PLIST = "Downloads.plist"
DOWNLOADS_KEY = "DownloadHistory"
COOKIES_FILE = "Cookies.binarycookies"

# Profile subdirectories removed whole
SAFARI_SITE_DATA_DIRS: Tuple[Tuple[str, str], ...] = (
    ("LocalStorage", "Local storage"),
    ("Databases", "Website databases"),
)

SAFARI_CATEGORIES: Tuple[Category, ...] = (
    Category.HISTORY,
    Category.DOWNLOADS,
    Category.COOKIES,
    Category.SITE_DATA,
)
