"""
Chromium browser family store locations.

Covers the Chromium-based browsers installed on macOS:
- Google Chrome (Stable, Beta, Canary share the Chrome source)
- Microsoft Edge
- Brave

All of them use the same internal structure: a user-data root holding
``Default`` and ``Profile N`` subdirectories, each with identical SQLite
stores (History, Cookies, Login Data, Web Data).

Usage:
    from probes.browser.chromium._patterns import CHROMIUM_BROWSERS, CHROMIUM_STORES

    roots = CHROMIUM_BROWSERS["chrome"]["profile_roots"]
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from core.artifacts import PurgePlan, PurgeTarget
from core.enums import Category, Source

from .._stores import StoreSpec


# Browser-specific user-data roots, relative to the user's home directory
CHROMIUM_BROWSERS: Dict[str, Dict[str, Any]] = {
    "chrome": {
        "display_name": "Google Chrome",
        "source": Source.CHROME,
        "bundle_ids": ("com.google.Chrome", "com.google.Chrome.beta", "com.google.Chrome.canary"),
        "profile_roots": [
            "Library/Application Support/Google/Chrome",
            "Library/Application Support/Google/Chrome Beta",
            "Library/Application Support/Google/Chrome Canary",
        ],
        "cache_roots": [
            "Library/Caches/Google/Chrome",
            "Library/Caches/Google/Chrome Beta",
            "Library/Caches/Google/Chrome Canary",
        ],
    },
    "edge": {
        "display_name": "Microsoft Edge",
        "source": Source.EDGE,
        "bundle_ids": ("com.microsoft.edgemac", "com.microsoft.edgemac.Beta"),
        "profile_roots": [
            "Library/Application Support/Microsoft Edge",
            "Library/Application Support/Microsoft Edge Beta",
        ],
        "cache_roots": [
            "Library/Caches/Microsoft Edge",
            "Library/Caches/Microsoft Edge Beta",
        ],
    },
    "brave": {
        "display_name": "Brave",
        "source": Source.BRAVE,
        "bundle_ids": ("com.brave.Browser",),
        "profile_roots": [
            "Library/Application Support/BraveSoftware/Brave-Browser",
        ],
        "cache_roots": [
            "Library/Caches/BraveSoftware/Brave-Browser",
        ],
    },
}


CHROMIUM_STORES: Tuple[StoreSpec, ...] = (
    StoreSpec(
        category=Category.HISTORY,
        filenames=("History",),
        count_table="visits",
        noun=("history entry", "history entries"),
        purge=PurgePlan((
            PurgeTarget("visits"),
            PurgeTarget("keyword_search_terms"),
            PurgeTarget("segment_usage"),
            PurgeTarget("segments"),
            PurgeTarget("visit_source"),
            PurgeTarget("urls"),
        )),
    ),
    StoreSpec(
        category=Category.DOWNLOADS,
        filenames=("History",),
        count_table="downloads",
        noun=("download record", "download records"),
        purge=PurgePlan((
            PurgeTarget("downloads"),
            PurgeTarget("downloads_url_chains"),
            PurgeTarget("downloads_slices"),
        )),
    ),
    StoreSpec(
        category=Category.COOKIES,
        # Chromium 96+ moved the cookie store under Network/
        filenames=("Network/Cookies", "Cookies"),
        count_table="cookies",
        noun=("cookie", "cookies"),
        purge=PurgePlan.tables("cookies"),
        domain_column="host_key",
    ),
    StoreSpec(
        category=Category.CREDENTIALS,
        filenames=("Login Data",),
        count_table="logins",
        noun=("saved password", "saved passwords"),
        purge=PurgePlan.tables("logins"),
    ),
    StoreSpec(
        category=Category.AUTOFILL,
        filenames=("Web Data",),
        count_table="autofill",
        noun=("autofill entry", "autofill entries"),
        purge=PurgePlan.tables("autofill"),
    ),
)

# Per-profile directories removed whole; they hold no credentials worth preserving
CHROMIUM_SITE_DATA_DIRS: Tuple[Tuple[str, str], ...] = (
    ("Cache", "Cache"),
    ("Code Cache", "Code cache"),
    ("GPUCache", "GPU cache"),
    ("Local Storage", "Local storage"),
    ("Session Storage", "Session storage"),
    ("IndexedDB", "IndexedDB"),
    ("Service Worker/CacheStorage", "Service worker cache"),
)
