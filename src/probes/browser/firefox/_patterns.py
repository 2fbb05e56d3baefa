"""
Firefox (Gecko) store locations.

Firefox keeps everything per profile directory:
- places.sqlite: history AND bookmarks AND download annotations
- cookies.sqlite: moz_cookies
- formhistory.sqlite: form autofill
- logins.json (+ key4.db): saved passwords
- storage/: local storage and IndexedDB

Because places.sqlite also holds bookmarks, history and downloads are purged
row by row; deleting the file would destroy the bookmarks.
"""

from __future__ import annotations

from typing import Tuple

from core.artifacts import PurgePlan, PurgeTarget
from core.enums import Category

from .._stores import StoreSpec

FIREFOX_BUNDLE_IDS: Tuple[str, ...] = ("org.mozilla.firefox", "org.mozilla.firefoxdeveloperedition", "org.mozilla.nightly")

# Relative to the user's home directory; the second is the pre-Quantum layout
FIREFOX_PROFILE_ROOTS: Tuple[str, ...] = (
    "Library/Application Support/Firefox/Profiles",
    "Library/Mozilla/Firefox/Profiles",
)
FIREFOX_CACHE_ROOTS: Tuple[str, ...] = (
    "Library/Caches/Firefox/Profiles",
)

_DOWNLOAD_ANNOS = "anno_attribute_id IN (SELECT id FROM moz_anno_attributes WHERE name LIKE 'downloads/%')"
_DOWNLOAD_DESTINATIONS = (
    "anno_attribute_id IN (SELECT id FROM moz_anno_attributes WHERE name = 'downloads/destinationFileURI')"
)
_UNREFERENCED_PLACES = (
    "id NOT IN (SELECT fk FROM moz_bookmarks WHERE fk IS NOT NULL) "
    "AND id NOT IN (SELECT place_id FROM moz_annos)"
)
_ORPHANED_ORIGINS = "id NOT IN (SELECT origin_id FROM moz_places WHERE origin_id IS NOT NULL)"

FIREFOX_STORES: Tuple[StoreSpec, ...] = (
    StoreSpec(
        category=Category.HISTORY,
        filenames=("places.sqlite",),
        count_table="moz_historyvisits",
        noun=("history entry", "history entries"),
        purge=PurgePlan((
            PurgeTarget("moz_historyvisits"),
            PurgeTarget("moz_inputhistory"),
            # Bookmarked places and places with download annotations survive
            PurgeTarget("moz_places", _UNREFERENCED_PLACES),
            # Hosts no longer referenced by any remaining place
            PurgeTarget("moz_origins", _ORPHANED_ORIGINS),
        )),
    ),
    StoreSpec(
        category=Category.DOWNLOADS,
        filenames=("places.sqlite",),
        count_table="moz_annos",
        count_where=_DOWNLOAD_DESTINATIONS,
        noun=("download record", "download records"),
        purge=PurgePlan((PurgeTarget("moz_annos", _DOWNLOAD_ANNOS),)),
    ),
    StoreSpec(
        category=Category.COOKIES,
        filenames=("cookies.sqlite",),
        count_table="moz_cookies",
        noun=("cookie", "cookies"),
        purge=PurgePlan.tables("moz_cookies"),
        domain_column="host",
    ),
    StoreSpec(
        category=Category.AUTOFILL,
        filenames=("formhistory.sqlite",),
        count_table="moz_formhistory",
        noun=("form entry", "form entries"),
        purge=PurgePlan.tables("moz_formhistory"),
    ),
)

LOGINS_FILE = "logins.json"
SITE_DATA_DIRS: Tuple[Tuple[str, str], ...] = (
    ("storage", "Site storage"),
)
CACHE_DIR = "cache2"
