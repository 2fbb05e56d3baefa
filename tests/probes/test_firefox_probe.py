"""
Tests for FirefoxProbe.

places.sqlite is shared with bookmarks, so history and downloads must be
reported with row-level purge plans rather than as whole files.
"""

import json
import sqlite3

from core.enums import Category, Source
from probes.browser.firefox import FirefoxProbe
from probes.browser.firefox._patterns import FIREFOX_STORES
from remediation.strategies import purge_rows

PLACES_DDL = [
    "CREATE TABLE moz_places (id INTEGER PRIMARY KEY, url TEXT)",
    "CREATE TABLE moz_historyvisits (id INTEGER PRIMARY KEY, place_id INTEGER)",
    "CREATE TABLE moz_inputhistory (place_id INTEGER, input TEXT)",
    "CREATE TABLE moz_bookmarks (id INTEGER PRIMARY KEY, fk INTEGER, title TEXT)",
    "CREATE TABLE moz_anno_attributes (id INTEGER PRIMARY KEY, name TEXT)",
    "CREATE TABLE moz_annos (id INTEGER PRIMARY KEY, place_id INTEGER, anno_attribute_id INTEGER, content TEXT)",
]

PROFILES = "Library/Application Support/Firefox/Profiles"


def make_places(make_store, profile, visits=3, downloads=2):
    return make_store(profile / "places.sqlite", PLACES_DDL, {
        "moz_places": [(i, f"https://p{i}.example/") for i in range(1, 6)],
        "moz_historyvisits": [(i, 1) for i in range(1, visits + 1)],
        "moz_bookmarks": [(1, 2, "Kept")],
        "moz_anno_attributes": [(1, "downloads/destinationFileURI"), (2, "downloads/metaData")],
        "moz_annos": (
            [(i, 3, 1, f"file:///d{i}") for i in range(1, downloads + 1)]
            + [(100 + i, 3, 2, "{}") for i in range(1, downloads + 1)]
        ),
    })


class TestFirefoxProbe:

    def test_metadata(self):
        probe = FirefoxProbe()
        assert probe.name == "firefox"
        assert probe.source is Source.FIREFOX
        assert Category.CREDENTIALS in probe.metadata.categories

    def test_history_and_downloads_from_places(self, home, make_store, probe_ctx):
        profile = home / PROFILES / "abcd1234.default-release"
        make_places(make_store, profile, visits=3, downloads=2)

        found = {a.category: a for a in FirefoxProbe().run(probe_ctx)}
        assert found[Category.HISTORY].label == "Firefox (default-release): 3 history entries"
        # only destination annotations count as download records
        assert found[Category.DOWNLOADS].row_count == 2
        assert [t.table for t in found[Category.HISTORY].purge.targets] == [
            "moz_historyvisits", "moz_inputhistory", "moz_places", "moz_origins",
        ]
        assert found[Category.HISTORY].location == found[Category.DOWNLOADS].location

    def test_cookies_breakdown_uses_host_column(self, home, make_store, probe_ctx):
        profile = home / PROFILES / "x.default"
        make_store(
            profile / "cookies.sqlite",
            ["CREATE TABLE moz_cookies (id INTEGER PRIMARY KEY, host TEXT, name TEXT)"],
            {"moz_cookies": [(1, ".a.org", "n"), (2, ".a.org", "m"), (3, "b.org", "k")]},
        )
        (cookies,) = FirefoxProbe().run(probe_ctx)
        assert cookies.label == "Firefox (default): 3 cookies"
        assert [c.label for c in cookies.children] == ["a.org (2 cookies)", "b.org (1 cookie)"]

    def test_logins_json(self, home, probe_ctx):
        profile = home / PROFILES / "x.default"
        profile.mkdir(parents=True)
        (profile / "logins.json").write_text(json.dumps({"logins": [{"hostname": "a"}, {"hostname": "b"}]}))

        (logins,) = FirefoxProbe().run(probe_ctx)
        assert logins.category is Category.CREDENTIALS
        assert logins.row_count == 2
        assert logins.purge is None

    def test_malformed_logins_json_is_ignored(self, home, probe_ctx):
        profile = home / PROFILES / "x.default"
        profile.mkdir(parents=True)
        (profile / "logins.json").write_text("{not json")
        assert FirefoxProbe().run(probe_ctx) == []

    def test_legacy_profile_root_and_cache(self, home, make_store, probe_ctx):
        legacy = home / "Library/Mozilla/Firefox/Profiles/old.default"
        make_places(make_store, legacy, visits=1, downloads=0)
        cache = home / "Library/Caches/Firefox/Profiles/old.default/cache2"
        cache.mkdir(parents=True)
        (cache / "entry").write_bytes(b"c" * 64)

        artifacts = FirefoxProbe().run(probe_ctx)
        labels = sorted(a.label for a in artifacts)
        assert labels == ["Firefox (default): 1 history entry", "Firefox (default): Disk cache"]

    def test_every_store_is_row_purged(self):
        assert all(spec.purge.targets for spec in FIREFOX_STORES)

    def test_history_purge_drops_orphaned_origins(self, home, make_store, probe_ctx):
        profile = home / PROFILES / "o.default"
        places = make_store(profile / "places.sqlite", [
            "CREATE TABLE moz_origins (id INTEGER PRIMARY KEY, prefix TEXT, host TEXT)",
            "CREATE TABLE moz_places (id INTEGER PRIMARY KEY, url TEXT, origin_id INTEGER)",
            "CREATE TABLE moz_historyvisits (id INTEGER PRIMARY KEY, place_id INTEGER)",
            "CREATE TABLE moz_bookmarks (id INTEGER PRIMARY KEY, fk INTEGER, title TEXT)",
            "CREATE TABLE moz_annos (id INTEGER PRIMARY KEY, place_id INTEGER, anno_attribute_id INTEGER)",
        ], {
            "moz_origins": [(1, "https://", "kept.example"), (2, "https://", "visited.example")],
            "moz_places": [(1, "https://kept.example/", 1), (2, "https://visited.example/", 2)],
            "moz_historyvisits": [(1, 1), (2, 2)],
            "moz_bookmarks": [(1, 1, "Kept")],
        })

        (history,) = [a for a in FirefoxProbe().run(probe_ctx) if a.category is Category.HISTORY]
        purge_rows(places, history.purge, vacuum=False)

        conn = sqlite3.connect(places)
        try:
            hosts = conn.execute("SELECT host FROM moz_origins").fetchall()
            urls = conn.execute("SELECT url FROM moz_places").fetchall()
        finally:
            conn.close()
        assert hosts == [("kept.example",)]
        assert urls == [("https://kept.example/",)]
