"""Tests for SafariProbe and its cookie jar parsing."""

import plistlib
import struct

import pytest

from core.enums import Category, Source
from probes.browser.safari import SafariProbe
from probes.browser.safari._parsers import CookieJarError, domain_counts, parse_cookie_domains

HISTORY_DDL = [
    "CREATE TABLE history_items (id INTEGER PRIMARY KEY, url TEXT)",
    "CREATE TABLE history_visits (id INTEGER PRIMARY KEY, history_item INTEGER, visit_time REAL)",
]

MAC_EPOCH_2024 = 726_000_000.0


def _cookie_record(domain: str, name: str, value: str, path: str = "/") -> bytes:
    strings = b""
    offsets = []
    for text in (domain, name, path, value):
        offsets.append(56 + len(strings))
        strings += text.encode() + b"\x00"
    header = struct.pack("<4I", 56 + len(strings), 0, 0, 0)
    header += struct.pack("<4I", *offsets)
    header += b"\x00" * 8
    header += struct.pack("<2d", MAC_EPOCH_2024 + 86_400, MAC_EPOCH_2024)
    return header + strings


def _page(cookies) -> bytes:
    records = [_cookie_record(*cookie) for cookie in cookies]
    offset = 4 + 4 + 4 * len(records) + 4
    offsets = []
    for record in records:
        offsets.append(offset)
        offset += len(record)
    head = b"\x00\x00\x01\x00" + struct.pack("<I", len(records))
    head += struct.pack(f"<{len(records)}I", *offsets) + b"\x00\x00\x00\x00"
    return head + b"".join(records)


def binarycookies(*pages) -> bytes:
    """A Cookies.binarycookies jar; each page is a list of (domain, name, value)."""
    encoded = [_page(cookies) for cookies in pages]
    checksum = sum(sum(page[i] for i in range(0, len(page), 4)) for page in encoded)
    header = b"cook" + struct.pack(">I", len(encoded))
    header += struct.pack(f">{len(encoded)}I", *(len(page) for page in encoded))
    return header + b"".join(encoded) + struct.pack(">I", checksum) + b"\x07\x17\x20\x05\x00\x00\x00\x4b"


def jar_with(count: int, domain: str = ".example.com") -> bytes:
    return binarycookies([(domain, f"c{i}", str(i)) for i in range(count)])


class TestCookieJar:

    def test_domains_across_pages(self, tmp_path):
        path = tmp_path / "Cookies.binarycookies"
        path.write_bytes(binarycookies(
            [(".a.example", "id", "1"), ("a.example", "pref", "x"), (".b.example", "sid", "2")],
            [(".c.example", "t", "3")],
        ))
        domains = parse_cookie_domains(path)
        assert sorted(domains) == [".a.example", ".b.example", ".c.example", "a.example"]

    def test_domain_counts_fold_leading_dot(self):
        counts = domain_counts([".a.example", "a.example", ".b.example"])
        assert counts == {"a.example": 2, "b.example": 1}

    def test_rejects_garbage(self, tmp_path):
        path = tmp_path / "Cookies.binarycookies"
        path.write_bytes(b"garbage" * 10)
        with pytest.raises(CookieJarError):
            parse_cookie_domains(path)


class TestSafariProbe:

    def test_metadata(self):
        probe = SafariProbe()
        assert probe.name == "safari"
        assert probe.source is Source.SAFARI

    def test_history_and_downloads(self, home, make_store, probe_ctx):
        safari = home / "Library/Safari"
        make_store(safari / "History.db", HISTORY_DDL, {
            "history_items": [(1, "https://a.example/")],
            "history_visits": [(i, 1, 700000000.0 + i) for i in range(1, 13)],
        })
        with (safari / "Downloads.plist").open("wb") as handle:
            plistlib.dump({"DownloadHistory": [{"DownloadEntryURL": "https://a.example/f.zip"}] * 2}, handle)

        found = {a.category: a for a in SafariProbe().run(probe_ctx)}
        assert found[Category.HISTORY].label == "Safari: 12 history entries"
        assert found[Category.HISTORY].purge is None
        assert found[Category.DOWNLOADS].row_count == 2

    def test_empty_downloads_list_is_skipped(self, home, probe_ctx):
        safari = home / "Library/Safari"
        safari.mkdir(parents=True)
        with (safari / "Downloads.plist").open("wb") as handle:
            plistlib.dump({"DownloadHistory": []}, handle)
        assert SafariProbe().run(probe_ctx) == []

    def test_container_layout_is_scoped(self, home, probe_ctx):
        cookies = home / "Library/Containers/com.apple.Safari/Data/Library/Cookies"
        cookies.mkdir(parents=True)
        (cookies / "Cookies.binarycookies").write_bytes(jar_with(5))

        (artifact,) = SafariProbe().run(probe_ctx)
        assert artifact.category is Category.COOKIES
        assert artifact.label == "Safari (Container): 5 cookies"

    def test_unparseable_cookie_file_still_reported(self, home, probe_ctx):
        cookies = home / "Library/Cookies"
        cookies.mkdir(parents=True)
        (cookies / "Cookies.binarycookies").write_bytes(b"garbage" * 10)

        (artifact,) = SafariProbe().run(probe_ctx)
        assert artifact.row_count is None
        assert artifact.label == "Safari: Cookie file"
        assert artifact.size_bytes == 70

    def test_cache_directory(self, home, probe_ctx):
        cache = home / "Library/Caches/com.apple.Safari"
        cache.mkdir(parents=True)
        (cache / "Cache.db").write_bytes(b"z" * 512)

        (artifact,) = SafariProbe().run(probe_ctx)
        assert artifact.category is Category.SITE_DATA
        assert artifact.location == cache
        assert artifact.size_bytes == 512
