"""Tests for the application registry (Info.plist lookup)."""

import plistlib
from pathlib import Path

from core.app_registry import ApplicationRegistry, bundle_path_for_executable, read_bundle_info


def _make_app(apps_dir: Path, name: str, bundle_id: str, icon: bool = False, **extra) -> Path:
    app = apps_dir / f"{name}.app"
    contents = app / "Contents"
    (contents / "MacOS").mkdir(parents=True)
    info = {"CFBundleIdentifier": bundle_id, "CFBundleName": name, **extra}
    if icon:
        info["CFBundleIconFile"] = "AppIcon"
        (contents / "Resources").mkdir()
        (contents / "Resources" / "AppIcon.icns").write_bytes(b"icns")
    with (contents / "Info.plist").open("wb") as handle:
        plistlib.dump(info, handle)
    return app


def test_read_bundle_info_prefers_display_name(tmp_path):
    app = _make_app(tmp_path, "Zoom", "us.zoom.xos", CFBundleDisplayName="zoom.us", icon=True)
    info = read_bundle_info(app)
    assert info.bundle_id == "us.zoom.xos"
    assert info.display_name == "zoom.us"
    assert info.icon_path == app / "Contents/Resources/AppIcon.icns"


def test_read_bundle_info_without_plist(tmp_path):
    app = tmp_path / "Broken.app"
    app.mkdir()
    assert read_bundle_info(app) is None


def test_resolve_is_case_insensitive(tmp_path):
    _make_app(tmp_path, "Google Chrome", "com.google.Chrome")
    registry = ApplicationRegistry(search_dirs=[tmp_path])
    assert registry.resolve("com.google.chrome").display_name == "Google Chrome"
    assert registry.resolve("com.example.missing") is None


def test_invalidate_rebuilds_index(tmp_path):
    registry = ApplicationRegistry(search_dirs=[tmp_path])
    assert registry.resolve("com.tinyspeck.slackmacgap") is None
    _make_app(tmp_path, "Slack", "com.tinyspeck.slackmacgap")
    registry.invalidate()
    assert registry.resolve("com.tinyspeck.slackmacgap") is not None


def test_bundle_id_for_executable(tmp_path):
    app = _make_app(tmp_path, "Firefox", "org.mozilla.firefox")
    registry = ApplicationRegistry(search_dirs=[tmp_path])
    exe = app / "Contents/MacOS/firefox"
    assert bundle_path_for_executable(str(exe)) == app
    assert registry.bundle_id_for_executable(str(exe)) == "org.mozilla.firefox"
    assert registry.bundle_id_for_executable("/usr/bin/python3") is None
