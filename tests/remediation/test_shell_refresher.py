"""Tests for the Finder refresh hook."""

import subprocess

from remediation.shell_refresh import LAST_USED_XATTR, ShellRefresher


class FakeRunner:
    def __init__(self, returncode=0, fail_on=None):
        self.commands = []
        self.returncode = returncode
        self.fail_on = fail_on

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        if self.fail_on and cmd[0] == self.fail_on:
            raise FileNotFoundError(cmd[0])
        return subprocess.CompletedProcess(cmd, self.returncode)


def populate(home):
    (home / "Documents").mkdir()
    (home / "Desktop").mkdir()
    (home / "Documents" / "a.txt").write_text("a")
    (home / "Documents" / ".DS_Store").write_text("x")
    (home / "Documents" / "folder").mkdir()
    (home / "Desktop" / "b.png").write_text("b")


def test_sample_skips_hidden_files_and_directories(home):
    populate(home)
    picked = ShellRefresher(home).sample_files()
    assert picked == [home / "Documents" / "a.txt", home / "Desktop" / "b.png"]


def test_sample_is_bounded(home):
    (home / "Downloads").mkdir()
    for i in range(10):
        (home / "Downloads" / f"f{i}.zip").write_text("z")
    assert len(ShellRefresher(home, sample_size=3).sample_files()) == 3


def test_refresh_commands(home):
    populate(home)
    runner = FakeRunner()
    succeeded = ShellRefresher(home, runner=runner).refresh()

    assert runner.commands == [
        ["xattr", "-d", LAST_USED_XATTR, str(home / "Documents" / "a.txt")],
        ["xattr", "-d", LAST_USED_XATTR, str(home / "Desktop" / "b.png")],
        ["killall", "Finder"],
    ]
    assert succeeded == 3


def test_failures_are_ignored(home):
    populate(home)
    runner = FakeRunner(returncode=1, fail_on="killall")
    assert ShellRefresher(home, runner=runner).refresh() == 0
    assert runner.commands[-1] == ["killall", "Finder"]


def test_empty_home(home):
    runner = FakeRunner()
    assert ShellRefresher(home, runner=runner).refresh() == 1
    assert runner.commands == [["killall", "Finder"]]
