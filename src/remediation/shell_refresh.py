"""
Shell refresh hook.

After recent items are cleared, Finder keeps showing cached "last used"
metadata until it is dropped from the files and Finder restarts. Every
command here is fire-and-forget: failures are logged and ignored.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, List, Sequence

from core.logging import get_logger

LOGGER = get_logger("remediation.shell_refresh")

LAST_USED_XATTR = "com.apple.lastuseddate#PS"
SAMPLE_FOLDERS = ("Documents", "Desktop", "Downloads")

CommandRunner = Callable[..., subprocess.CompletedProcess]


class ShellRefresher:
    """Drops last-used metadata from a bounded sample of files and restarts Finder."""

    def __init__(self, home: Path, sample_size: int = 50, runner: CommandRunner = subprocess.run):
        self.home = home
        self.sample_size = sample_size
        self._runner = runner

    def sample_files(self) -> List[Path]:
        """Up to ``sample_size`` regular files from the top of the common user folders."""
        picked: List[Path] = []
        for folder in SAMPLE_FOLDERS:
            directory = self.home / folder
            try:
                entries = sorted(directory.iterdir())
            except OSError:
                continue
            for entry in entries:
                if len(picked) >= self.sample_size:
                    return picked
                if entry.is_file() and not entry.name.startswith("."):
                    picked.append(entry)
        return picked

    def refresh(self) -> int:
        """Run the refresh; returns the number of commands that exited cleanly."""
        succeeded = 0
        for path in self.sample_files():
            succeeded += self._run(["xattr", "-d", LAST_USED_XATTR, str(path)])
        succeeded += self._run(["killall", "Finder"])
        LOGGER.info("Shell refresh issued (%d commands succeeded)", succeeded)
        return succeeded

    def _run(self, cmd: Sequence[str]) -> int:
        try:
            process = self._runner(
                list(cmd),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
                timeout=10,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.debug("Command %s failed: %s", cmd[0], exc)
            return 0
        return 1 if process.returncode == 0 else 0
