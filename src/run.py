"""Launcher for a source checkout: ``python src/run.py scan --json``."""

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from app.main import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
