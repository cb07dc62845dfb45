# main.py
"""
Entry point of DC Report Manager.

- puts src/ on the import path
- hands the command line to dcreport.cli (window by default, `export` for files)
"""

import sys
from pathlib import Path

# ──────────────────────────────────────────────
# make src/ importable without installing
# ──────────────────────────────────────────────
ROOT_DIR = Path(__file__).resolve().parent
SRC_DIR = ROOT_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from dcreport.cli import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
