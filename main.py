"""Atajo para correr la CLI `gmsf` desde un checkout sin `pip install -e .`.

    python main.py doctor run
    python main.py --verbose trainers --page 2
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"

if __name__ == "__main__":
    sys.path.insert(0, str(SRC_DIR))

    from cli.main import run  # noqa: PLC0415

    run()
