from __future__ import annotations

import sys
from pathlib import Path


def _ensure_paths_on_syspath() -> None:
    # Repo root for `import yolo2_kit` without an editable install, tests dir
    # for the shared `_grid` helpers under any pytest import mode.
    tests_dir = Path(__file__).resolve().parent
    for path in (tests_dir.parent, tests_dir):
        if str(path) not in sys.path:
            sys.path.insert(0, str(path))


_ensure_paths_on_syspath()
