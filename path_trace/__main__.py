from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

LOG_LEVEL_ENV = "PATH_TRACE_LOG_LEVEL"


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    Needed when this file is executed directly as a script
    (``python path_trace/__main__.py``) instead of with ``python -m``.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m path_trace
    from .app import run  # type: ignore[attr-defined]
    from .mask import ConfigurationError  # type: ignore[attr-defined]
except ImportError:
    _ensure_repo_root_on_path()
    from path_trace.app import run  # type: ignore[attr-defined]
    from path_trace.mask import ConfigurationError  # type: ignore[attr-defined]


def _configure_logging() -> None:
    raw = os.environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper()
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main() -> int:
    """Entry point for running the game from the command line."""
    _configure_logging()
    try:
        return run()
    except ConfigurationError as exc:
        logging.getLogger("path_trace").error("Cannot start: %s", exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
