"""Smoke test for the pygame shell.

Verifies that the main loop can initialise and run a few frames with the
SDL dummy video driver. It does not exercise gameplay.
"""

from __future__ import annotations

import os

# Use the dummy drivers before importing pygame or the application
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")


def test_app_runs_headless(monkeypatch) -> None:
    """Ensure the application can start and run a few frames headlessly."""
    monkeypatch.delenv("PATH_TRACE_MASK_PATH", raising=False)
    monkeypatch.delenv("PATH_TRACE_BACKGROUND_PATH", raising=False)

    # Import inside the test so that environment variables take effect
    from path_trace.app import run

    exit_code = run(max_frames=3)
    assert exit_code == 0
