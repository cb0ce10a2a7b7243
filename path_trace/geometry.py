from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Point:
    """Pointer position in play-field coordinates."""

    x: float
    y: float

    def pixel(self) -> tuple[int, int]:
        """Return the integer pixel that contains this point."""
        return int(math.floor(self.x)), int(math.floor(self.y))


def sample_segment(start: Point, end: Point) -> list[tuple[int, int]]:
    """Resample a segment into the pixels it passes through, in order.

    Uses fixed-step interpolation with ``ceil(max(|dx|, |dy|))`` steps, so each
    step advances at most one pixel on either axis and no pixel along a fast
    motion is skipped. Both endpoints are included. Consecutive samples that
    land in the same pixel are collapsed.
    """

    dx = float(end.x) - float(start.x)
    dy = float(end.y) - float(start.y)
    steps = int(math.ceil(max(abs(dx), abs(dy))))

    if steps == 0:
        return [start.pixel()]

    out: list[tuple[int, int]] = []
    for i in range(steps + 1):
        t = i / steps
        px = int(math.floor(start.x + dx * t))
        py = int(math.floor(start.y + dy * t))
        if out and out[-1] == (px, py):
            continue
        out.append((px, py))

    # Float drift must never move the final sample off the endpoint pixel.
    last = end.pixel()
    if out[-1] != last:
        out.append(last)
    return out
