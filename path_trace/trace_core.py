from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .geometry import Point, sample_segment
from .mask import DEFAULT_DARKNESS_THRESHOLD, ConfigurationError, MaskIndex, PixelClass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TraceConfig:
    # Play field of the shipped game.
    width: int = 510
    height: int = 600
    darkness_threshold: int = DEFAULT_DARKNESS_THRESHOLD
    off_path_threshold: int | None = None
    win_threshold_pct: float = 60.0
    # False keeps coverage from earlier drags of the same round.
    reset_on_each_drag: bool = False
    # False lets the coverage percentage decide even after an off-path failure.
    off_path_forces_loss: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError("play field width and height must be > 0")
        if not (0 <= self.darkness_threshold <= 255):
            raise ConfigurationError("darkness_threshold must be in [0, 255]")
        if self.off_path_threshold is not None:
            if not (0 <= self.off_path_threshold <= 255):
                raise ConfigurationError("off_path_threshold must be in [0, 255]")
            if self.off_path_threshold < self.darkness_threshold:
                raise ConfigurationError("off_path_threshold must be >= darkness_threshold")
        if not (0.0 <= self.win_threshold_pct <= 100.0):
            raise ConfigurationError("win_threshold_pct must be in [0.0, 100.0]")


class Phase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    LOCKED = "locked"


class FeedResult(str, Enum):
    IGNORED = "ignored"
    CONTINUE = "continue"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class AttemptOutcome:
    is_win: bool
    percentage: float
    covered_pixels: int
    total_path_pixels: int
    failed_off_path: bool
    off_path_at: tuple[int, int] | None = None


@dataclass(frozen=True, slots=True)
class TraceSnapshot:
    """View model for the UI (pure data)."""

    phase: Phase
    covered_pixels: int
    total_path_pixels: int
    percentage: float
    win_threshold_pct: float
    outcome: AttemptOutcome | None = None


class AttemptListener(Protocol):
    def on_segment(self, start: Point, end: Point) -> None:
        """A segment was traced without leaving the path."""
        ...

    def on_clear(self) -> None:
        """The attempt was lost; drop any drawn feedback."""
        ...

    def on_finished(self, outcome: AttemptOutcome) -> None:
        """Called exactly once per scored attempt."""
        ...


class TraceAttempt:
    """One round of tracing: idle -> active -> locked.

    - Deterministic: the same mask and pointer sequence give the same coverage.
    - Late or out-of-order input is ignored rather than raised.
    """

    def __init__(
        self,
        *,
        mask: MaskIndex,
        config: TraceConfig | None = None,
        listener: AttemptListener | None = None,
    ) -> None:
        cfg = config or TraceConfig()
        if (mask.width, mask.height) != (cfg.width, cfg.height):
            raise ConfigurationError(
                f"mask is {mask.width}x{mask.height}, play field is {cfg.width}x{cfg.height}"
            )

        self._mask = mask
        self._config = cfg
        self._listener = listener

        self._phase: Phase = Phase.IDLE
        self._covered: set[tuple[int, int]] = set()
        self._last_point: Point | None = None
        self._outcome: AttemptOutcome | None = None
        self._off_path_at: tuple[int, int] | None = None

    @property
    def config(self) -> TraceConfig:
        return self._config

    @property
    def mask(self) -> MaskIndex:
        return self._mask

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_active(self) -> bool:
        return self._phase is Phase.ACTIVE

    @property
    def locked(self) -> bool:
        return self._phase is Phase.LOCKED

    @property
    def last_point(self) -> Point | None:
        return self._last_point

    @property
    def outcome(self) -> AttemptOutcome | None:
        return self._outcome

    @property
    def covered_pixels(self) -> frozenset[tuple[int, int]]:
        return frozenset(self._covered)

    def coverage_pct(self) -> float:
        total = self._mask.total_path_pixels
        if total == 0:
            return 0.0
        return 100.0 * len(self._covered) / float(total)

    def start(self, point: Point) -> None:
        if self._phase is Phase.LOCKED:
            return
        if self._config.reset_on_each_drag:
            self._covered.clear()
        self._phase = Phase.ACTIVE
        self._last_point = point
        logger.debug("Attempt started at (%.1f, %.1f)", point.x, point.y)

    def feed(self, point: Point) -> FeedResult:
        if self._phase is not Phase.ACTIVE:
            return FeedResult.IGNORED
        assert self._last_point is not None
        if point == self._last_point:
            return FeedResult.IGNORED

        start = self._last_point
        for px, py in sample_segment(start, point):
            cls = self._mask.classify(px, py)
            if cls is PixelClass.PATH:
                self._covered.add((px, py))
            elif cls is not PixelClass.MARGIN:
                # First violation ends the whole attempt, not just this segment.
                self._off_path_at = (px, py)
                logger.info("Went off the path at (%d, %d)", px, py)
                self.end(success=False)
                return FeedResult.FAILED

        self._last_point = point
        if self._listener is not None:
            self._listener.on_segment(start, point)
        return FeedResult.CONTINUE

    def end(self, success: bool | None = None) -> AttemptOutcome | None:
        # Only an armed attempt can be scored; idle and locked calls are dropped.
        if self._phase is not Phase.ACTIVE:
            return None
        self._phase = Phase.LOCKED
        self._last_point = None

        total = self._mask.total_path_pixels
        if total == 0:
            logger.warning("Attempt ended on a mask with no path pixels; no verdict")
            return None

        percentage = self.coverage_pct()
        failed = success is False
        is_win = percentage >= self._config.win_threshold_pct
        if failed and self._config.off_path_forces_loss:
            is_win = False

        outcome = AttemptOutcome(
            is_win=is_win,
            percentage=percentage,
            covered_pixels=len(self._covered),
            total_path_pixels=total,
            failed_off_path=failed,
            off_path_at=self._off_path_at,
        )
        self._outcome = outcome
        logger.info(
            "Attempt %s: covered %d/%d (%.2f%%)",
            "won" if is_win else "lost",
            outcome.covered_pixels,
            total,
            percentage,
        )

        if self._listener is not None:
            if not is_win:
                self._listener.on_clear()
            self._listener.on_finished(outcome)
        return outcome

    def snapshot(self) -> TraceSnapshot:
        return TraceSnapshot(
            phase=self._phase,
            covered_pixels=len(self._covered),
            total_path_pixels=self._mask.total_path_pixels,
            percentage=self.coverage_pct(),
            win_threshold_pct=self._config.win_threshold_pct,
            outcome=self._outcome,
        )


def build_trace_attempt(
    *,
    mask: MaskIndex,
    config: TraceConfig | None = None,
    listener: AttemptListener | None = None,
) -> TraceAttempt:
    """Start a fresh round on an already classified mask."""

    return TraceAttempt(mask=mask, config=config, listener=listener)
