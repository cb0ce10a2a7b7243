from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_DARKNESS_THRESHOLD = 50


class ConfigurationError(ValueError):
    """Mask or game configuration that cannot produce a playable round."""


class DegenerateMaskError(ValueError):
    """Mask with no path pixels; a round on it cannot be scored."""


class PixelClass(str, Enum):
    PATH = "path"
    BACKGROUND = "background"
    MARGIN = "margin"
    OUT_OF_BOUNDS = "out_of_bounds"


class MaskIndex:
    """Read-only path membership lookup built once from a reference image.

    A pixel is on the path when its intensity on the reference channel is
    below ``darkness_threshold``. With ``off_path_threshold`` set, pixels up to
    and including that intensity form a tolerance margin: sampling them
    neither fails an attempt nor adds coverage.
    """

    __slots__ = ("_width", "_height", "_path", "_off_path", "_total_path_pixels")

    def __init__(self, *, path: np.ndarray, off_path: np.ndarray) -> None:
        if path.shape != off_path.shape or path.ndim != 2:
            raise ConfigurationError("path and off_path grids must share one 2D shape")
        self._height, self._width = (int(v) for v in path.shape)
        self._path = path.astype(bool, copy=True)
        self._off_path = off_path.astype(bool, copy=True)
        self._path.setflags(write=False)
        self._off_path.setflags(write=False)
        self._total_path_pixels = int(np.count_nonzero(self._path))

    @classmethod
    def from_intensities(
        cls,
        intensities: np.ndarray | Sequence[Sequence[int]],
        *,
        width: int,
        height: int,
        darkness_threshold: int = DEFAULT_DARKNESS_THRESHOLD,
        off_path_threshold: int | None = None,
    ) -> "MaskIndex":
        """Classify a row-major (height, width) grid of 0-255 intensities."""

        grid = np.asarray(intensities)
        if grid.ndim != 2:
            raise ConfigurationError(f"mask must be a 2D grid, got {grid.ndim} dimensions")
        if grid.shape != (int(height), int(width)):
            raise ConfigurationError(
                f"mask is {grid.shape[1]}x{grid.shape[0]}, play field is {int(width)}x{int(height)}"
            )
        if off_path_threshold is not None and off_path_threshold < darkness_threshold:
            raise ConfigurationError("off_path_threshold must be >= darkness_threshold")

        grid = grid.astype(np.int32, copy=False)
        path = grid < int(darkness_threshold)
        if off_path_threshold is None:
            off_path = ~path
        else:
            off_path = grid > int(off_path_threshold)

        index = cls(path=path, off_path=off_path)
        logger.info(
            "Mask %dx%d classified: %d target pixels to cover",
            index.width,
            index.height,
            index.total_path_pixels,
        )
        return index

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def total_path_pixels(self) -> int:
        return self._total_path_pixels

    @property
    def is_degenerate(self) -> bool:
        return self._total_path_pixels == 0

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def classify(self, x: int, y: int) -> PixelClass:
        if not self.in_bounds(x, y):
            return PixelClass.OUT_OF_BOUNDS
        if self._path[y, x]:
            return PixelClass.PATH
        if self._off_path[y, x]:
            return PixelClass.BACKGROUND
        return PixelClass.MARGIN

    def is_path(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and bool(self._path[y, x])

    def is_off_path(self, x: int, y: int) -> bool:
        # Out-of-bounds samples count as off the path.
        return not self.in_bounds(x, y) or bool(self._off_path[y, x])

    def require_scorable(self) -> None:
        if self.is_degenerate:
            raise DegenerateMaskError(
                f"mask {self._width}x{self._height} has no pixels darker than the path threshold"
            )
