from __future__ import annotations

import numpy as np
import pytest

from path_trace.mask import (
    ConfigurationError,
    DegenerateMaskError,
    MaskIndex,
    PixelClass,
)


def test_pixels_below_darkness_threshold_are_path() -> None:
    mask = MaskIndex.from_intensities([[0, 49, 50, 255]], width=4, height=1)

    assert mask.is_path(0, 0)
    assert mask.is_path(1, 0)
    assert not mask.is_path(2, 0)
    assert not mask.is_path(3, 0)
    assert mask.total_path_pixels == 2
    assert mask.classify(2, 0) is PixelClass.BACKGROUND


def test_grid_is_row_major() -> None:
    grid = np.full((3, 2), 255, dtype=np.uint8)
    grid[2, 1] = 0  # row 2, column 1
    mask = MaskIndex.from_intensities(grid, width=2, height=3)

    assert mask.is_path(1, 2)
    assert not mask.is_path(2, 1)
    assert (mask.width, mask.height) == (2, 3)


def test_out_of_bounds_is_off_path() -> None:
    mask = MaskIndex.from_intensities([[0, 0], [0, 0]], width=2, height=2)

    for x, y in ((-1, 0), (0, -1), (2, 0), (0, 2)):
        assert mask.classify(x, y) is PixelClass.OUT_OF_BOUNDS
        assert not mask.is_path(x, y)
        assert mask.is_off_path(x, y)


def test_off_path_threshold_creates_margin_band() -> None:
    mask = MaskIndex.from_intensities(
        [[10, 60, 100, 101]],
        width=4,
        height=1,
        off_path_threshold=100,
    )

    assert [mask.classify(x, 0) for x in range(4)] == [
        PixelClass.PATH,
        PixelClass.MARGIN,
        PixelClass.MARGIN,
        PixelClass.BACKGROUND,
    ]
    assert not mask.is_off_path(1, 0)
    assert mask.is_off_path(3, 0)
    assert mask.total_path_pixels == 1


def test_custom_darkness_threshold() -> None:
    mask = MaskIndex.from_intensities([[0, 90, 120]], width=3, height=1, darkness_threshold=100)
    assert mask.total_path_pixels == 2


def test_dimension_mismatch_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        MaskIndex.from_intensities([[0, 0, 0]], width=4, height=1)
    with pytest.raises(ConfigurationError):
        MaskIndex.from_intensities([0, 0, 0], width=3, height=1)


def test_off_path_threshold_below_darkness_rejected() -> None:
    with pytest.raises(ConfigurationError):
        MaskIndex.from_intensities([[0]], width=1, height=1, off_path_threshold=10)


def test_empty_path_is_degenerate() -> None:
    mask = MaskIndex.from_intensities([[255] * 5], width=5, height=1)

    assert mask.total_path_pixels == 0
    assert mask.is_degenerate
    with pytest.raises(DegenerateMaskError):
        mask.require_scorable()


def test_index_is_not_affected_by_later_source_changes() -> None:
    grid = np.zeros((1, 3), dtype=np.uint8)
    mask = MaskIndex.from_intensities(grid, width=3, height=1)
    grid[0, 1] = 255

    assert mask.is_path(1, 0)
    assert mask.total_path_pixels == 3
