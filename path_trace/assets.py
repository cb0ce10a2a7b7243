"""pygame-side image handling for the tracing game.

The scoring core never imports pygame; this module turns decoded surfaces
into a :class:`~path_trace.mask.MaskIndex` and provides the built-in course
used when no mask image is configured.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pygame

from .mask import ConfigurationError, MaskIndex
from .trace_core import TraceConfig

logger = logging.getLogger(__name__)

PATH_COLOR = (0, 0, 0)
PAPER_COLOR = (255, 255, 255)
DEFAULT_COURSE_WIDTH_PX = 28

# Waypoints of the built-in course, as fractions of the play field.
_DEFAULT_COURSE = (
    (0.15, 0.10),
    (0.85, 0.18),
    (0.20, 0.38),
    (0.80, 0.55),
    (0.25, 0.72),
    (0.75, 0.90),
)


def load_image(path: Path) -> pygame.Surface:
    """Decode an image file, reporting failures as configuration errors."""

    if not path.is_file():
        raise ConfigurationError(f"image not found: {path}")
    try:
        return pygame.image.load(str(path))
    except pygame.error as exc:
        raise ConfigurationError(f"could not decode image {path}: {exc}") from exc


def flatten_on_paper(surface: pygame.Surface) -> pygame.Surface:
    """Composite onto white so transparent areas read as background."""

    flat = pygame.Surface(surface.get_size(), 0, 32)
    flat.fill(PAPER_COLOR)
    flat.blit(surface, (0, 0))
    return flat


def mask_index_from_surface(surface: pygame.Surface, *, config: TraceConfig) -> MaskIndex:
    w, h = surface.get_size()
    if (w, h) != (config.width, config.height):
        # Masks are never resized; a wrong size is a setup mistake.
        raise ConfigurationError(f"mask image is {w}x{h}, play field is {config.width}x{config.height}")

    red = pygame.surfarray.array_red(flatten_on_paper(surface))
    # surfarray is column-major (x, y); the index wants rows.
    return MaskIndex.from_intensities(
        red.T,
        width=config.width,
        height=config.height,
        darkness_threshold=config.darkness_threshold,
        off_path_threshold=config.off_path_threshold,
    )


def draw_default_course(width: int, height: int) -> pygame.Surface:
    surface = pygame.Surface((width, height), 0, 32)
    surface.fill(PAPER_COLOR)
    points = [(int(round(fx * width)), int(round(fy * height))) for fx, fy in _DEFAULT_COURSE]
    pygame.draw.lines(surface, PATH_COLOR, False, points, DEFAULT_COURSE_WIDTH_PX)
    # Round the joints so corners have no notches.
    for p in points:
        pygame.draw.circle(surface, PATH_COLOR, p, DEFAULT_COURSE_WIDTH_PX // 2)
    return surface


def load_course(mask_path: Path | None, *, config: TraceConfig) -> tuple[pygame.Surface, MaskIndex]:
    """Return the visible course surface and its classified mask."""

    if mask_path is None:
        surface = draw_default_course(config.width, config.height)
    else:
        surface = flatten_on_paper(load_image(mask_path))
    return surface, mask_index_from_surface(surface, config=config)


def load_background(path: Path | None, size: tuple[int, int]) -> pygame.Surface | None:
    """Best-effort background image, stretched to the play field."""

    if path is None:
        return None
    try:
        image = load_image(path)
    except ConfigurationError as exc:
        logger.warning("Background image skipped: %s", exc)
        return None
    if image.get_size() != size:
        image = pygame.transform.scale(image, size)
    return image
