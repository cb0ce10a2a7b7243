"""Pygame UI shell for the Path Trace game.

Screens:
- Start menu (Start / Quit)
- Trace screen: hold the left button and follow the dark path
- Result screen: verdict and coverage, Enter returns to the start menu

Deterministic scoring/state lives in path_trace.trace_core and path_trace.mask.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import pygame

from .assets import load_background, load_course
from .geometry import Point
from .mask import DegenerateMaskError, MaskIndex
from .results import ResultText, result_text
from .trace_core import AttemptOutcome, Phase, TraceConfig, build_trace_attempt

logger = logging.getLogger(__name__)

MASK_PATH_ENV = "PATH_TRACE_MASK_PATH"
BACKGROUND_PATH_ENV = "PATH_TRACE_BACKGROUND_PATH"
WIN_THRESHOLD_ENV = "PATH_TRACE_WIN_THRESHOLD"
RESET_ON_DRAG_ENV = "PATH_TRACE_RESET_ON_DRAG"
FORCE_LOSS_ENV = "PATH_TRACE_FORCE_LOSS_ON_FAIL"

TARGET_FPS = 60
STROKE_COLOR = (255, 0, 0)
STROKE_WIDTH_PX = 5
WIN_COLOR = (76, 175, 80)
LOSS_COLOR = (244, 67, 54)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


def _env_path(name: str) -> Path | None:
    raw = os.environ.get(name, "").strip()
    return Path(raw).expanduser() if raw else None


def _env_flag(name: str, fallback: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if raw == "":
        return fallback
    return raw in ("1", "true", "yes", "on")


def _env_float(name: str, fallback: float) -> float:
    raw = os.environ.get(name, "").strip()
    if raw == "":
        return fallback
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r; using %s", name, raw, fallback)
        return fallback


def config_from_env() -> TraceConfig:
    """Gameplay options from PATH_TRACE_* environment variables."""

    defaults = TraceConfig()
    return TraceConfig(
        win_threshold_pct=_env_float(WIN_THRESHOLD_ENV, defaults.win_threshold_pct),
        reset_on_each_drag=_env_flag(RESET_ON_DRAG_ENV, defaults.reset_on_each_drag),
        off_path_forces_loss=_env_flag(FORCE_LOSS_ENV, defaults.off_path_forces_loss),
    )


class App:
    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def top(self) -> Screen | None:
        return self._screens[-1] if self._screens else None

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the root screen; it handles its own quit behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def replace(self, screen: Screen) -> None:
        self.pop()
        self.push(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class MenuScreen:
    """Start screen; it is the root of the stack, so Esc quits the game."""

    def __init__(self, app: App, title: str, items: list[MenuItem]) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._title_font = pygame.font.Font(None, 48)
        self._item_font = pygame.font.Font(None, 34)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_UP:
                self._selected = (self._selected - 1) % len(self._items)
            elif event.key == pygame.K_DOWN:
                self._selected = (self._selected + 1) % len(self._items)
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self._items[self._selected].action()
            elif event.key == pygame.K_ESCAPE:
                self._app.quit()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            idx = self._item_at(event.pos)
            if idx is not None:
                self._selected = idx
                self._items[idx].action()

    def _row_rects(self, size: tuple[int, int]) -> list[pygame.Rect]:
        w, h = size
        row_w = max(160, min(320, w - 80))
        row_h = 48
        gap = 14
        total_h = row_h * len(self._items) + gap * max(0, len(self._items) - 1)
        y = max(h // 3, (h - total_h) // 2)
        rects = []
        for _ in self._items:
            rects.append(pygame.Rect((w - row_w) // 2, y, row_w, row_h))
            y += row_h + gap
        return rects

    def _item_at(self, pos: tuple[int, int]) -> int | None:
        surface = pygame.display.get_surface()
        if surface is None:
            return None
        for idx, rect in enumerate(self._row_rects(surface.get_size())):
            if rect.collidepoint(pos):
                return idx
        return None

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill((45, 45, 45))

        title = self._title_font.render(self._title, True, (240, 240, 240))
        surface.blit(title, title.get_rect(center=(w // 2, h // 5)))

        for idx, (item, row) in enumerate(zip(self._items, self._row_rects((w, h)))):
            selected = idx == self._selected
            pygame.draw.rect(surface, (240, 240, 240) if selected else (70, 70, 70), row, border_radius=6)
            color = (30, 30, 30) if selected else (230, 230, 230)
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, text.get_rect(center=row.center))

        hint = self._hint_font.render("Enter/Click: Select  |  Esc: Quit", True, (170, 170, 170))
        surface.blit(hint, hint.get_rect(midbottom=(w // 2, h - 12)))


class TraceCanvas:
    """Persistent drawing buffer for the player's stroke."""

    def __init__(self, size: tuple[int, int]) -> None:
        self._surface = pygame.Surface(size, pygame.SRCALPHA)
        self.clear()

    @property
    def surface(self) -> pygame.Surface:
        return self._surface

    def draw_segment(self, start: Point, end: Point) -> None:
        pygame.draw.line(self._surface, STROKE_COLOR, (start.x, start.y), (end.x, end.y), STROKE_WIDTH_PX)

    def clear(self) -> None:
        self._surface.fill((0, 0, 0, 0))

    def ink_pixels(self) -> int:
        return int(pygame.mask.from_surface(self._surface).count())


class TraceScreen:
    """One round: a fresh attempt on the shared mask.

    Implements AttemptListener so the attempt reports straight to the screen.
    """

    def __init__(
        self,
        app: App,
        *,
        mask: MaskIndex,
        config: TraceConfig,
        course: pygame.Surface,
        background: pygame.Surface | None,
        on_done: Callable[[AttemptOutcome | None], None],
    ) -> None:
        self._app = app
        self._course = course
        self._background = background
        self._on_done = on_done
        self._canvas = TraceCanvas((config.width, config.height))
        self._attempt = build_trace_attempt(mask=mask, config=config, listener=self)
        self._done = False
        self._finished: AttemptOutcome | None = None
        self._hud_font = pygame.font.Font(None, 26)
        self._notice: str | None = None

        try:
            mask.require_scorable()
        except DegenerateMaskError as exc:
            logger.warning("Round cannot be scored: %s", exc)
            self._notice = "This course has no path; the round cannot be scored."

    @property
    def canvas(self) -> TraceCanvas:
        return self._canvas

    def on_segment(self, start: Point, end: Point) -> None:
        self._canvas.draw_segment(start, end)

    def on_clear(self) -> None:
        self._canvas.clear()

    def on_finished(self, outcome: AttemptOutcome) -> None:
        # Screen switch waits until the current event is fully handled.
        self._finished = outcome

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            if not self._attempt.is_active:
                self._app.pop()
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._attempt.start(Point(float(event.pos[0]), float(event.pos[1])))
        elif event.type == pygame.MOUSEMOTION and event.buttons[0]:
            self._attempt.feed(Point(float(event.pos[0]), float(event.pos[1])))
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and self._attempt.is_active:
            self._attempt.end()

        self._sync_done()

    def _sync_done(self) -> None:
        if self._done:
            return
        if self._finished is not None:
            self._done = True
            self._on_done(self._finished)
        elif self._attempt.locked:
            # Empty mask: the attempt locks without a verdict.
            self._done = True
            self._on_done(None)

    def render(self, surface: pygame.Surface) -> None:
        surface.fill((45, 45, 45))
        surface.blit(self._background if self._background is not None else self._course, (0, 0))
        surface.blit(self._canvas.surface, (0, 0))

        snap = self._attempt.snapshot()
        status = f"Coverage: {snap.percentage:.2f}%  (win at {snap.win_threshold_pct:.0f}%)"
        if snap.phase is Phase.IDLE:
            status = "Hold the left button and trace the path"
        text = self._hud_font.render(status, True, (20, 20, 20), (235, 235, 235))
        surface.blit(text, (8, 8))

        if self._notice is not None:
            notice = self._hud_font.render(self._notice, True, (255, 255, 255), LOSS_COLOR)
            surface.blit(notice, (8, 12 + text.get_height()))


class ResultScreen:
    def __init__(self, app: App, *, text: ResultText) -> None:
        self._app = app
        self._text = text
        self._title_font = pygame.font.Font(None, 56)
        self._body_font = pygame.font.Font(None, 26)

    @property
    def text(self) -> ResultText:
        return self._text

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key in (
            pygame.K_RETURN,
            pygame.K_KP_ENTER,
            pygame.K_SPACE,
            pygame.K_ESCAPE,
            pygame.K_BACKSPACE,
        ):
            self._app.pop()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill((45, 45, 45))

        color = WIN_COLOR if self._text.is_win else LOSS_COLOR
        title = self._title_font.render(self._text.title, True, color)
        surface.blit(title, title.get_rect(center=(w // 2, h // 3)))

        y = h // 3 + 60
        for line in _wrap(self._body_font, self._text.message, w - 40):
            body = self._body_font.render(line, True, (230, 230, 230))
            surface.blit(body, body.get_rect(center=(w // 2, y)))
            y += body.get_height() + 4

        if self._text.coverage:
            cov = self._body_font.render(self._text.coverage, True, (230, 230, 230))
            surface.blit(cov, cov.get_rect(center=(w // 2, y + 24)))

        hint = self._body_font.render("Press Enter to play again", True, (170, 170, 170))
        surface.blit(hint, hint.get_rect(midbottom=(w // 2, h - 16)))


def _wrap(font: pygame.font.Font, text: str, max_width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = word if current == "" else f"{current} {word}"
        if current and font.size(candidate)[0] > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: TraceConfig | None = None,
    mask_path: Path | None = None,
    app_hook: Callable[[App], None] | None = None,
) -> int:
    cfg = config or config_from_env()
    pygame.init()
    try:
        pygame.display.set_caption("Path Trace")
        surface = pygame.display.set_mode((cfg.width, cfg.height))

        course, mask = load_course(mask_path if mask_path is not None else _env_path(MASK_PATH_ENV), config=cfg)
        background = load_background(_env_path(BACKGROUND_PATH_ENV), (cfg.width, cfg.height))

        clock = pygame.time.Clock()
        app = App(surface=surface)

        def show_result(outcome: AttemptOutcome | None) -> None:
            app.replace(ResultScreen(app, text=result_text(outcome)))

        def start_round() -> None:
            app.push(
                TraceScreen(
                    app,
                    mask=mask,
                    config=cfg,
                    course=course,
                    background=background,
                    on_done=show_result,
                )
            )

        app.push(
            MenuScreen(
                app,
                "Path Trace",
                [
                    MenuItem("Start", start_round),
                    MenuItem("Quit", app.quit),
                ],
            )
        )
        if app_hook is not None:
            app_hook(app)

        frame = 0
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()
            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
