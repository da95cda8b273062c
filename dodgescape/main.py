#!/usr/bin/env python3
"""
DODGESCAPE - Terminal Arrow Dodger
===================================
Arrows stream in from every edge and curve after you. Every ten seconds a
telegraphed pattern sweeps the field. Survive as long as you can.

Controls:
    WASD / arrows  - Move (momentum-based)
    P              - Pause
    R              - Restart (after game over)
    Q/ESC          - Quit
"""

import sys
import time
import random
import logging
from typing import List, Optional

try:
    from blessed import Terminal
except ImportError:
    print("ERROR: 'blessed' library required. Install with: pip install blessed")
    sys.exit(1)

from .config import GameConfig, parse_args, config_from_args
from .engine import (
    GameRenderer, arrow_glyph,
    NEON_CYAN, NEON_MAGENTA, NEON_YELLOW, NEON_GREEN, NEON_RED,
    WARNING_RED, GRAY_MED, GRAY_DARK, GRAY_DARKER, WHITE
)
from .player import InputHandler
from .scores import HighScoreStore, MemoryScoreStore
from .session import (
    Session, SessionEvent, SessionStatus, FrameSnapshot,
    EVENT_STARTED, EVENT_GAME_OVER, COUNTDOWN_GO
)


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MIN_WIDTH = 60
MIN_HEIGHT = 20

TITLE_ART = [
    r" ___   ___  ___   ___ ___ ___  ___   _   ___ ___ ",
    r"|   \ / _ \|   \ / __| __/ __|/ __| /_\ | _ \ __|",
    r"| |) | (_) | |) | (_ | _|\__ \ (__ / _ \|  _/ _| ",
    r"|___/ \___/|___/ \___|___|___/\___/_/ \_\_| |___|",
]


# =============================================================================
# UI RENDERING
# =============================================================================

def render_play_area(renderer: GameRenderer, snap: FrameSnapshot):
    """Warnings underneath, then arrows, then the player on top."""
    for warning in snap.warnings:
        renderer.shade_world_rect(warning.x, warning.y, warning.width,
                                  warning.height, WARNING_RED)

    for arrow in snap.arrows:
        renderer.put_world(arrow.x, arrow.y, arrow_glyph(arrow.angle), arrow.color)

    if snap.player is not None:
        renderer.put_world(snap.player.x, snap.player.y, snap.player.char, snap.player.color)


def render_ui(renderer: GameRenderer, snap: FrameSnapshot):
    """Render the HUD in the bottom rows."""
    ui_y = renderer.game_height
    width = renderer.width

    renderer.put_string(0, ui_y, '=' * width, GRAY_DARK)
    renderer.put_string(2, ui_y, ' DODGESCAPE ', NEON_MAGENTA)

    status_text = f' TIME:{snap.elapsed:6.2f}  BEST:{snap.best_score:6.2f} '
    renderer.put_string(width - len(status_text) - 1, ui_y, status_text, NEON_YELLOW)

    arrows = len(snap.arrows)
    renderer.put_string(2, ui_y + 1, f'ARROWS:{arrows:<4}', GRAY_MED)
    controls = 'WASD/ARROWS:Move  P:Pause  Q:Quit'
    renderer.put_string(width - len(controls) - 2, ui_y + 1, controls, GRAY_DARKER)


def render_title_screen(renderer: GameRenderer, best_score: float, frame: int):
    height = renderer.game_height
    art_y = height // 2 - 5
    for i, line in enumerate(TITLE_ART):
        renderer.put_centered(art_y + i, line, NEON_MAGENTA if i % 2 == 0 else NEON_CYAN)

    y = art_y + len(TITLE_ART) + 1
    renderer.put_centered(y, 'Dodge the arrows. Survive.', GRAY_MED)
    renderer.put_centered(y + 1, f'BEST: {best_score:.2f}s', NEON_YELLOW)

    if (frame // 30) % 2 == 0:
        renderer.put_centered(y + 3, '[ PRESS ANY KEY TO START ]', NEON_GREEN)

    renderer.put_centered(y + 5, 'WASD / ARROWS - Move    P - Pause    Q - Quit', GRAY_DARK)
    renderer.draw_box(0, 0, renderer.width, height, GRAY_DARKER, '.')


def render_countdown(renderer: GameRenderer, value):
    text = 'GO!' if value == COUNTDOWN_GO else str(value)
    color = NEON_GREEN if value == COUNTDOWN_GO else NEON_YELLOW
    cy = renderer.game_height // 2
    renderer.put_centered(cy - 1, '=' * 9, GRAY_DARK)
    renderer.put_centered(cy, f'[ {text:^3} ]', color)
    renderer.put_centered(cy + 1, '=' * 9, GRAY_DARK)


def render_pause_overlay(renderer: GameRenderer):
    cy = renderer.game_height // 2
    renderer.put_centered(cy, '[ PAUSED ]', NEON_CYAN)
    renderer.put_centered(cy + 1, 'P - Resume    Q - Quit', GRAY_MED)


def render_game_over(renderer: GameRenderer, snap: FrameSnapshot, frame: int):
    info = snap.game_over
    cy = renderer.game_height // 2 - 2
    renderer.put_centered(cy, '[ GAME OVER ]', NEON_RED)
    if info is not None:
        renderer.put_centered(cy + 2, f'SURVIVED: {info.score:.2f}s', NEON_YELLOW)
        if info.new_best:
            renderer.put_centered(cy + 3, '*** NEW BEST ***', WHITE)
        else:
            renderer.put_centered(cy + 3, f'BEST: {info.best_score:.2f}s', GRAY_MED)
    if (frame // 30) % 2 == 0:
        renderer.put_centered(cy + 5, '[ R - RESTART ]    [ Q - QUIT ]', NEON_CYAN)


# =============================================================================
# APP
# =============================================================================

class GameApp:
    """Terminal front end: keyboard -> session actions, snapshot -> screen."""

    def __init__(self, term: Terminal, config: GameConfig, score_store,
                 rng: Optional[random.Random] = None):
        self.term = term
        self.config = config
        self.renderer = GameRenderer(term, config.cell_width, config.cell_height)
        self.input_handler = InputHandler()
        self.session = Session(config, self.renderer.play_area, score_store, rng)
        self.session.subscribe(self._on_session_event)

        self.running = True
        self.frame = 0

    def _on_session_event(self, event: SessionEvent):
        if event.kind == EVENT_STARTED:
            # Keys tapped during the countdown do not carry into the run
            self.input_handler.release_all()
        elif event.kind == EVENT_GAME_OVER:
            self.renderer.trigger_shake(intensity=3, frames=12)
            self.input_handler.release_all()

    def check_resize(self):
        if (self.term.width, self.term.height) != (self.renderer.width, self.renderer.height):
            logger.debug('Terminal resized to %dx%d', self.term.width, self.term.height)
            self.renderer.resize(self.term.width, self.term.height)
            print(self.term.home + self.term.clear, end='', flush=True)

    def handle_input(self, now: float):
        """Drain all pending input from the terminal, then apply actions."""
        key = self.term.inkey(timeout=0)
        while key:
            self.input_handler.process_key(key)
            key = self.term.inkey(timeout=0)

        handler = self.input_handler
        if handler.consume_quit():
            self.running = False
            return

        status = self.session.status
        started = handler.consume_any_key()
        if status is SessionStatus.IDLE and started:
            handler.release_all()
            self.session.start(now)
        if handler.consume_pause():
            self.session.toggle_pause(now)
        if handler.consume_restart():
            self.session.restart(now)

    def update(self, now: float):
        self.frame += 1
        if self.session.status is SessionStatus.RUNNING:
            self.input_handler.update()
        self.session.update(now, self.input_handler.pressed_directions())

    def render(self):
        renderer = self.renderer
        snap = self.session.snapshot()
        renderer.begin_frame()

        if snap.status is SessionStatus.IDLE:
            render_title_screen(renderer, snap.best_score, self.frame)
        else:
            render_play_area(renderer, snap)
            render_ui(renderer, snap)
            if snap.status is SessionStatus.COUNTDOWN:
                render_countdown(renderer, snap.countdown)
            elif snap.status is SessionStatus.PAUSED:
                render_pause_overlay(renderer)
            elif snap.status is SessionStatus.OVER:
                render_game_over(renderer, snap, self.frame)

        output = renderer.end_frame()
        if output:
            print(output, end='', flush=True)


# =============================================================================
# MAIN LOOP
# =============================================================================

def configure_logging(log_file: Optional[str], level: str):
    """Log to a file only; the terminal belongs to the game."""
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=getattr(logging, level),
            format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        )
    else:
        logging.getLogger('dodgescape').addHandler(logging.NullHandler())


def main(argv: Optional[List[str]] = None):
    """Entry point. Sets up the terminal and runs the frame loop."""
    args = parse_args(argv)
    configure_logging(args.log_file, args.log_level)
    config = config_from_args(args)

    store = MemoryScoreStore() if args.no_save else HighScoreStore(args.scores)
    rng = random.Random(args.seed)

    term = Terminal()
    if term.width < MIN_WIDTH or term.height < MIN_HEIGHT:
        print(
            f'Terminal too small: {term.width}x{term.height}. '
            f'Minimum: {MIN_WIDTH}x{MIN_HEIGHT}'
        )
        sys.exit(1)

    frame_time = 1.0 / config.target_fps
    logger.info('Starting at %d FPS, seed=%s', config.target_fps, args.seed)

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        app = GameApp(term, config, store, rng)
        print(term.home + term.clear, end='', flush=True)

        while app.running:
            frame_start = time.perf_counter()
            now = frame_start * 1000.0

            app.check_resize()
            app.handle_input(now)
            app.update(now)
            app.render()

            elapsed = time.perf_counter() - frame_start
            sleep_time = frame_time - elapsed
            if sleep_time > 0.001:
                time.sleep(sleep_time * 0.9)

        print(term.normal, end='', flush=True)


if __name__ == '__main__':
    main()
