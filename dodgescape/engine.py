"""
Rendering Engine
=================
Double-buffered terminal renderer.

The simulation works in play-area units; each terminal cell covers
``cell_width`` x ``cell_height`` units (cells are about twice as tall as
they are wide, hence the default 10 x 20).
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import math
import random

try:
    from blessed import Terminal
except ImportError:
    raise ImportError("'blessed' library required. Install with: pip install blessed")


# ANSI 256 color constants
NEON_CYAN = 51
NEON_MAGENTA = 201
NEON_YELLOW = 226
NEON_GREEN = 46
NEON_RED = 196

WARNING_RED = 52
GRAY_MED = 245
GRAY_DARK = 238
GRAY_DARKER = 235

WHITE = 255

DEFAULT_FG = 7
NO_BG = -1  # Terminal default background

# (char, fg, bg)
Glyph = Tuple[str, int, int]
BLANK: Glyph = (' ', DEFAULT_FG, NO_BG)

# Heading glyphs by octant, starting east and turning clockwise on screen (y down)
ARROW_GLYPHS = ['→', '↘', '↓', '↙', '←', '↖', '↑', '↗']


def arrow_glyph(angle: float) -> str:
    """Pick the arrow character closest to a heading in radians."""
    octant = int(round(angle / (math.pi / 4))) % 8
    return ARROW_GLYPHS[octant]


def world_to_cell(x: float, y: float, cell_width: float,
                  cell_height: float) -> Tuple[int, int]:
    return int(math.floor(x / cell_width)), int(math.floor(y / cell_height))


class DoubleBuffer:
    """
    Two grids of glyphs. Drawing goes to ``back``; ``present`` emits only the
    runs of cells that differ from ``front`` and then swaps the grids.
    """

    def __init__(self, term: Terminal, width: Optional[int] = None,
                 height: Optional[int] = None):
        self.term = term
        self.width = term.width if width is None else width
        self.height = term.height if height is None else height
        self.front: List[List[Glyph]] = self._blank_grid()
        self.back: List[List[Glyph]] = self._blank_grid()

    def _blank_grid(self) -> List[List[Glyph]]:
        return [[BLANK] * self.width for _ in range(self.height)]

    def resize(self, width: int, height: int):
        self.width, self.height = width, height
        self.front = self._blank_grid()
        self.back = self._blank_grid()

    def clear_back(self):
        for row in self.back:
            row[:] = [BLANK] * self.width

    def put(self, x: int, y: int, char: str, fg_color: int = DEFAULT_FG,
            bg_color: int = NO_BG):
        if 0 <= x < self.width and 0 <= y < self.height:
            self.back[y][x] = (char or ' ', fg_color, bg_color)

    def shade(self, x: int, y: int, bg_color: int):
        """Change only the background of a cell."""
        if 0 <= x < self.width and 0 <= y < self.height:
            char, fg, _ = self.back[y][x]
            self.back[y][x] = (char, fg, bg_color)

    def put_string(self, x: int, y: int, text: str, fg_color: int = DEFAULT_FG,
                   bg_color: int = NO_BG):
        for offset, char in enumerate(text):
            self.put(x + offset, y, char, fg_color, bg_color)

    def _style(self, fg: int, bg: int) -> str:
        style = self.term.normal
        if bg != NO_BG:
            style += self.term.on_color(bg)
        return style + self.term.color(fg)

    def present(self) -> str:
        """Terminal output for every changed run, then swap buffers."""
        out = []
        for y, (new_row, old_row) in enumerate(zip(self.back, self.front)):
            x = 0
            while x < self.width:
                if new_row[x] == old_row[x]:
                    x += 1
                    continue
                out.append(self.term.move_xy(x, y))
                style = None
                while x < self.width and new_row[x] != old_row[x]:
                    char, fg, bg = new_row[x]
                    if (fg, bg) != style:
                        style = (fg, bg)
                        out.append(self._style(fg, bg))
                    out.append(char)
                    x += 1
        self.front, self.back = self.back, self.front
        return ''.join(out)


@dataclass
class ScreenShake:
    """Random play-area offset for a few frames."""
    intensity: int = 2
    frames: int = 0
    dx: int = 0
    dy: int = 0

    def start(self, intensity: int, frames: int):
        self.intensity = intensity
        self.frames = max(self.frames, frames)

    def step(self):
        if self.frames <= 0:
            self.dx = self.dy = 0
            return
        vertical = max(1, self.intensity // 2)
        self.dx = random.randint(-self.intensity, self.intensity)
        self.dy = random.randint(-vertical, vertical)
        self.frames -= 1


@dataclass
class GameRenderer:
    """
    Play-area drawing in world units, HUD in cells.

    The bottom ``ui_rows`` rows hold the HUD; everything above is the
    play area. Screen shake offsets play-area drawing only.
    """
    term: Terminal
    cell_width: float = 10.0
    cell_height: float = 20.0
    ui_rows: int = 2
    buffer: DoubleBuffer = field(init=False)
    shake: ScreenShake = field(default_factory=ScreenShake)

    def __post_init__(self):
        self.buffer = DoubleBuffer(self.term)

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    @property
    def game_height(self) -> int:
        return max(0, self.buffer.height - self.ui_rows)

    def play_area(self) -> Tuple[float, float]:
        """Current play-area size in world units."""
        return self.width * self.cell_width, self.game_height * self.cell_height

    def trigger_shake(self, intensity: int = 2, frames: int = 3):
        self.shake.start(intensity, frames)

    def begin_frame(self):
        self.buffer.clear_back()

    def end_frame(self) -> str:
        self.shake.step()
        return self.buffer.present()

    def to_cell(self, x: float, y: float) -> Tuple[int, int]:
        cx, cy = world_to_cell(x, y, self.cell_width, self.cell_height)
        return cx + self.shake.dx, cy + self.shake.dy

    def put_world(self, x: float, y: float, char: str, fg_color: int = DEFAULT_FG):
        """Draw a character at a world position, clipped to the play area."""
        cx, cy = self.to_cell(x, y)
        if 0 <= cy < self.game_height:
            self.buffer.put(cx, cy, char, fg_color)

    def shade_world_rect(self, x: float, y: float, w: float, h: float, bg_color: int):
        """Shade every play-area cell a world rectangle touches."""
        x0, y0 = self.to_cell(x, y)
        x1, y1 = self.to_cell(x + w - 1e-6, y + h - 1e-6)
        for cy in range(max(0, y0), min(self.game_height, y1 + 1)):
            for cx in range(max(0, x0), min(self.width, x1 + 1)):
                self.buffer.shade(cx, cy, bg_color)

    def put_string(self, x: int, y: int, text: str, fg_color: int = DEFAULT_FG):
        """HUD text at cell coordinates, unaffected by shake."""
        self.buffer.put_string(x, y, text, fg_color)

    def put_centered(self, y: int, text: str, fg_color: int = DEFAULT_FG):
        self.buffer.put_string(self.width // 2 - len(text) // 2, y, text, fg_color)

    def resize(self, width: int, height: int):
        self.buffer.resize(width, height)

    def draw_box(self, x: int, y: int, w: int, h: int, color: int = GRAY_DARK,
                 char: str = '#'):
        """Outline a rectangle of cells."""
        right, bottom = x + w - 1, y + h - 1
        for cx in range(x, x + w):
            self.buffer.put(cx, y, char, color)
            self.buffer.put(cx, bottom, char, color)
        for cy in range(y + 1, bottom):
            self.buffer.put(x, cy, char, color)
            self.buffer.put(right, cy, char, color)
