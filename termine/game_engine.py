from __future__ import annotations

import logging
import random
import time
from enum import Enum
from typing import List, Optional, Tuple

from .cell import FORCED, MINE, OPENED, VALUE_MASK, Cell, CellGrid
from .events import Event, Key, KeyEvent, PointerEvent
from .render import Color, RenderAdapter, Style

logger = logging.getLogger(__name__)

BORDER_X = 2
BORDER_Y = 2

DEFAULT_TICK_INTERVAL = 0.01
DEFAULT_BLINK_PERIOD = 80

HIDDEN_FG: Color = (192, 192, 192)
HIDDEN_BG: Color = (8, 8, 8)
OPEN_BG: Color = (32, 32, 32)
MINE_FG: Color = (255, 255, 0)
MINE_BG: Color = (255, 0, 0)
BLINK_FG: Color = (240, 192, 32)
BLINK_BG: Color = (128, 0, 128)
NUMBER_FG = {
    0: (192, 192, 192),
    1: (25, 118, 210),
    2: (56, 142, 60),
    3: (211, 47, 47),
    4: (123, 31, 162),
    5: (93, 64, 55),
    6: (0, 151, 167),
    7: (69, 90, 100),
    8: (158, 158, 158),
}

MOVES = {
    Key.UP: (-1, 0),
    Key.DOWN: (1, 0),
    Key.LEFT: (0, -1),
    Key.RIGHT: (0, 1),
}


class GameState(str, Enum):
    PLAYING = "playing"
    EXPLODED = "exploded"
    SUCCESS = "success"


class Redraw(Enum):
    NONE = 0
    BLINK = 1
    FULL = 2


def screen_pos(row: int, col: int) -> Tuple[int, int]:
    return BORDER_X + col, BORDER_Y + row


def grid_pos(x: int, y: int) -> Tuple[int, int]:
    return y - BORDER_Y, x - BORDER_X


def glyph(cell: Cell) -> Tuple[Style, Color, Color, str]:
    """Style, background, foreground and text for one cell."""
    if not cell.is_opened:
        return Style.NORMAL, HIDDEN_BG, HIDDEN_FG, "."
    style = Style.DIM if cell.is_forced_open else Style.NORMAL
    if cell.is_mine:
        return style, MINE_BG, MINE_FG, "*"
    n = cell.value
    return style, OPEN_BG, NUMBER_FG.get(n, HIDDEN_FG), str(n) if n else " "


class MineField:
    """Minefield state machine.

    Mines are laid out on the first reveal so the starting cursor cell is
    safe whenever the board has room for it. All methods run on the dispatch
    loop's thread; nothing here locks.
    """

    def __init__(
        self,
        width: int,
        height: int,
        num_mines: int,
        rng_seed: Optional[int] = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        blink_period: int = DEFAULT_BLINK_PERIOD,
        cursor: Tuple[int, int] = (0, 0),
    ) -> None:
        if width < 1 or height < 1:
            raise ValueError("invalid board size")
        if num_mines < 0:
            raise ValueError("invalid mine count")
        if blink_period < 2:
            raise ValueError("invalid blink period")
        self.grid = CellGrid(width, height)
        self.width = width
        self.height = height
        self.num_mines = num_mines
        self.rng = random.Random(rng_seed)
        self.tick_interval = tick_interval
        self.blink_period = blink_period
        self.grid.index(*cursor)
        self.cursor = cursor
        self.state = GameState.PLAYING
        self.opened_count = 0
        self.ticks = 0
        self.mines_placed = False
        self.started_at = time.monotonic()

    @classmethod
    def from_layout(cls, rows: List[str], **kwargs) -> "MineField":
        """Build a field with a fixed layout; ``M`` marks a mine."""
        height = len(rows)
        width = len(rows[0]) if rows else 0
        mines = sum(row.count("M") for row in rows)
        field = cls(width, height, mines, **kwargs)
        for r, row in enumerate(rows):
            if len(row) != width:
                raise ValueError("ragged layout")
            for c, ch in enumerate(row):
                if ch == "M":
                    field.grid.set(r, c, MINE)
        field._compute_adjacency()
        field.mines_placed = True
        return field

    @property
    def total_cells(self) -> int:
        return self.grid.total

    @property
    def is_over(self) -> bool:
        return self.state is not GameState.PLAYING

    def cell(self, row: int, col: int) -> Cell:
        return self.grid.cell(row, col)

    # ---------- placement ----------

    def place_mines(self) -> None:
        if self.mines_placed:
            return
        data = self.grid.data
        order = list(range(self.total_cells))
        self.rng.shuffle(order)
        # a board with no room left is filled, cursor cell included
        fill_all = self.num_mines >= self.total_cells
        skip = self.grid.index(*self.cursor)
        placed = 0
        for i in order:
            if placed == self.num_mines:
                break
            if i == skip and not fill_all:
                continue
            data[i] = MINE
            placed += 1
        self._compute_adjacency()
        self.mines_placed = True
        logger.info(f"[termine] placed {placed} mines on {self.width}x{self.height} cursor={self.cursor}")

    def _compute_adjacency(self) -> None:
        data = self.grid.data
        for i in range(self.total_cells):
            if data[i] & VALUE_MASK == MINE:
                continue
            r, c = self.grid.coords(i)
            cnt = 0
            for nr, nc in self.grid.neighbors(r, c):
                if self.grid.get(nr, nc) & VALUE_MASK == MINE:
                    cnt += 1
            data[i] = (data[i] & ~VALUE_MASK) | cnt

    # ---------- reveal ----------

    def reveal(self, row: int, col: int) -> int:
        """Open a cell, cascading through zero cells. Returns cells opened."""
        if self.is_over:
            return 0
        i = self.grid.index(row, col)
        self.place_mines()
        data = self.grid.data
        if data[i] & OPENED:
            return 0
        if data[i] & VALUE_MASK == MINE:
            self.state = GameState.EXPLODED
            logger.info(f"[termine] exploded at ({row}, {col}) opened={self.opened_count}")
            return 0
        opened = 0
        stack = [(row, col)]
        while stack:
            r, c = stack.pop()
            ii = self.grid.index(r, c)
            if data[ii] & OPENED:
                continue
            data[ii] |= OPENED
            opened += 1
            if data[ii] & VALUE_MASK == 0:
                for nr, nc in self.grid.neighbors(r, c):
                    if not data[self.grid.index(nr, nc)] & OPENED:
                        stack.append((nr, nc))
        self.opened_count += opened
        if self.opened_count + self.num_mines == self.total_cells:
            self.state = GameState.SUCCESS
            logger.info(f"[termine] success opened={self.opened_count} mines={self.num_mines}")
        return opened

    def finish(self) -> None:
        """Force open every cell still closed once the game has ended."""
        data = self.grid.data
        for i, b in enumerate(data):
            if not b & OPENED:
                data[i] = b | OPENED | FORCED

    # ---------- input ----------

    def move(self, dr: int, dc: int) -> bool:
        r, c = self.cursor
        nr = min(max(r + dr, 0), self.height - 1)
        nc = min(max(c + dc, 0), self.width - 1)
        if (nr, nc) == self.cursor:
            return False
        self.cursor = (nr, nc)
        return True

    def select(self) -> bool:
        r, c = self.cursor
        if self.grid.get(r, c) & OPENED:
            return False
        self.reveal(r, c)
        if self.is_over:
            self.finish()
        return True

    def handle_input(self, event: Event) -> Redraw:
        if self.is_over:
            return Redraw.NONE
        changed = False
        if isinstance(event, KeyEvent):
            if event.key in MOVES:
                changed = self.move(*MOVES[event.key])
            elif event.key is Key.SELECT:
                changed = self.select()
        elif isinstance(event, PointerEvent):
            row, col = grid_pos(event.x, event.y)
            if self.grid.in_bounds(row, col):
                moved = (row, col) != self.cursor
                self.cursor = (row, col)
                changed = self.select() or moved
        if not changed:
            return Redraw.NONE
        self.ticks = 0
        return Redraw.FULL

    # ---------- timer ----------

    def can_blink(self) -> bool:
        if self.state is GameState.SUCCESS:
            return False
        return not self.grid.get(*self.cursor) & OPENED

    def tick(self) -> Redraw:
        self.ticks += 1
        if self.ticks >= self.blink_period:
            self.ticks = 0
            return Redraw.FULL
        if self.ticks == self.blink_period // 2 and self.can_blink():
            return Redraw.BLINK
        return Redraw.NONE

    # ---------- drawing ----------

    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def status_text(self) -> str:
        return f"[mines {self.num_mines} opened {self.opened_count} {self.elapsed():.2f}s]"

    def draw(self, renderer: RenderAdapter, blink: bool = False) -> None:
        for r, c, cell in self.grid.cells():
            style, bg, fg, text = glyph(cell)
            if (r, c) == self.cursor and not self.is_over:
                if blink and not cell.is_opened:
                    style, bg, fg, text = Style.BOLD, BLINK_BG, BLINK_FG, "*"
                else:
                    style = Style.REVERSE
            x, y = screen_pos(r, c)
            renderer.draw(x, y, style, bg, fg, text)
        renderer.status(self.status_text())

    def to_client_view(self) -> List[str]:
        """Plain text rows of the board as a player would see it."""
        rows = []
        for r in range(self.height):
            rows.append("".join(glyph(self.cell(r, c))[3] for c in range(self.width)))
        return rows
