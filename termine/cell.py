from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, Optional

# high nibble flags; only OPENED and FORCED are read by the game
FORCED = 0x80
FLAGGED = 0x40
QUESTION = 0x20
OPENED = 0x10

VALUE_MASK = 0x0F
MINE = 0x0F


class InvalidCoordinate(ValueError):
    """A grid coordinate fell outside the board."""


@dataclass(frozen=True)
class Cell:
    opened: bool
    forced: bool
    value: int

    @property
    def is_mine(self) -> bool:
        return self.value == MINE

    @property
    def is_opened(self) -> bool:
        return self.opened

    @property
    def is_forced_open(self) -> bool:
        return self.forced

    @property
    def adjacency_value(self) -> Optional[int]:
        if self.is_mine:
            return None
        return self.value

    def to_byte(self) -> int:
        return encode(self.opened, self.forced, self.value)


def encode(opened: bool, forced: bool, value: int) -> int:
    b = value & VALUE_MASK
    if opened:
        b |= OPENED
    if forced:
        b |= FORCED
    return b


def decode(b: int) -> Cell:
    return Cell(opened=bool(b & OPENED), forced=bool(b & FORCED), value=b & VALUE_MASK)


class CellGrid:
    """Row-major byte grid of packed cells."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.data = bytearray(width * height)

    @property
    def total(self) -> int:
        return self.width * self.height

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def index(self, row: int, col: int) -> int:
        if not self.in_bounds(row, col):
            raise InvalidCoordinate(f"out of bounds: ({row}, {col})")
        return row * self.width + col

    def coords(self, idx: int) -> Tuple[int, int]:
        return divmod(idx, self.width)

    def neighbors(self, r: int, c: int) -> Iterator[Tuple[int, int]]:
        for nr in range(max(0, r - 1), min(self.height, r + 2)):
            for nc in range(max(0, c - 1), min(self.width, c + 2)):
                if nr == r and nc == c:
                    continue
                yield nr, nc

    def get(self, row: int, col: int) -> int:
        return self.data[self.index(row, col)]

    def set(self, row: int, col: int, b: int) -> None:
        self.data[self.index(row, col)] = b

    def cell(self, row: int, col: int) -> Cell:
        return decode(self.get(row, col))

    def cells(self) -> Iterator[Tuple[int, int, Cell]]:
        for i, b in enumerate(self.data):
            r, c = self.coords(i)
            yield r, c, decode(b)
