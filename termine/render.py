from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Tuple, Protocol

Color = Tuple[int, int, int]


class Style(IntEnum):
    NORMAL = 0
    BOLD = 1
    DIM = 2
    REVERSE = 7


class RenderFailure(RuntimeError):
    """A draw or status call could not be completed."""


class RenderAdapter(Protocol):
    def draw(self, x: int, y: int, style: Style, bg: Color, fg: Color, text: str) -> None: ...

    def status(self, text: str) -> None: ...


class RecordingRenderer:
    """In-memory screen for tests and headless runs."""

    def __init__(self) -> None:
        self.screen: Dict[Tuple[int, int], Tuple[Style, Color, Color, str]] = {}
        self.draws = 0
        self.statuses: List[str] = []

    def draw(self, x: int, y: int, style: Style, bg: Color, fg: Color, text: str) -> None:
        self.screen[(x, y)] = (style, bg, fg, text)
        self.draws += 1

    def status(self, text: str) -> None:
        self.statuses.append(text)

    def text_at(self, x: int, y: int) -> str:
        entry = self.screen.get((x, y))
        return entry[3] if entry else ""

    def style_at(self, x: int, y: int) -> Style:
        entry = self.screen.get((x, y))
        return entry[0] if entry else Style.NORMAL
