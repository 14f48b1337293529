"""curses implementations of the render adapter and the input producer."""
from __future__ import annotations

import curses
import logging
import threading
from typing import Dict, Tuple

from termine.events import ChannelDisconnected, EventChannel, PointerEvent, translate_key
from termine.render import Color, RenderFailure, Style

logger = logging.getLogger(__name__)

BASIC_COLORS = {
    curses.COLOR_BLACK: (0, 0, 0),
    curses.COLOR_RED: (205, 0, 0),
    curses.COLOR_GREEN: (0, 205, 0),
    curses.COLOR_YELLOW: (205, 205, 0),
    curses.COLOR_BLUE: (0, 0, 238),
    curses.COLOR_MAGENTA: (205, 0, 205),
    curses.COLOR_CYAN: (0, 205, 205),
    curses.COLOR_WHITE: (229, 229, 229),
}

STYLE_ATTRS = {
    Style.NORMAL: curses.A_NORMAL,
    Style.BOLD: curses.A_BOLD,
    Style.DIM: curses.A_DIM,
    Style.REVERSE: curses.A_REVERSE,
}

POINTER_MASK = curses.BUTTON1_PRESSED | curses.BUTTON1_CLICKED

POLL_INTERVAL = 0.005


def nearest_color(rgb: Color) -> int:
    def dist(item):
        r, g, b = item[1]
        return (r - rgb[0]) ** 2 + (g - rgb[1]) ** 2 + (b - rgb[2]) ** 2

    return min(BASIC_COLORS.items(), key=dist)[0]


class CursesRenderer:
    """Writes cells into a curses window; the status line is row 0.

    ``lock`` guards every curses call; the input thread takes it too.
    """

    def __init__(self, stdscr, lock: threading.Lock) -> None:
        self.stdscr = stdscr
        self.lock = lock
        self.pairs: Dict[Tuple[int, int], int] = {}
        self.has_colors = curses.has_colors()
        if self.has_colors:
            curses.start_color()

    def _pair(self, bg: Color, fg: Color) -> int:
        if not self.has_colors:
            return 0
        key = (nearest_color(fg), nearest_color(bg))
        pair = self.pairs.get(key)
        if pair is None:
            pair = len(self.pairs) + 1
            if pair >= curses.COLOR_PAIRS:
                return 0
            curses.init_pair(pair, *key)
            self.pairs[key] = pair
        return curses.color_pair(pair)

    def draw(self, x: int, y: int, style: Style, bg: Color, fg: Color, text: str) -> None:
        with self.lock:
            try:
                self.stdscr.addstr(y, x, text, STYLE_ATTRS.get(style, curses.A_NORMAL) | self._pair(bg, fg))
            except curses.error as e:
                raise RenderFailure(f"draw failed at ({x}, {y})") from e

    def status(self, text: str) -> None:
        with self.lock:
            try:
                self.stdscr.move(0, 0)
                self.stdscr.clrtoeol()
                self.stdscr.addstr(0, 0, text)
                self.stdscr.refresh()
            except curses.error as e:
                raise RenderFailure("status failed") from e


def key_name(ch: int) -> str:
    if ch < 256:
        return chr(ch)
    return curses.keyname(ch).decode()


def read_input(
    stdscr,
    channel: EventChannel,
    lock: threading.Lock,
    stop: threading.Event,
    poll_interval: float = POLL_INTERVAL,
) -> None:
    """Producer loop: forwards keys and pointer presses until stopped or the device fails.

    The window is in nodelay mode, so each read holds ``lock`` only for a
    non-blocking ``getch``.
    """
    try:
        while not stop.is_set():
            with lock:
                ch = stdscr.getch()
                mouse = None
                if ch == curses.KEY_MOUSE:
                    try:
                        mouse = curses.getmouse()
                    except curses.error:
                        # malformed mouse report, drop it
                        continue
            if ch == -1:
                stop.wait(poll_interval)
                continue
            if mouse is not None:
                _id, x, y, _z, bstate = mouse
                if bstate & POINTER_MASK:
                    channel.send(PointerEvent(x, y))
                continue
            event = translate_key(key_name(ch))
            if event is not None:
                channel.send(event)
    except (curses.error, ChannelDisconnected) as e:
        logger.warning(f"[termine] input producer stopped: {e}")
    finally:
        channel.close()


def start_input_thread(stdscr, channel: EventChannel, lock: threading.Lock, stop: threading.Event) -> threading.Thread:
    t = threading.Thread(target=read_input, args=(stdscr, channel, lock, stop), daemon=True)
    t.start()
    return t


def setup_screen(stdscr) -> None:
    curses.raw()
    curses.curs_set(0)
    stdscr.keypad(True)
    stdscr.nodelay(True)
    curses.mousemask(curses.ALL_MOUSE_EVENTS)
    stdscr.clear()
