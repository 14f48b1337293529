"""Input events and the channel that carries them to the dispatch loop.

The producer side (a thread reading the terminal) calls ``send`` for every
input it recognizes and ``close`` when it stops for any reason. The consumer
polls with ``recv(timeout)``: ``None`` means nothing arrived within the
window, which the loop treats as a tick.
"""
from __future__ import annotations

import queue
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union


class Key(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    SELECT = "select"
    QUIT = "quit"


@dataclass(frozen=True)
class KeyEvent:
    key: Key


@dataclass(frozen=True)
class PointerEvent:
    """Pointer press at a screen cell."""
    x: int
    y: int


Event = Union[KeyEvent, PointerEvent]


KEY_BINDINGS: Dict[str, Key] = {
    "KEY_UP": Key.UP,
    "k": Key.UP,
    "KEY_DOWN": Key.DOWN,
    "j": Key.DOWN,
    "KEY_LEFT": Key.LEFT,
    "h": Key.LEFT,
    "KEY_RIGHT": Key.RIGHT,
    "l": Key.RIGHT,
    " ": Key.SELECT,
    "\n": Key.SELECT,
    "\r": Key.SELECT,
    "KEY_ENTER": Key.SELECT,
    "q": Key.QUIT,
    "\x1b": Key.QUIT,
    "\x03": Key.QUIT,
}


def translate_key(name: str) -> Optional[KeyEvent]:
    key = KEY_BINDINGS.get(name)
    if key is None:
        return None
    return KeyEvent(key)


class ChannelDisconnected(RuntimeError):
    """The input producer went away."""


class EventChannel:
    def __init__(self, maxsize: int = 64) -> None:
        self._q: "queue.Queue[object]" = queue.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: Event) -> None:
        if self._closed:
            raise ChannelDisconnected("send on closed channel")
        self._q.put(event)

    def close(self) -> None:
        self._closed = True

    def recv(self, timeout: float) -> Optional[object]:
        # events queued before close are still delivered
        try:
            return self._q.get(timeout=timeout)
        except queue.Empty:
            if self._closed:
                raise ChannelDisconnected("input producer stopped")
            return None
