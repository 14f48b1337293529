"""Dispatch loop: one event or one idle timeout per iteration."""
from __future__ import annotations

import logging
from enum import Enum

from .events import EventChannel, Key, KeyEvent
from .game_engine import GameState, MineField, Redraw
from .render import RenderAdapter

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    QUIT = "quit"
    EXPLODED = "exploded"
    SUCCESS = "success"


def _outcome(state: GameState) -> Outcome:
    return Outcome.SUCCESS if state is GameState.SUCCESS else Outcome.EXPLODED


def run(field: MineField, channel: EventChannel, renderer: RenderAdapter) -> Outcome:
    """Drive ``field`` until quit or a terminal state.

    ``ChannelDisconnected`` and render errors propagate to the caller.
    """
    field.draw(renderer)
    while True:
        event = channel.recv(field.tick_interval)
        if event is None:
            redraw = field.tick()
        elif isinstance(event, KeyEvent) and event.key is Key.QUIT:
            logger.info(f"[termine] quit opened={field.opened_count}")
            return Outcome.QUIT
        else:
            redraw = field.handle_input(event)
        if field.is_over:
            field.finish()
            field.draw(renderer)
            logger.info(f"[termine] game over state={field.state.value} elapsed={field.elapsed():.2f}s")
            return _outcome(field.state)
        if redraw is not Redraw.NONE:
            field.draw(renderer, blink=redraw is Redraw.BLINK)
