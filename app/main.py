import curses
import logging
import os
import sys
import threading
from typing import Optional

from pydantic import ValidationError

from termine.config import GameConfig, load_config
from termine.dispatch import Outcome, run
from termine.events import ChannelDisconnected, EventChannel
from termine.game_engine import MineField
from termine.render import RenderFailure
from app.terminal import CursesRenderer, setup_screen, start_input_thread

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    # curses owns the terminal, so log to a file
    logging.basicConfig(
        filename=os.getenv("TERMINE_LOG_FILE", "termine.log"),
        level=os.getenv("TERMINE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def create_field(config: GameConfig, rng_seed: Optional[int] = None) -> MineField:
    return MineField(
        config.width,
        config.height,
        config.mine_count,
        rng_seed=rng_seed,
        tick_interval=config.tick_interval,
        blink_period=config.blink_period,
        cursor=(config.height // 2, config.width // 2),
    )


def play(stdscr, field: MineField) -> Outcome:
    setup_screen(stdscr)
    channel = EventChannel()
    lock = threading.Lock()
    stop = threading.Event()
    renderer = CursesRenderer(stdscr, lock)
    reader = start_input_thread(stdscr, channel, lock, stop)
    try:
        return run(field, channel, renderer)
    finally:
        stop.set()
        reader.join(timeout=1.0)


def main() -> int:
    configure_logging()
    try:
        config = load_config()
    except ValidationError as e:
        print(f"invalid configuration:\n{e}", file=sys.stderr)
        return 2
    os.environ.setdefault("ESCDELAY", "25")
    field = create_field(config)
    logger.info(
        f"[termine] start width={config.width} height={config.height} mines={config.mine_count} "
        f"tick_ms={config.tick_ms} blink_period={config.blink_period}"
    )
    try:
        outcome = curses.wrapper(play, field)
    except ChannelDisconnected:
        logger.error("[termine] input channel disconnected")
        print("input closed", file=sys.stderr)
        return 1
    except RenderFailure as e:
        logger.error(f"[termine] render failed: {e}")
        print(f"render failed: {e}", file=sys.stderr)
        return 1
    for row in field.to_client_view():
        print(row)
    print(f"{outcome.value} {field.status_text()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
