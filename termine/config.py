from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .game_engine import DEFAULT_BLINK_PERIOD, DEFAULT_TICK_INTERVAL


class GameConfig(BaseModel):
    width: int = Field(30, ge=1, le=200)
    height: int = Field(16, ge=1, le=100)
    # no upper bound: a count at or above width*height fills the board
    mine_count: int = Field(60, ge=0)
    tick_ms: int = Field(int(DEFAULT_TICK_INTERVAL * 1000), ge=1, le=1000)
    blink_period: int = Field(DEFAULT_BLINK_PERIOD, ge=2, le=10000)

    @property
    def tick_interval(self) -> float:
        return self.tick_ms / 1000.0


def load_config(dotenv_path: Optional[Path] = None) -> GameConfig:
    """Board size and mine count from the environment (and ``.env.local``)."""
    load_dotenv(dotenv_path=dotenv_path or Path(".env.local"))
    values = {}
    for key, env in (("width", "TERMINE_WIDTH"), ("height", "TERMINE_HEIGHT"), ("mine_count", "TERMINE_MINES")):
        raw = os.getenv(env)
        if raw:
            values[key] = raw
    return GameConfig(**values)
