import threading

import pytest

from termine.dispatch import Outcome, run
from termine.events import ChannelDisconnected, EventChannel, Key, KeyEvent
from termine.game_engine import GameState, MineField, screen_pos
from termine.render import RecordingRenderer, RenderFailure


def make_channel(*keys):
    ch = EventChannel()
    for k in keys:
        ch.send(KeyEvent(k))
    return ch


class BrokenRenderer(RecordingRenderer):
    def draw(self, x, y, style, bg, fg, text):
        raise RenderFailure("terminal gone")


def test_quit_ends_loop_after_initial_draw():
    f = MineField(3, 3, 1)
    rr = RecordingRenderer()
    assert run(f, make_channel(Key.QUIT), rr) is Outcome.QUIT
    assert rr.draws == 9
    assert len(rr.statuses) == 1
    assert f.mines_placed is False


def test_moves_then_quit_redraw_each_time():
    f = MineField(3, 3, 1)
    rr = RecordingRenderer()
    run(f, make_channel(Key.RIGHT, Key.DOWN, Key.QUIT), rr)
    assert f.cursor == (1, 1)
    assert rr.draws == 27


def test_success_exits_with_final_draw():
    f = MineField(2, 2, 0)
    rr = RecordingRenderer()
    assert run(f, make_channel(Key.SELECT), rr) is Outcome.SUCCESS
    assert f.state is GameState.SUCCESS
    # initial draw plus one final draw
    assert rr.draws == 8
    assert all(rr.text_at(*screen_pos(r, c)) == " " for r in range(2) for c in range(2))


def test_explosion_opens_whole_board():
    f = MineField(1, 1, 1)
    rr = RecordingRenderer()
    assert run(f, make_channel(Key.SELECT, Key.QUIT), rr) is Outcome.EXPLODED
    assert f.cell(0, 0).is_forced_open
    assert rr.text_at(*screen_pos(0, 0)) == "*"


def test_unknown_events_are_ignored():
    f = MineField(2, 2, 1)
    ch = EventChannel()
    ch.send("garbage")
    ch.send(KeyEvent(Key.QUIT))
    assert run(f, ch, RecordingRenderer()) is Outcome.QUIT


def test_disconnect_propagates():
    f = MineField(2, 2, 1)
    ch = make_channel(Key.RIGHT)
    ch.close()
    with pytest.raises(ChannelDisconnected):
        run(f, ch, RecordingRenderer())
    assert f.cursor == (0, 1)


def test_render_failure_propagates():
    f = MineField(2, 2, 1)
    with pytest.raises(RenderFailure):
        run(f, make_channel(Key.QUIT), BrokenRenderer())


def test_idle_ticks_redraw_periodically():
    f = MineField(2, 2, 1, tick_interval=0.001, blink_period=2)
    ch = EventChannel()
    rr = RecordingRenderer()
    timer = threading.Timer(0.1, ch.send, args=(KeyEvent(Key.QUIT),))
    timer.start()
    try:
        assert run(f, ch, rr) is Outcome.QUIT
    finally:
        timer.cancel()
    assert len(rr.statuses) > 1
