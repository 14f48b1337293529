import curses
import threading

import pytest

import app.main as main_mod
from app import terminal
from termine.events import ChannelDisconnected, EventChannel, Key, KeyEvent
from termine.render import RenderFailure, Style


class FakeScreen:
    """Stands in for a curses window; checks every call runs under the lock."""

    def __init__(self, lock, keys=(), fail_draw=False):
        self.lock = lock
        self.keys = list(keys)
        self.fail_draw = fail_draw
        self.unlocked_calls = 0
        self.written = []

    def _check(self):
        if not self.lock.locked():
            self.unlocked_calls += 1

    def getch(self):
        self._check()
        if not self.keys:
            raise curses.error("device gone")
        return self.keys.pop(0)

    def addstr(self, y, x, text, attr=0):
        self._check()
        if self.fail_draw:
            raise curses.error("addwstr() returned ERR")
        self.written.append((x, y, text))

    def move(self, y, x):
        self._check()

    def clrtoeol(self):
        self._check()

    def refresh(self):
        self._check()


def make_renderer(monkeypatch, scr, lock):
    monkeypatch.setattr(terminal.curses, "has_colors", lambda: False)
    return terminal.CursesRenderer(scr, lock)


def test_reader_forwards_keys_under_lock_and_closes_channel():
    lock = threading.Lock()
    scr = FakeScreen(lock, [ord("l"), -1, ord("j"), ord("z"), ord("q")])
    ch = EventChannel()
    terminal.read_input(scr, ch, lock, threading.Event(), poll_interval=0.001)
    assert scr.unlocked_calls == 0
    assert ch.closed
    assert ch.recv(0.01) == KeyEvent(Key.RIGHT)
    assert ch.recv(0.01) == KeyEvent(Key.DOWN)
    assert ch.recv(0.01) == KeyEvent(Key.QUIT)
    with pytest.raises(ChannelDisconnected):
        ch.recv(0.001)


def test_reader_stops_when_asked():
    lock = threading.Lock()
    scr = FakeScreen(lock, [-1] * 1000)
    ch = EventChannel()
    stop = threading.Event()
    t = terminal.start_input_thread(scr, ch, lock, stop)
    stop.set()
    t.join(timeout=1.0)
    assert not t.is_alive()
    assert ch.closed


def test_renderer_holds_lock_while_drawing(monkeypatch):
    lock = threading.Lock()
    scr = FakeScreen(lock)
    r = make_renderer(monkeypatch, scr, lock)
    r.draw(3, 4, Style.BOLD, (0, 0, 0), (255, 255, 255), "1")
    r.status("[mines 1 opened 0 0.00s]")
    assert scr.unlocked_calls == 0
    assert (3, 4, "1") in scr.written
    assert not lock.locked()


def test_renderer_wraps_curses_errors(monkeypatch):
    lock = threading.Lock()
    r = make_renderer(monkeypatch, FakeScreen(lock, fail_draw=True), lock)
    with pytest.raises(RenderFailure):
        r.draw(0, 0, Style.NORMAL, (0, 0, 0), (0, 0, 0), ".")
    assert not lock.locked()


def test_main_reports_render_failure(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TERMINE_LOG_FILE", str(tmp_path / "termine.log"))

    def broken_wrapper(func, *args):
        raise RenderFailure("draw failed at (40, 20)")

    monkeypatch.setattr(main_mod.curses, "wrapper", broken_wrapper)
    assert main_mod.main() == 1
    assert "render failed" in capsys.readouterr().err
