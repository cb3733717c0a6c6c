"""Tests for the interactive session loop."""

import random

import numpy as np
import pytest

from ascii_cam.capture import ArraySource, CaptureError
from ascii_cam.config import SessionSettings
from ascii_cam.rendering.colors import ColorMode, rainbow_hue
from ascii_cam.rendering.palettes import Charset
from ascii_cam.rendering.renderer import Renderer
from ascii_cam.session import (
    COUNTER_MODULUS,
    EventQueue,
    InputEvent,
    Session,
    SessionState,
    StatusOverlay,
    format_overlay,
)

# --- Fixtures ---


class RecordingDisplay:
    def __init__(self):
        self.presents = []
        self.closed = False

    def present(self, grid, overlay):
        self.presents.append((grid, overlay))

    def close(self):
        self.closed = True


class FailingSource:
    def next_frame(self, flip=False):
        raise CaptureError("device unplugged")

    def is_open(self):
        return True

    def seek_to_start(self):
        pass

    def close(self):
        pass


def red_blue():
    arr = np.zeros((4, 8, 3), dtype=np.uint8)
    arr[:, :4] = (255, 0, 0)
    arr[:, 4:] = (0, 0, 255)
    return arr


@pytest.fixture
def display():
    return RecordingDisplay()


@pytest.fixture
def events():
    return EventQueue()


def make_session(source, display, events, state=None, **kwargs):
    state = state or SessionState(width=2)
    return Session(source, display, events, state, renderer=Renderer(random.Random(0)), poll_timeout=0.0, **kwargs)


# --- Tests ---


class TestSessionState:
    def test_from_settings(self):
        settings = SessionSettings(charset=Charset.RETRO, mode=ColorMode.NEON, width=80, flip=True, show_ui=False)
        state = SessionState.from_settings(settings)
        assert (state.charset, state.mode, state.width, state.flip, state.show_ui) == (
            Charset.RETRO, ColorMode.NEON, 80, True, False,
        )

    def test_mode_and_charset_cycle(self):
        state = SessionState()
        state.apply(InputEvent.NEXT_MODE)
        state.apply(InputEvent.NEXT_CHARSET)
        assert state.mode is ColorMode.GRAYSCALE
        assert state.charset is Charset.LIGHT

    def test_width_steps_by_two(self):
        state = SessionState(width=100)
        state.apply(InputEvent.WIDEN)
        assert state.width == 102
        state.apply(InputEvent.NARROW)
        state.apply(InputEvent.NARROW)
        assert state.width == 98

    def test_width_is_clamped(self):
        state = SessionState(width=499)
        state.apply(InputEvent.WIDEN)
        state.apply(InputEvent.WIDEN)
        assert state.width == 500
        state = SessionState(width=11)
        state.apply(InputEvent.NARROW)
        state.apply(InputEvent.NARROW)
        assert state.width == 10

    def test_toggles(self):
        state = SessionState()
        state.apply(InputEvent.FLIP)
        state.apply(InputEvent.TOGGLE_UI)
        assert state.flip is True and state.show_ui is False
        assert state.overlay() is None

    def test_quit_stops(self):
        state = SessionState()
        state.apply(InputEvent.QUIT)
        assert state.running is False

    def test_counter_wraps(self):
        state = SessionState(frame_counter=COUNTER_MODULUS - 1)
        state.advance()
        assert state.frame_counter == 0

    def test_rainbow_hue_steps_evenly_across_wrap(self):
        state = SessionState(frame_counter=COUNTER_MODULUS - 1)
        before = rainbow_hue(0, 0, state.frame_counter)
        state.advance()
        after = rainbow_hue(0, 0, state.frame_counter)
        assert (after - before) % 360 == 5

    def test_snapshot_is_detached(self):
        state = SessionState(width=50)
        snap = state.snapshot()
        state.apply(InputEvent.WIDEN)
        assert snap.width == 50
        with pytest.raises(Exception):
            snap.width = 10


class TestSessionStep:
    def test_renders_and_presents(self, display, events):
        session = make_session(ArraySource([red_blue()]), display, events)
        assert session.step() is True
        grid, overlay = display.presents[0]
        assert [cell.color for cell in grid[0]] == [(255, 0, 0), (0, 0, 255)]
        assert overlay.mode is ColorMode.STANDARD and overlay.width == 2

    def test_empty_frame_skips_display(self, display, events):
        state = SessionState(width=2)
        session = make_session(ArraySource([]), display, events, state)
        assert session.step() is True
        assert display.presents == []
        assert state.frame_counter == 0

    def test_end_of_stream_rewinds_once(self, display, events):
        session = make_session(ArraySource([red_blue()]), display, events)
        session.step()
        session.step()
        assert len(display.presents) == 2

    def test_no_rewind_when_looping_disabled(self, display, events):
        session = make_session(ArraySource([red_blue()]), display, events, loop_at_end=False)
        session.step()
        session.step()
        assert len(display.presents) == 1

    def test_flip_mirrors_frame(self, display, events):
        state = SessionState(width=2, flip=True)
        session = make_session(ArraySource([red_blue()]), display, events, state)
        session.step()
        grid, _ = display.presents[0]
        assert [cell.color for cell in grid[0]] == [(0, 0, 255), (255, 0, 0)]

    def test_one_event_per_iteration(self, display, events):
        state = SessionState(width=20)
        session = make_session(ArraySource([red_blue()]), display, events, state)
        events.push(InputEvent.WIDEN)
        events.push(InputEvent.WIDEN)
        session.step()
        assert state.width == 22
        session.step()
        assert state.width == 24

    def test_event_applies_before_render(self, display, events):
        session = make_session(ArraySource([red_blue()]), display, events)
        events.push(InputEvent.NEXT_MODE)
        session.step()
        _, overlay = display.presents[0]
        assert overlay.mode is ColorMode.GRAYSCALE

    def test_hidden_ui_sends_no_overlay(self, display, events):
        state = SessionState(width=2, show_ui=False)
        session = make_session(ArraySource([red_blue()]), display, events, state)
        session.step()
        assert display.presents[0][1] is None

    def test_frame_counter_advances(self, display, events):
        state = SessionState(width=2)
        session = make_session(ArraySource([red_blue()]), display, events, state)
        session.step()
        session.step()
        assert state.frame_counter == 2

    def test_quit_ends_step(self, display, events):
        session = make_session(ArraySource([red_blue()]), display, events)
        events.push(InputEvent.QUIT)
        assert session.step() is False
        assert display.presents == []

    def test_closed_source_is_fatal(self, display, events):
        source = ArraySource([red_blue()])
        source.close()
        session = make_session(source, display, events)
        with pytest.raises(CaptureError):
            session.step()


class TestSessionRun:
    def test_runs_until_quit_and_closes_display(self, display, events):
        session = make_session(ArraySource([red_blue()]), display, events)
        session.stop()
        session.run()
        assert display.closed is True

    def test_max_frames(self, display, events):
        session = make_session(ArraySource([red_blue()]), display, events, max_frames=3)
        session.run()
        assert len(display.presents) == 3
        assert display.closed is True

    def test_capture_failure_propagates_after_close(self, display, events):
        session = make_session(FailingSource(), display, events)
        with pytest.raises(CaptureError):
            session.run()
        assert display.closed is True


class TestEventQueue:
    def test_poll_empty_returns_none(self, events):
        assert events.poll(0.0) is None
        assert events.poll(0.001) is None

    def test_fifo(self, events):
        events.push(InputEvent.FLIP)
        events.push(InputEvent.QUIT)
        assert events.poll() is InputEvent.FLIP
        assert events.poll() is InputEvent.QUIT


def test_format_overlay():
    text = format_overlay(StatusOverlay(ColorMode.CGA, Charset.RETRO, 120, 29.97))
    assert "mode=cga" in text and "charset=retro" in text and "width=120" in text and "fps=30.0" in text
