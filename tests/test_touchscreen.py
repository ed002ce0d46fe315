import pytest
from evdev import AbsInfo, InputEvent, ecodes

from errors import MissingCapability
from events import PointerDown, Quit
import touchscreen
from touchscreen import KeyboardReader, TouchReader, open_input_devices, read_events


def abs_info(minimum, maximum):
    return AbsInfo(value=0, min=minimum, max=maximum, fuzz=0, flat=0, resolution=0)


def ev(type_, code, value):
    return InputEvent(0, 0, type_, code, value)


def syn():
    return ev(ecodes.EV_SYN, ecodes.SYN_REPORT, 0)


def feed_all(reader, events):
    return [e for e in (reader.feed(event) for event in events) if e is not None]


@pytest.fixture
def reader():
    return TouchReader(abs_info(0, 4096), abs_info(0, 4096))


def test_touch_down_emits_normalized_pointer(reader):
    out = feed_all(reader, [
        ev(ecodes.EV_ABS, ecodes.ABS_X, 2048),
        ev(ecodes.EV_ABS, ecodes.ABS_Y, 1024),
        ev(ecodes.EV_KEY, ecodes.BTN_TOUCH, 1),
        syn(),
    ])
    assert out == [PointerDown(0.5, 0.25)]


def test_press_uses_coordinates_of_its_frame(reader):
    out = feed_all(reader, [
        ev(ecodes.EV_ABS, ecodes.ABS_X, 100),
        ev(ecodes.EV_ABS, ecodes.ABS_Y, 100),
        syn(),
        ev(ecodes.EV_KEY, ecodes.BTN_TOUCH, 1),
        ev(ecodes.EV_ABS, ecodes.ABS_X, 1024),
        ev(ecodes.EV_ABS, ecodes.ABS_Y, 3072),
        syn(),
    ])
    assert out == [PointerDown(0.25, 0.75)]


def test_motion_and_release_are_ignored(reader):
    out = feed_all(reader, [
        ev(ecodes.EV_KEY, ecodes.BTN_TOUCH, 1),
        ev(ecodes.EV_ABS, ecodes.ABS_X, 0),
        ev(ecodes.EV_ABS, ecodes.ABS_Y, 0),
        syn(),
        ev(ecodes.EV_ABS, ecodes.ABS_X, 500),
        syn(),
        ev(ecodes.EV_ABS, ecodes.ABS_Y, 700),
        syn(),
        ev(ecodes.EV_KEY, ecodes.BTN_TOUCH, 0),
        syn(),
    ])
    assert out == [PointerDown(0.0, 0.0)]


def test_left_button_counts_as_press(reader):
    out = feed_all(reader, [
        ev(ecodes.EV_ABS, ecodes.ABS_X, 4096),
        ev(ecodes.EV_ABS, ecodes.ABS_Y, 4096),
        ev(ecodes.EV_KEY, ecodes.BTN_LEFT, 1),
        syn(),
    ])
    assert out == [PointerDown(1.0, 1.0)]


def test_escape_quits(reader):
    assert reader.feed(ev(ecodes.EV_KEY, ecodes.KEY_ESC, 1)) == Quit()
    assert reader.feed(ev(ecodes.EV_KEY, ecodes.KEY_ESC, 0)) is None
    assert reader.feed(ev(ecodes.EV_KEY, ecodes.KEY_A, 1)) is None


def test_axis_range_offset():
    reader = TouchReader(abs_info(200, 3900), abs_info(300, 3800))
    out = feed_all(reader, [
        ev(ecodes.EV_ABS, ecodes.ABS_X, 200),
        ev(ecodes.EV_ABS, ecodes.ABS_Y, 3800),
        ev(ecodes.EV_KEY, ecodes.BTN_TOUCH, 1),
        syn(),
    ])
    assert out == [PointerDown(0.0, 1.0)]


def test_empty_axis_range():
    reader = TouchReader(abs_info(0, 0), abs_info(0, 0))
    out = feed_all(reader, [ev(ecodes.EV_KEY, ecodes.BTN_TOUCH, 1), syn()])
    assert out == [PointerDown(0.0, 0.0)]


def test_missing_touch_device(tmp_path):
    cfg = {"touch_device": str(tmp_path / "event9"), "keyboard_devices": []}
    with pytest.raises(MissingCapability):
        open_input_devices(cfg)


class FakeInput:
    """Evdev device stand-in; each read() returns the next batch of events."""

    def __init__(self, fd, *batches):
        self.fd = fd
        self.batches = list(batches)

    def read(self):
        return iter(self.batches.pop(0))


class InputExhausted(Exception):
    pass


def scripted_select(monkeypatch, *rounds):
    rounds = list(rounds)

    def select(rlist, wlist, xlist):
        if not rounds:
            raise InputExhausted
        return rounds.pop(0), [], []

    monkeypatch.setattr(touchscreen.select, "select", select)


def collect(sources):
    out = []
    with pytest.raises(InputExhausted):
        for event in read_events(sources):
            out.append(event)
    return out


def touch_frame(x, y):
    return [
        ev(ecodes.EV_ABS, ecodes.ABS_X, x),
        ev(ecodes.EV_ABS, ecodes.ABS_Y, y),
        ev(ecodes.EV_KEY, ecodes.BTN_TOUCH, 1),
        syn(),
    ]


def test_keyboard_reader_only_quits():
    kbd = KeyboardReader()
    assert kbd.feed(ev(ecodes.EV_KEY, ecodes.BTN_LEFT, 1)) is None
    assert kbd.feed(syn()) is None
    assert kbd.feed(ev(ecodes.EV_KEY, ecodes.KEY_Q, 1)) == Quit()


def test_read_events_in_arrival_order(monkeypatch, reader):
    touch = FakeInput(3, touch_frame(1024, 1024), touch_frame(3072, 2048))
    kbd = FakeInput(4, [ev(ecodes.EV_KEY, ecodes.KEY_ESC, 1), syn()])
    scripted_select(monkeypatch, [touch], [kbd], [touch])
    out = collect([(touch, reader), (kbd, KeyboardReader())])
    assert out == [PointerDown(0.25, 0.25), Quit(), PointerDown(0.75, 0.5)]


def test_keyboard_button_is_not_a_touch(monkeypatch, reader):
    touch = FakeInput(3, touch_frame(2048, 2048))
    kbd = FakeInput(4, [
        ev(ecodes.EV_REL, ecodes.REL_X, 5),
        ev(ecodes.EV_KEY, ecodes.BTN_LEFT, 1),
        syn(),
    ])
    scripted_select(monkeypatch, [touch], [kbd])
    out = collect([(touch, reader), (kbd, KeyboardReader())])
    assert out == [PointerDown(0.5, 0.5)]


def test_keyboard_frame_does_not_complete_a_touch(monkeypatch, reader):
    # finger down on the panel, its SYN_REPORT still pending
    touch = FakeInput(3, touch_frame(2048, 2048)[:-1], [syn()])
    kbd = FakeInput(4, [syn()])
    scripted_select(monkeypatch, [touch], [kbd], [touch])
    out = collect([(touch, reader), (kbd, KeyboardReader())])
    assert out == [PointerDown(0.5, 0.5)]


def test_both_devices_ready_in_one_round(monkeypatch, reader):
    touch = FakeInput(3, touch_frame(0, 4096))
    kbd = FakeInput(4, [ev(ecodes.EV_KEY, ecodes.KEY_ESC, 1)])
    scripted_select(monkeypatch, [touch, kbd])
    out = collect([(touch, reader), (kbd, KeyboardReader())])
    assert out == [PointerDown(0.0, 1.0), Quit()]
