# touchscreen.py
"""
Touchscreen event handling: raw evdev input -> calibration events.
"""

import os
import select

import evdev
from evdev import ecodes

from errors import MissingCapability
from events import PointerDown, Quit, normalize

PRESS_CODES = (ecodes.BTN_TOUCH, ecodes.BTN_LEFT)
QUIT_CODES = (ecodes.KEY_ESC, ecodes.KEY_Q)


class KeyboardReader:
    """Keyboards can only quit; their buttons and motion are ignored."""

    def feed(self, event):
        if event.type == ecodes.EV_KEY and event.code in QUIT_CODES and event.value == 1:
            return Quit()
        return None


class TouchReader(KeyboardReader):
    """
    Turns the raw event stream of a touch device into PointerDown/Quit.

    A press (finger down or left button) is only reported on the SYN_REPORT
    that closes its frame, so the ABS_X/ABS_Y of that same frame are used.
    Motion and release never produce an event.
    """

    def __init__(self, abs_x, abs_y):
        self.abs_x = abs_x
        self.abs_y = abs_y
        self.raw_x = abs_x.value
        self.raw_y = abs_y.value
        self.pressed = False

    def feed(self, event):
        if event.type == ecodes.EV_ABS:
            if event.code == ecodes.ABS_X:
                self.raw_x = event.value
            elif event.code == ecodes.ABS_Y:
                self.raw_y = event.value
        elif event.type == ecodes.EV_KEY and event.code in PRESS_CODES:
            if event.value == 1:
                self.pressed = True
        elif event.type == ecodes.EV_SYN and event.code == ecodes.SYN_REPORT and self.pressed:
            self.pressed = False
            return PointerDown(*normalize(self.raw_x - self.abs_x.min, self.raw_y - self.abs_y.min,
                                          self.abs_x.max - self.abs_x.min,
                                          self.abs_y.max - self.abs_y.min))
        return super().feed(event)


def open_input_devices(cfg):
    """
    Open the touch device and any keyboards.

    Returns a list of (device, reader) pairs; the touch device comes first.
    """
    path = cfg["touch_device"]
    if not os.path.exists(path):
        raise MissingCapability(f"touch device {path} not found")
    touch = evdev.InputDevice(path)
    abs_codes = dict(touch.capabilities().get(ecodes.EV_ABS, []))
    if ecodes.ABS_X not in abs_codes or ecodes.ABS_Y not in abs_codes:
        touch.close()
        raise MissingCapability(f"{path} ({touch.name}) reports no ABS_X/ABS_Y axes, not a touchscreen")
    print(f"[INFO] Touch device: {touch.name} ({path})")
    sources = [(touch, TouchReader(abs_codes[ecodes.ABS_X], abs_codes[ecodes.ABS_Y]))]
    for kbd_path in cfg["keyboard_devices"]:
        if not os.path.exists(kbd_path):
            print(f"[WARNING] Keyboard {kbd_path} not found, <ESC> only works on the touch device")
            continue
        sources.append((evdev.InputDevice(kbd_path), KeyboardReader()))
    return sources


def read_events(sources):
    """
    Yield calibration events from all (device, reader) pairs, in arrival order.
    Blocks until input arrives; there is no timeout.
    """
    readers = {device.fd: reader for device, reader in sources}
    devices = [device for device, _ in sources]
    while True:
        ready, _, _ = select.select(devices, [], [])
        for device in ready:
            reader = readers[device.fd]
            for event in device.read():
                translated = reader.feed(event)
                if translated is not None:
                    yield translated


def close_devices(sources):
    for device, _ in sources:
        device.close()
