# events.py
"""
Adapter events and the single-threaded dispatch that drives a session.
"""

from collections import namedtuple

DisplayAttached = namedtuple("DisplayAttached", "display width height")
PointerDown = namedtuple("PointerDown", "x y")
Quit = namedtuple("Quit", "")


def normalize(x, y, width, height):
    """
    Surface or device coordinates -> [0,1] display-local coordinates.
    An axis with no extent maps to 0.0.
    """
    return (x / width if width > 0 else 0.0,
            y / height if height > 0 else 0.0)


class Calibrator:
    """
    Routes adapter events into a CalibrationSession and presents the
    current target on every attached display.
    """

    def __init__(self, session):
        self.session = session
        self.displays = []
        self.result = None
        self.quit = False

    def redraw(self):
        for display, width, height in self.displays:
            display.show(self.session.render_current_target(width, height))

    def handle_event(self, event):
        """Process one event; returns False when the loop should stop."""
        if isinstance(event, DisplayAttached):
            self.displays.append((event.display, event.width, event.height))
            print(f"[INFO] Display attached: {event.width}x{event.height}")
            if not self.session.is_done():
                event.display.show(self.session.render_current_target(event.width, event.height))
            return True
        if isinstance(event, PointerDown):
            result = self.session.record_touch(event.x, event.y)
            if result is None:
                self.redraw()
                return True
            self.result = result
            return False
        if isinstance(event, Quit):
            print("[CALIBRATION] Quit requested, calibration aborted.")
            self.quit = True
            return False
        raise TypeError(f"unknown event {event!r}")


def run(calibrator, events):
    for event in events:
        if not calibrator.handle_event(event):
            break
    return calibrator.result
