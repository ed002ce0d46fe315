import pytest


class FakeDisplay:
    """Records every frame shown instead of writing a framebuffer."""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.frames = []
        self.cleared = False

    def show(self, buffer):
        self.frames.append(buffer)

    def clear(self):
        self.cleared = True


class FakeDevice:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


@pytest.fixture
def display():
    return FakeDisplay(64, 48)


@pytest.fixture
def make_display():
    return FakeDisplay


@pytest.fixture
def device():
    return FakeDevice()
