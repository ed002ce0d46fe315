# framebuffer.py
"""
Linux framebuffer output for the calibration targets.
"""

import os
import re

from errors import MissingCapability
from target_image import to_image, to_rgb565

SYSFS_GRAPHICS = "/sys/class/graphics"
MODE_RE = re.compile(r"(\d+)x(\d+)")


class Framebuffer:
    """
    One /dev/fbN display. show() takes a BGRA frame of width x height and
    writes it full-screen, rotated for LCDs mounted upside down or sideways.
    """

    def __init__(self, path, width, height, bpp=16, rotate=0):
        if bpp not in (16, 32):
            raise MissingCapability(f"{path}: unsupported depth {bpp} bpp (need 16 or 32)")
        self.path = path
        self.bpp = bpp
        self.rotate = rotate
        # Screen geometry as the user sees it, after rotation
        if rotate in (90, 270):
            self.width, self.height = height, width
        else:
            self.width, self.height = width, height

    def __repr__(self):
        return f"Framebuffer({self.path!r}, {self.width}x{self.height}, {self.bpp}bpp)"

    def encode(self, buffer):
        if self.rotate == 0 and self.bpp == 32:
            return buffer
        image = to_image(buffer, self.width, self.height)
        if self.rotate:
            image = image.rotate(self.rotate, expand=True)
        if self.bpp == 16:
            return bytes(to_rgb565(image))
        return image.convert("RGBA").tobytes("raw", "BGRA")

    def show(self, buffer):
        with open(self.path, "wb") as f:
            f.write(self.encode(buffer))

    def clear(self):
        """Make the display black."""
        with open(self.path, "wb") as f:
            f.write(bytearray(self.width * self.height * self.bpp // 8))


def _visible_mode(info):
    # First line of "modes" is the current mode, e.g. "U:480x320p-60"
    try:
        with open(os.path.join(info, "modes"), "r") as f:
            match = MODE_RE.search(f.readline())
    except OSError:
        return None
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def probe_framebuffer(path, sysfs=SYSFS_GRAPHICS):
    """
    Read (width, height, bpp) for a framebuffer device from sysfs.
    Returns None for each value sysfs does not report.

    The visible mode wins over virtual_size: double-buffered drivers report
    a virtual height larger than the screen.
    """
    info = os.path.join(sysfs, os.path.basename(path))
    width = height = bpp = None
    mode = _visible_mode(info)
    if mode is not None:
        width, height = mode
    else:
        try:
            with open(os.path.join(info, "virtual_size"), "r") as f:
                width, height = (int(v) for v in f.read().strip().split(","))
        except (OSError, ValueError):
            pass
    try:
        with open(os.path.join(info, "bits_per_pixel"), "r") as f:
            bpp = int(f.read().strip())
    except (OSError, ValueError):
        pass
    return width, height, bpp


def open_displays(cfg, sysfs=SYSFS_GRAPHICS):
    displays = []
    for fb in cfg["framebuffers"]:
        path = fb["path"]
        if not os.path.exists(path):
            raise MissingCapability(f"framebuffer {path} not found")
        width, height, bpp = probe_framebuffer(path, sysfs)
        width = fb["width"] or width
        height = fb["height"] or height
        bpp = fb["bpp"] or bpp or 16
        if not width or not height:
            raise MissingCapability(f"cannot determine the size of {path}, set width/height in the config")
        display = Framebuffer(path, width, height, bpp, fb["rotate"])
        print(f"[INFO] Using {display}")
        displays.append(display)
    return displays
