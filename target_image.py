# target_image.py
"""
Calibration target drawing: a bullseye marker on a gradient background.
"""

from PIL import Image

BASE = 0x3F
BANDS = 0x40


def draw_target(width, height, target):
    """
    Render one calibration target as a BGRA pixel buffer.

    The marker is centred on the normalized target position, its radius is
    1/80 of the longest side. Inside it the intensity drops in steps of
    0x40 per quarter of r^2; outside it a red background fades into grey
    from top to bottom.
    """
    tx, ty = target
    centre_x = int(width * tx)
    centre_y = int(height * ty)
    size = max(width, height) // 80
    size_sq = size * size
    quarter = size_sq // 4

    buf = bytearray()
    for y in range(height):
        gb = BASE * y // height
        row = bytearray(bytes((gb, gb, BASE, 0xFF)) * width)
        dy = y - centre_y
        if dy * dy < size_sq:
            x0 = max(0, centre_x - size)
            x1 = min(width, centre_x + size + 1)
            for x in range(x0, x1):
                dist_sq = (x - centre_x) * (x - centre_x) + dy * dy
                if dist_sq >= size_sq:
                    continue
                band = dist_sq // quarter if quarter else 0
                intensity = max(0, min(0xFF, 0xFF - BANDS * band))
                row[x * 4:x * 4 + 4] = bytes((intensity, intensity, intensity, 0xFF))
        buf += row
    return bytes(buf)


def to_image(buffer, width, height):
    """Wrap a BGRA buffer as an RGB Pillow image."""
    image = Image.frombuffer("RGBA", (width, height), buffer, "raw", "BGRA", 0, 1)
    return image.convert("RGB")


def to_rgb565(image):
    # RGB565 little endian
    rgb565 = bytearray()
    for pixel in image.getdata():
        r = pixel[0] >> 3
        g = pixel[1] >> 2
        b = pixel[2] >> 3
        value = (r << 11) | (g << 5) | b
        rgb565.append(value & 0xFF)
        rgb565.append((value >> 8) & 0xFF)
    return rgb565


def save_preview(path, width, height, target):
    image = to_image(draw_target(width, height, target), width, height)
    image.save(path)
    print(f"[INFO] Target preview written to {path} ({width}x{height})")
