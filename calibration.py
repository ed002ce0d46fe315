# calibration.py
"""
Three-point touchscreen calibration: target sequencing and the affine solve.
"""

from collections import namedtuple

from errors import DegenerateCalibration, SessionFinished
from target_image import draw_target

# Three target points, not on one line
TARGETS = ((0.2, 0.4), (0.8, 0.6), (0.4, 0.8))


def _det(p0, p1, p2):
    return (p0[0] - p2[0]) * (p1[1] - p2[1]) - (p1[0] - p2[0]) * (p0[1] - p2[1])


def check_targets(targets):
    if len(targets) != 3:
        raise ValueError(f"calibration needs exactly 3 targets, got {len(targets)}")
    for tx, ty in targets:
        if not (0.0 <= tx <= 1.0 and 0.0 <= ty <= 1.0):
            raise ValueError(f"target ({tx}, {ty}) is outside the display")
    if _det(*targets) == 0:
        raise ValueError("calibration targets must not be collinear")


class AffineResult(namedtuple("AffineResult", "a b c d e f")):
    """
    Maps touch coordinates to display coordinates:
    x' = a*x + b*y + c, y' = d*x + e*y + f.
    """

    __slots__ = ()

    def apply(self, x, y):
        return (self.a * x + self.b * y + self.c,
                self.d * x + self.e * y + self.f)

    def format(self):
        fields = []
        for value in self:
            text = f"{value:.3f}"
            # rounding noise around zero prints as 0.000, not -0.000
            fields.append("0.000" if text == "-0.000" else text)
        return " ".join(fields)


def _solve_axis(t, T):
    # Cramer's rule for one output axis; T holds that axis of the targets.
    num_a = (T[0] - T[2]) * (t[1][1] - t[2][1]) - (T[1] - T[2]) * (t[0][1] - t[2][1])
    num_b = (t[0][0] - t[2][0]) * (T[1] - T[2]) - (T[0] - T[2]) * (t[1][0] - t[2][0])
    num_c = (t[0][1] * (t[2][0] * T[1] - t[1][0] * T[2])
             + t[1][1] * (t[0][0] * T[2] - t[2][0] * T[0])
             + t[2][1] * (t[1][0] * T[0] - t[0][0] * T[1]))
    return num_a, num_b, num_c


def solve_affine(touches, targets=TARGETS):
    """
    Find the affine transform taking each recorded touch onto its target.

    Raises DegenerateCalibration when the touches lie on one line, in which
    case the system has no unique solution.
    """
    k = _det(*touches)
    if k == 0:
        raise DegenerateCalibration(
            "touches %s are collinear, cannot solve the calibration" % (list(touches),))
    ak, bk, ck = _solve_axis(touches, [p[0] for p in targets])
    dk, ek, fk = _solve_axis(touches, [p[1] for p in targets])
    return AffineResult(ak / k, bk / k, ck / k, dk / k, ek / k, fk / k)


class CalibrationSession:
    """
    Collects one touch per target, in order, then solves.

    Not thread-safe: all calls must come from the single event loop.
    """

    def __init__(self, targets=TARGETS):
        check_targets(targets)
        self.targets = tuple(targets)
        self.step = 0
        self.touches = [(0.0, 0.0)] * len(self.targets)
        self.result = None

    def is_done(self):
        return self.step == len(self.targets)

    def current_target(self):
        if self.is_done():
            raise SessionFinished("calibration already finished")
        return self.targets[self.step]

    def render_current_target(self, width, height):
        return draw_target(width, height, self.current_target())

    def record_touch(self, x, y):
        """
        Store a normalized touch for the current target.

        Returns None while targets remain, and the AffineResult once the
        last one is touched.
        """
        if self.is_done():
            raise SessionFinished("calibration already finished, touch ignored")
        self.touches[self.step] = (x, y)
        self.step += 1
        print(f"[CALIBRATION] Got touch ({x:.4f}, {y:.4f}) for target {self.step}/{len(self.targets)}")
        if not self.is_done():
            return None
        self.result = solve_affine(self.touches, self.targets)
        return self.result
