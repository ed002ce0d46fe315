# errors.py
"""
Exceptions shared by the calibration core and the display adapter.
"""


class CalibrationError(Exception):
    pass


class DegenerateCalibration(CalibrationError):
    """The recorded touches are collinear, the affine solve has no answer."""


class SessionFinished(CalibrationError):
    """The session already solved; it accepts no more touches."""


class MissingCapability(Exception):
    """A device the calibration needs (framebuffer, touch input) is not there."""


class ConfigError(Exception):
    pass
