# calibrate_touchscreen.py
"""
Three-point touchscreen calibration for framebuffer LCDs.

Shows a target on every configured display, waits for a touch on each of
the three targets and prints the affine calibration as "a b c d e f".
"""

import argparse
import sys
import traceback

from calibration import TARGETS, CalibrationSession
from config import CONFIG_FILE, load_config
from errors import ConfigError, DegenerateCalibration, MissingCapability
from events import Calibrator, DisplayAttached, run
from framebuffer import open_displays
from target_image import save_preview
from touchscreen import close_devices, open_input_devices, read_events

EXIT_OK = 0
EXIT_QUIT = 1
EXIT_SETUP = 2
EXIT_DEGENERATE = 3


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Calibrate a touchscreen with three targets.")
    parser.add_argument("--config", default=CONFIG_FILE, help="JSON device config (default: %(default)s)")
    parser.add_argument("--preview", metavar="PNG",
                        help="render the first target to a PNG file and exit")
    parser.add_argument("--size", default="480x320",
                        help="preview size as WIDTHxHEIGHT (default: %(default)s)")
    return parser.parse_args(argv)


def calibrate(cfg):
    displays = open_displays(cfg)
    sources = open_input_devices(cfg)
    session = CalibrationSession()
    calibrator = Calibrator(session)

    print("Starting the calibrate-touchscreen app: touch the target spots.")
    print("(Or press <ESC> to quit!)")
    try:
        for display in displays:
            calibrator.handle_event(DisplayAttached(display, display.width, display.height))
        return run(calibrator, read_events(sources))
    finally:
        close_devices(sources)
        for display in displays:
            display.clear()


def main(argv=None):
    args = parse_args(argv)
    if args.preview:
        try:
            width, height = (int(v) for v in args.size.lower().split("x"))
            if width < 1 or height < 1:
                raise ValueError(args.size)
        except ValueError:
            print(f"[ERROR] Invalid --size {args.size!r}, expected WIDTHxHEIGHT")
            return EXIT_SETUP
        save_preview(args.preview, width, height, TARGETS[0])
        return EXIT_OK

    try:
        cfg = load_config(args.config)
        result = calibrate(cfg)
    except KeyboardInterrupt:
        print("\n[CALIBRATION] Interrupted, calibration aborted.")
        return EXIT_QUIT
    except (ConfigError, MissingCapability) as e:
        print(f"[ERROR] {e}")
        return EXIT_SETUP
    except DegenerateCalibration as e:
        print(f"[ERROR] {e}")
        print("[ERROR] Touch each target where it is drawn and try again.")
        return EXIT_DEGENERATE
    except Exception as e:
        print("Error:", e)
        traceback.print_exc()
        return EXIT_SETUP

    if result is None:
        return EXIT_QUIT
    print(f"Calibration = {result.format()}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
