# config.py
"""
Device configuration: defaults plus an optional JSON override file.
"""

import copy
import json
import os

from errors import ConfigError

# Standaardwaarden
FRAMEBUFFER = "/dev/fb1"
TOUCH_DEVICE = "/dev/input/event0"
CONFIG_FILE = "calibrate.json"

DEFAULTS = {
    "framebuffers": [FRAMEBUFFER],
    "touch_device": TOUCH_DEVICE,
    "keyboard_devices": [],
    "rotate": 0,
}


def _framebuffer_entry(entry, rotate):
    if isinstance(entry, str):
        entry = {"path": entry}
    if not isinstance(entry, dict) or "path" not in entry:
        raise ConfigError(f"framebuffer entry needs a 'path': {entry!r}")
    fb = {
        "path": entry["path"],
        "width": entry.get("width"),
        "height": entry.get("height"),
        "bpp": entry.get("bpp"),
        "rotate": entry.get("rotate", rotate),
    }
    if fb["rotate"] not in (0, 90, 180, 270):
        raise ConfigError(f"rotate must be 0, 90, 180 or 270, got {fb['rotate']!r}")
    for key in ("width", "height"):
        if fb[key] is not None and (not isinstance(fb[key], int) or fb[key] < 1):
            raise ConfigError(f"{key} of {fb['path']} must be a positive integer")
    return fb


def load_config(config_file=CONFIG_FILE):
    """
    Read the JSON config and merge it over DEFAULTS.

    A missing file is not an error: the defaults describe the usual
    single-LCD Raspberry Pi setup.
    """
    cfg = copy.deepcopy(DEFAULTS)
    if config_file and os.path.isfile(config_file):
        try:
            with open(config_file, "r") as f:
                user_cfg = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{config_file} is not valid JSON: {e}") from e
        if not isinstance(user_cfg, dict):
            raise ConfigError(f"{config_file} must contain a JSON object")
        for key, value in user_cfg.items():
            if key not in DEFAULTS:
                print(f"[WARNING] Unknown config key '{key}' in {config_file}, ignored")
                continue
            cfg[key] = value
    else:
        print(f"[INFO] No config file found ({config_file}), using defaults")

    if isinstance(cfg["framebuffers"], str):
        cfg["framebuffers"] = [cfg["framebuffers"]]
    if not cfg["framebuffers"]:
        raise ConfigError("at least one framebuffer is required")
    if isinstance(cfg["keyboard_devices"], str):
        cfg["keyboard_devices"] = [cfg["keyboard_devices"]]
    cfg["framebuffers"] = [_framebuffer_entry(e, cfg["rotate"]) for e in cfg["framebuffers"]]
    return cfg
