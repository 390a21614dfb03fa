from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, TypedDict, Union

import tomllib
from logger import log as _log
from resources import config_file

KEYPAD_KEYS: tuple[str, ...] = tuple(f"{k:X}" for k in range(16))


class GeneralConfig(TypedDict):
    instructions_per_second: int
    tick_rate: int
    scale: int
    pixel_outlines: bool


class DisplayConfig(TypedDict):
    fg_color: str
    bg_color: str


class SoundConfig(TypedDict):
    enable: bool
    frequency: int
    volume: float


class Config(TypedDict):
    general: GeneralConfig
    display: DisplayConfig
    sound: SoundConfig
    keyboard: dict[str, str]


DEFAULT_CONFIG: Config = {
    "general": {"instructions_per_second": 500, "tick_rate": 60, "scale": 20, "pixel_outlines": True},
    "display": {"fg_color": "FFFFFFFF", "bg_color": "000000FF"},
    "sound": {"enable": True, "frequency": 440, "volume": 0.25},
    # COSMAC VIP keypad on the left side of a QWERTY keyboard
    "keyboard": {
        "1": "1", "2": "2", "3": "3", "C": "4",
        "4": "Q", "5": "W", "6": "E", "D": "R",
        "7": "A", "8": "S", "9": "D", "E": "F",
        "A": "Z", "0": "X", "B": "C", "F": "V",
        "PAUSE": "SPACE",
        "QUIT": "ESCAPE",
    },
}  # fmt: skip


def parse_color(value: str) -> tuple[int, int, int, int]:
    """Parse an ``RRGGBBAA`` hex string (a leading ``#`` is allowed)."""
    text = value.strip().removeprefix("#")
    if len(text) != 8:
        raise ValueError(f"Color {value!r} must be 8 hex digits (RRGGBBAA)")
    rgba = int(text, 16)
    return (rgba >> 24) & 0xFF, (rgba >> 16) & 0xFF, (rgba >> 8) & 0xFF, rgba & 0xFF


def _deep_merge(
    target: MutableMapping[str, Any],
    overrides: Mapping[str, Any],
) -> MutableMapping[str, Any]:
    for key, value in overrides.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
    return target


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _validate_config(cfg: Config) -> None:
    general = cfg["general"]
    for name in ("instructions_per_second", "tick_rate", "scale"):
        if not _positive_int(general[name]):
            raise ValueError(f"general.{name} must be a positive integer")

    if not isinstance(general["pixel_outlines"], bool):
        raise ValueError("general.pixel_outlines must be a boolean")

    for name in ("fg_color", "bg_color"):
        if not isinstance(cfg["display"][name], str):
            raise ValueError(f"display.{name} must be a string")
        parse_color(cfg["display"][name])

    sound = cfg["sound"]
    if not isinstance(sound["enable"], bool):
        raise ValueError("sound.enable must be a boolean")
    if not _positive_int(sound["frequency"]):
        raise ValueError("sound.frequency must be a positive integer")
    if not isinstance(sound["volume"], (int, float)) or not 0.0 <= sound["volume"] <= 1.0:
        raise ValueError("sound.volume must be a number between 0 and 1")

    for name, key in cfg["keyboard"].items():
        if not isinstance(key, str):
            raise ValueError(f"keyboard.{name} must be a key name string")


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """Load ``config.toml`` over the defaults. A broken file is logged and the defaults are used."""
    source = Path(path) if path is not None else config_file
    config = deepcopy(DEFAULT_CONFIG)
    if not source.exists():
        return config

    try:
        with open(source, "rb") as f:
            data = tomllib.load(f)

        if not isinstance(data, dict):
            raise ValueError("Config file root must be a table (dict).")

        _deep_merge(config, data)
        _validate_config(config)

    except (OSError, ValueError, KeyError) as e:
        _log.error(f"Failed to load config: {e}", exc_info=(type(e), e, e.__traceback__))
        return deepcopy(DEFAULT_CONFIG)

    return config
