"""Trigger control for the RED Brick status LEDs through sysfs."""

from __future__ import annotations

import enum
import os
from pathlib import Path

_LED_TRIGGER_MAX_LENGTH = 1024

_TRIGGER_NAMES = ("cpu0", "gpio", "heartbeat", "mmc0", "none", "default-on")

_LED_PATHS = (
    "sys/class/leds/red-brick:led:running/trigger",
    "sys/class/leds/red-brick:led:error/trigger",
)


class RedLed(enum.IntEnum):
    GREEN = 0
    RED = 1


class RedLedTrigger(enum.IntEnum):
    CPU = 0
    GPIO = 1
    HEARTBEAT = 2
    MMC = 3
    OFF = 4
    ON = 5

    UNKNOWN = -1
    ERROR = -2


class RedLedError(Exception):
    """Raised when the LED trigger file cannot be read or written."""


def _led_path(led: RedLed | int, root: str | os.PathLike[str]) -> Path:
    try:
        led = RedLed(led)
    except ValueError:
        raise ValueError(
            f"Unknown LED: {int(led)} (must be in [{RedLed.GREEN}, {RedLed.RED}])"
        ) from None
    return Path(root) / _LED_PATHS[led]


def set_trigger(
    led: RedLed | int,
    trigger: RedLedTrigger | int,
    root: str | os.PathLike[str] = "/",
) -> None:
    """Write the trigger for led below the filesystem root."""
    if not RedLedTrigger.CPU <= trigger <= RedLedTrigger.ON:
        raise ValueError(
            f"Unknown LED trigger: {int(trigger)} "
            f"(must be in [{RedLedTrigger.CPU}, {RedLedTrigger.ON}])"
        )
    path = _led_path(led, root)
    try:
        with open(path, "w", encoding="ascii") as fp:
            fp.write(f"{_TRIGGER_NAMES[trigger]}\n")
    except OSError as error:
        raise RedLedError(f"Could not write to file {path}: {error}") from error


def get_trigger(
    led: RedLed | int, root: str | os.PathLike[str] = "/"
) -> RedLedTrigger:
    """Return the active trigger of led, or UNKNOWN if it cannot be identified."""
    path = _led_path(led, root)
    try:
        with open(path, "rb") as fp:
            data = fp.read(_LED_TRIGGER_MAX_LENGTH)
    except OSError as error:
        raise RedLedError(f"Could not read from file {path}: {error}") from error
    if not data:
        raise RedLedError(f"Could not read from file {path}")

    text = data.decode("latin-1")
    start = text.find("[")
    end = text.find("]")
    if start < 0 or end < 0 or start >= end:
        return RedLedTrigger.UNKNOWN

    name = text[start + 1:end]
    if name in _TRIGGER_NAMES:
        return RedLedTrigger(_TRIGGER_NAMES.index(name))
    return RedLedTrigger.UNKNOWN