"""Audio mixer channel model and level helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class AudioChannel:
    name: str = ""
    volume: float = 1.0
    muted: bool = False
    db: float = 0.0
    mono_mode: bool = False
    monitoring: bool = False


def volume_to_db(volume: float) -> float:
    """Linear volume to decibels; silence is minus infinity."""
    if volume > 0.0:
        return 20.0 * math.log10(volume)
    return -math.inf


def format_db(volume: float) -> str:
    """Label for a linear volume, e.g. '-6.0 dB' or '-∞ dB'."""
    db = volume_to_db(volume)
    if math.isfinite(db):
        return f"{db:.1f} dB"
    return "-∞ dB"


def meter_color(level: float) -> str:
    """Meter colour name for a level: red above 0.9, yellow above 0.7."""
    if level > 0.9:
        return "red"
    if level > 0.7:
        return "yellow"
    return "green"