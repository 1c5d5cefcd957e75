"""Display and audio device discovery, and the capture-source naming scheme."""

from __future__ import annotations

import re
import subprocess
import sys
from dataclasses import dataclass

_IS_WINDOWS = sys.platform == "win32"

_SIGNED_INT = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT = re.compile(r"\+?[0-9]+")
_I32_MIN, _I32_MAX = -(2**31), 2**31 - 1
_U32_MAX = 2**32 - 1

_DEFAULT_CAPTURE = (0, 0, 1920, 1080)
_WINDOW_LABEL_CHARS = 40


@dataclass(frozen=True)
class MonitorInfo:
    name: str
    width: int
    height: int
    is_primary: bool
    position_x: int
    position_y: int


@dataclass(frozen=True)
class AudioDeviceInfo:
    name: str
    id: str
    is_input: bool  # True for microphones/aux, False for desktop audio


def default_monitors() -> list[MonitorInfo]:
    """The monitor list used when no displays can be enumerated."""
    return [
        MonitorInfo(
            name="Display 1",
            width=1920,
            height=1080,
            is_primary=True,
            position_x=0,
            position_y=0,
        )
    ]


def monitor_label(monitor: MonitorInfo) -> str:
    """Menu label describing a monitor."""
    if monitor.is_primary:
        return f"{monitor.name} ({monitor.width}x{monitor.height} - PRIMARY)"
    return (
        f"{monitor.name} ({monitor.width}x{monitor.height} "
        f"@ {monitor.position_x},{monitor.position_y})"
    )


def monitor_source_name(monitor: MonitorInfo, index: int) -> str:
    """Scene item name for a display capture, carrying the monitor geometry."""
    mon_name = "Primary" if monitor.is_primary else monitor.name
    return (
        f"Display Capture - {mon_name}|idx:{index}"
        f"|x:{monitor.position_x}|y:{monitor.position_y}"
        f"|w:{monitor.width}|h:{monitor.height}"
    )


def window_label(title: str) -> str:
    """Menu label for a window: at most 40 characters, with '...' if cut."""
    if len(title) > _WINDOW_LABEL_CHARS:
        return f"{title[:_WINDOW_LABEL_CHARS]}..."
    return title


def _parse_int(text: str, default: int, *, signed: bool) -> int:
    pattern = _SIGNED_INT if signed else _UNSIGNED_INT
    if not pattern.fullmatch(text):
        return default
    value = int(text)
    low, high = (_I32_MIN, _I32_MAX) if signed else (0, _U32_MAX)
    return value if low <= value <= high else default


def _name_params(source_name: str):
    """Yield (key, value) pairs from the '|key:value' tail of a source name."""
    _, pipe, params = source_name.partition("|")
    if not pipe:
        return
    for param in params.split("|"):
        key, colon, value = param.partition(":")
        if colon:
            yield key, value


def parse_monitor_coords(source_name: str) -> tuple[int, int, int, int]:
    """(x, y, width, height) of a display capture, defaulting to 1920x1080 at 0,0."""
    x, y, w, h = _DEFAULT_CAPTURE
    for key, value in _name_params(source_name):
        if key == "x":
            x = _parse_int(value, 0, signed=True)
        elif key == "y":
            y = _parse_int(value, 0, signed=True)
        elif key == "w":
            w = _parse_int(value, 1920, signed=True)
        elif key == "h":
            h = _parse_int(value, 1080, signed=True)
    return x, y, w, h


def parse_monitor_index(source_name: str) -> int:
    """Monitor index stored in a display capture name; 0 (primary) by default."""
    for key, value in _name_params(source_name):
        if key == "idx":
            return _parse_int(value, 0, signed=False)
    return 0


def parse_dshow_audio_devices(output: str) -> list[AudioDeviceInfo]:
    """Audio input devices from an ffmpeg DirectShow device listing."""
    devices: list[AudioDeviceInfo] = []
    in_audio_section = False
    for line in output.splitlines():
        if "DirectShow audio devices" in line:
            in_audio_section = True
            continue
        if "DirectShow video devices" in line:
            in_audio_section = False
        if not (in_audio_section and "(audio)" in line):
            continue
        start = line.find('"')
        if start < 0:
            continue
        end = line.find('"', start + 1)
        if end < 0:
            continue
        name = line[start + 1 : end]
        if "Device" in name or not name or len(name.encode("utf-8")) <= 2:
            continue
        devices.append(AudioDeviceInfo(name=name, id=f"audio={name}", is_input=True))
    return devices


def _fallback_devices() -> list[AudioDeviceInfo]:
    return [
        AudioDeviceInfo(
            name="Broadcast Stream Mix (TC-HELICON GoXLR)",
            id="audio=Broadcast Stream Mix (TC-HELICON GoXLR)",
            is_input=False,
        ),
        AudioDeviceInfo(
            name="Chat Mic (TC-HELICON GoXLR)",
            id="audio=Chat Mic (TC-HELICON GoXLR)",
            is_input=True,
        ),
        AudioDeviceInfo(
            name="CABLE Output (VB-Audio Virtual Cable)",
            id="audio=CABLE Output (VB-Audio Virtual Cable)",
            is_input=False,
        ),
    ]


def list_audio_devices() -> list[AudioDeviceInfo]:
    """Selectable audio devices, starting with 'Disabled' and 'Default'."""
    devices = [
        AudioDeviceInfo(name="Disabled", id="disabled", is_input=True),
        AudioDeviceInfo(name="Default", id="default", is_input=True),
    ]
    if _IS_WINDOWS:
        try:
            result = subprocess.run(
                ["ffmpeg", "-list_devices", "true", "-f", "dshow", "-i", "dummy"],
                stdin=subprocess.DEVNULL,
                capture_output=True,
            )
        except OSError:
            result = None
        if result is not None:
            stderr = result.stderr.decode("utf-8", errors="replace")
            devices.extend(parse_dshow_audio_devices(stderr))
        if len(devices) <= 2:
            devices.extend(_fallback_devices())
    else:
        devices.append(AudioDeviceInfo(name="Default", id="default", is_input=True))
    return devices