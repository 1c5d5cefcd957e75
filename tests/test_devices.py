import subprocess
from unittest.mock import patch

import pytest

from robs.devices import (
    AudioDeviceInfo,
    MonitorInfo,
    default_monitors,
    list_audio_devices,
    monitor_label,
    monitor_source_name,
    parse_dshow_audio_devices,
    parse_monitor_coords,
    parse_monitor_index,
    window_label,
)

SECONDARY = MonitorInfo("\\\\.\\DISPLAY2", 2560, 1440, False, -2560, 100)
PRIMARY = MonitorInfo("\\\\.\\DISPLAY1", 1920, 1080, True, 0, 0)

DSHOW_OUTPUT = "\n".join(
    [
        '[dshow @ 0x1] DirectShow video devices (some may be both video and audio devices)',
        '[dshow @ 0x1]  "Some Camera" (video)',
        '[dshow @ 0x1] DirectShow audio devices',
        '[dshow @ 0x1]  "Microphone (USB Audio)" (audio)',
        '[dshow @ 0x1]     Alternative name "@device_cm_{placeholder}"',
        '[dshow @ 0x1]  "Audio Device Thing" (audio)',
        '[dshow @ 0x1]  "ab" (audio)',
        '[dshow @ 0x1]  "Line In" (audio)',
    ]
)


def test_default_monitors():
    monitors = default_monitors()
    assert monitors == [MonitorInfo("Display 1", 1920, 1080, True, 0, 0)]


def test_monitor_label_primary():
    assert monitor_label(PRIMARY) == "\\\\.\\DISPLAY1 (1920x1080 - PRIMARY)"


def test_monitor_label_secondary_includes_position():
    label = monitor_label(SECONDARY)
    assert label.startswith(SECONDARY.name)
    assert label.endswith("@ -2560,100)")
    assert "PRIMARY" not in label


def test_monitor_source_name_primary_uses_primary_word():
    name = monitor_source_name(PRIMARY, 0)
    assert name.startswith("Display Capture - Primary|idx:0|")


@pytest.mark.parametrize("monitor,index", [(PRIMARY, 0), (SECONDARY, 1), (SECONDARY, 7)])
def test_source_name_round_trip(monitor, index):
    name = monitor_source_name(monitor, index)
    assert parse_monitor_coords(name) == (
        monitor.position_x,
        monitor.position_y,
        monitor.width,
        monitor.height,
    )
    assert parse_monitor_index(name) == index


def test_parse_coords_defaults_without_params():
    assert parse_monitor_coords("Display Capture") == (0, 0, 1920, 1080)
    assert parse_monitor_coords("Window: Editor") == (0, 0, 1920, 1080)


def test_parse_coords_bad_values_fall_back():
    name = "Display Capture - X|x:abc|y: 5|w:|h:1.5"
    assert parse_monitor_coords(name) == (0, 0, 1920, 1080)


def test_parse_coords_partial():
    assert parse_monitor_coords("D|w:800|junk|h:600") == (0, 0, 800, 600)


def test_parse_index_defaults():
    assert parse_monitor_index("Display Capture - Primary") == 0
    assert parse_monitor_index("D|idx:-1") == 0
    assert parse_monitor_index("D|x:3|y:4") == 0


def test_window_label_short_kept():
    assert window_label("Editor") == "Editor"
    title = "a" * 40
    assert window_label(title) == title


def test_window_label_long_truncated():
    title = "b" * 41
    label = window_label(title)
    assert label == "b" * 40 + "..."


def test_parse_dshow_audio_devices():
    devices = parse_dshow_audio_devices(DSHOW_OUTPUT)
    assert [d.name for d in devices] == ["Microphone (USB Audio)", "Line In"]
    assert all(d.id == f"audio={d.name}" for d in devices)
    assert all(d.is_input for d in devices)


def test_parse_dshow_ignores_video_section():
    text = '[dshow] DirectShow video devices\n[dshow]  "Cam Mic" (audio)'
    assert parse_dshow_audio_devices(text) == []


@patch("robs.devices._IS_WINDOWS", False)
def test_list_audio_devices_non_windows():
    devices = list_audio_devices()
    assert [d.id for d in devices] == ["disabled", "default", "default"]


@patch("robs.devices._IS_WINDOWS", True)
def test_list_audio_devices_windows_parses_ffmpeg():
    completed = subprocess.CompletedProcess([], 1, b"", DSHOW_OUTPUT.encode())
    with patch("robs.devices.subprocess.run", return_value=completed) as run:
        devices = list_audio_devices()
    assert run.call_args.args[0][0] == "ffmpeg"
    assert [d.id for d in devices] == [
        "disabled",
        "default",
        "audio=Microphone (USB Audio)",
        "audio=Line In",
    ]


@patch("robs.devices._IS_WINDOWS", True)
def test_list_audio_devices_windows_fallback_when_ffmpeg_missing():
    with patch("robs.devices.subprocess.run", side_effect=FileNotFoundError):
        devices = list_audio_devices()
    assert len(devices) == 5
    assert devices[2] == AudioDeviceInfo(
        "Broadcast Stream Mix (TC-HELICON GoXLR)",
        "audio=Broadcast Stream Mix (TC-HELICON GoXLR)",
        False,
    )
    assert devices[3].is_input is True
    assert devices[4].is_input is False