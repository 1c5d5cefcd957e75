from datetime import datetime

import pytest

from robs.devices import MonitorInfo, monitor_source_name
from robs.recording_args import (
    CaptureTarget,
    RecordingSettings,
    build_ffmpeg_args,
    encoder_choices,
    find_capture_target,
    format_time,
    recording_filename,
)
from robs.scenes import Scene


def _after(args, flag):
    return args[args.index(flag) + 1]


def test_format_time_zero():
    assert format_time(0) == "00:00:00"


@pytest.mark.parametrize("seconds", [0, 59, 60, 3599, 3600, 86399, 123456])
def test_format_time_round_trip(seconds):
    text = format_time(seconds)
    h, m, s = (int(part) for part in text.split(":"))
    assert h * 3600 + m * 60 + s == seconds
    assert 0 <= m < 60 and 0 <= s < 60
    assert len(text.split(":")[1]) == 2


def test_encoder_choices_nothing_available():
    choices = encoder_choices(False, False, False)
    assert choices.video_encoders == ["None Available"]
    assert choices.audio_encoders == ["None Available"]
    assert choices.video_encoder == "None Available"
    assert choices.audio_encoder == "None Available"


def test_encoder_choices_all_available_prefers_nvenc():
    choices = encoder_choices(True, True, True)
    assert choices.video_encoders == [
        "FFmpeg x264 (Software)",
        "NVIDIA NVENC H.264 (Hardware)",
    ]
    assert choices.video_encoder == "NVIDIA NVENC H.264 (Hardware)"
    assert choices.audio_encoders == ["FFmpeg AAC"]
    assert choices.audio_encoder == "FFmpeg AAC"


def test_encoder_choices_ffmpeg_only():
    choices = encoder_choices(True, False, False)
    assert choices.video_encoder == "FFmpeg x264 (Software)"
    assert choices.video_encoder in choices.video_encoders


def test_find_capture_target_no_scene():
    target = find_capture_target(None)
    assert target.input_spec == "desktop"
    assert (target.width, target.height) == (1920, 1080)
    assert target.use_window_capture is False


def test_find_capture_target_prefers_window():
    scene = Scene("Main")
    monitor = MonitorInfo("Display 1", 1920, 1080, True, 0, 0)
    scene.add_source(1, monitor_source_name(monitor, 0))
    scene.add_source(2, "Window: Notepad")
    target = find_capture_target(scene)
    assert target.input_spec == "title=Notepad"
    assert target.use_window_capture is True
    assert target.uses_frame_pipe is False


def test_find_capture_target_skips_hidden_items():
    scene = Scene("Main")
    window = scene.add_source(1, "Window: Notepad")
    scene.set_item_visible(window.id, False)
    monitor = MonitorInfo("DISPLAY2", 2560, 1440, False, 1920, 0)
    scene.add_source(2, monitor_source_name(monitor, 1))
    target = find_capture_target(scene)
    assert target.input_spec == "desktop"
    assert (target.offset_x, target.offset_y) == (monitor.position_x, monitor.position_y)
    assert (target.width, target.height) == (monitor.width, monitor.height)
    assert target.uses_frame_pipe is True


def test_find_capture_target_empty_scene_defaults():
    target = find_capture_target(Scene("Empty"))
    assert target == CaptureTarget("desktop", 0, 0, 1920, 1080, False)


def test_recording_filename_uses_timestamp():
    name = recording_filename("mkv", datetime(2024, 1, 2, 3, 4, 5))
    assert name == "ROBS_2024-01-02 03-04-05.mkv"


def test_recording_filename_defaults_to_now():
    name = recording_filename("mp4")
    assert name.startswith("ROBS_") and name.endswith(".mp4")


def test_settings_encoder_mapping():
    assert RecordingSettings(video_encoder="NVIDIA NVENC H.264 (Hardware)").encoder == "h264_nvenc"
    assert RecordingSettings(video_encoder="FFmpeg x264 (Software)").encoder == "libx264"


def test_pipe_args_with_x264():
    settings = RecordingSettings()
    target = CaptureTarget("desktop")
    args = build_ffmpeg_args(settings, target, "out.mp4")
    assert args[:10] == [
        "-f", "rawvideo", "-pix_fmt", "bgra", "-video_size", "1280x720",
        "-framerate", "30", "-i", "pipe:0",
    ]
    assert _after(args, "-c:v") == "libx264"
    assert _after(args, "-crf") == "23"
    assert _after(args, "-tune") == "zerolatency"
    assert _after(args, "-r") == "30"
    assert args[-4:] == ["-f", "mp4", "-y", "out.mp4"]


def test_window_args_use_gdigrab():
    settings = RecordingSettings(recording_format="mkv")
    target = CaptureTarget("title=Notepad", 0, 0, 0, 0, True)
    args = build_ffmpeg_args(settings, target, "out.mkv")
    assert args[:8] == [
        "-f", "gdigrab", "-framerate", "30", "-draw_mouse", "1",
        "-i", "title=Notepad",
    ]
    assert "pipe:0" not in args
    assert args[-4:] == ["-f", "matroska", "-y", "out.mkv"]


def test_nvenc_args():
    settings = RecordingSettings(
        video_encoder="NVIDIA NVENC H.264 (Hardware)",
        recording_bitrate=10000,
        keyframe_interval=2,
    )
    args = build_ffmpeg_args(settings, CaptureTarget("desktop"), "out.flv")
    assert _after(args, "-c:v") == "h264_nvenc"
    assert _after(args, "-preset") == "p4"
    assert _after(args, "-rc") == "cbr"
    assert _after(args, "-b:v") == "10000k"
    assert _after(args, "-maxrate") == "10000k"
    assert _after(args, "-bufsize") == "20000k"
    assert _after(args, "-g") == "60"
    assert _after(args, "-multipass") == "fullres"
    assert args[-4:] == ["-f", "flv", "-y", "out.flv"]


def test_unknown_format_has_no_container_flag():
    settings = RecordingSettings(recording_format="mov")
    args = build_ffmpeg_args(settings, CaptureTarget("desktop"), "out.mov")
    assert args[-2:] == ["-y", "out.mov"]
    assert args[-4:-2] == ["-r", "30"]


def test_fractional_fps_is_kept():
    settings = RecordingSettings(fps=29.97)
    args = build_ffmpeg_args(settings, CaptureTarget("desktop"), "o.mp4")
    assert _after(args, "-framerate") == "29.97"
    assert _after(args, "-r") == "29.97"