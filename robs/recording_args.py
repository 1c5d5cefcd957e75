"""Recording setup: encoder choices, capture target lookup and ffmpeg arguments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

from robs.devices import parse_monitor_coords
from robs.scenes import Scene

X264_ENCODER_NAME = "FFmpeg x264 (Software)"
NVENC_ENCODER_NAME = "NVIDIA NVENC H.264 (Hardware)"
AAC_ENCODER_NAME = "FFmpeg AAC"
NONE_AVAILABLE = "None Available"

WINDOW_PREFIX = "Window:"
DISPLAY_PREFIX = "Display Capture"

_CONTAINER_FORMATS = {"mp4": "mp4", "mkv": "matroska", "flv": "flv"}


def format_time(seconds: int) -> str:
    """Elapsed seconds as HH:MM:SS."""
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02}:{minutes:02}:{secs:02}"


class _EncoderChoices(NamedTuple):
    video_encoders: list[str]
    audio_encoders: list[str]
    video_encoder: str
    audio_encoder: str


def encoder_choices(
    ffmpeg_available: bool, nvenc_available: bool, aac_available: bool
) -> _EncoderChoices:
    """Encoders to offer and the defaults to select, given what was detected."""
    video = []
    if ffmpeg_available:
        video.append(X264_ENCODER_NAME)
    if nvenc_available:
        video.append(NVENC_ENCODER_NAME)
    if not video:
        video.append(NONE_AVAILABLE)

    audio = [AAC_ENCODER_NAME] if aac_available else [NONE_AVAILABLE]

    if nvenc_available:
        video_default = NVENC_ENCODER_NAME
    elif ffmpeg_available:
        video_default = X264_ENCODER_NAME
    else:
        video_default = NONE_AVAILABLE
    audio_default = AAC_ENCODER_NAME if aac_available else NONE_AVAILABLE
    return _EncoderChoices(video, audio, video_default, audio_default)


@dataclass(frozen=True)
class CaptureTarget:
    """What a recording captures: a window by title or a desktop region."""

    input_spec: str
    offset_x: int = 0
    offset_y: int = 0
    width: int = 1920
    height: int = 1080
    use_window_capture: bool = False

    @property
    def uses_frame_pipe(self) -> bool:
        """Desktop captures are fed to ffmpeg as raw frames on stdin."""
        return not self.use_window_capture


def find_capture_target(scene: Scene | None) -> CaptureTarget:
    """The first visible window capture, else the first visible display capture."""
    if scene is None:
        return CaptureTarget("desktop")
    visible = [item for item in scene.items if item.visible]
    window = next((i for i in visible if i.name.startswith(WINDOW_PREFIX)), None)
    if window is not None:
        title = window.name.removeprefix("Window: ")
        return CaptureTarget(f"title={title}", 0, 0, 0, 0, True)
    display = next((i for i in visible if i.name.startswith(DISPLAY_PREFIX)), None)
    if display is not None:
        x, y, w, h = parse_monitor_coords(display.name)
        return CaptureTarget("desktop", x, y, w, h, False)
    return CaptureTarget("desktop")


@dataclass
class RecordingSettings:
    fps: float = 30.0
    output_width: int = 1280
    output_height: int = 720
    recording_bitrate: int = 10000
    keyframe_interval: int = 2
    recording_format: str = "mp4"
    video_encoder: str = X264_ENCODER_NAME

    @property
    def encoder(self) -> str:
        """The ffmpeg video codec for the selected encoder."""
        if "NVENC" in self.video_encoder or "NVIDIA" in self.video_encoder:
            return "h264_nvenc"
        return "libx264"


def recording_filename(recording_format: str, now: datetime | None = None) -> str:
    """File name for a new recording, stamped with the local time."""
    stamp = (now or datetime.now()).strftime("%Y-%m-%d %H-%M-%S")
    return f"ROBS_{stamp}.{recording_format}"


def _number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def build_ffmpeg_args(
    settings: RecordingSettings, target: CaptureTarget, output_path: str
) -> list[str]:
    """Command-line arguments (without the program name) for a recording."""
    fps = _number(settings.fps)
    args: list[str] = []
    if target.uses_frame_pipe:
        args += [
            "-f", "rawvideo",
            "-pix_fmt", "bgra",
            "-video_size", f"{settings.output_width}x{settings.output_height}",
            "-framerate", fps,
            "-i", "pipe:0",
        ]
    else:
        args += [
            "-f", "gdigrab",
            "-framerate", fps,
            "-draw_mouse", "1",
            "-i", target.input_spec,
        ]

    encoder = settings.encoder
    args += ["-c:v", encoder]
    if encoder == "h264_nvenc":
        bitrate = settings.recording_bitrate
        gop_size = max(0, int(settings.fps * settings.keyframe_interval))
        args += [
            "-preset", "p4",
            "-tune", "hq",
            "-gpu", "0",
            "-rc", "cbr",
            "-b:v", f"{bitrate}k",
            "-maxrate", f"{bitrate}k",
            "-bufsize", f"{bitrate * 2}k",
            "-g", str(gop_size),
            "-multipass", "fullres",
        ]
    else:
        args += ["-preset", "fast", "-tune", "zerolatency", "-crf", "23"]

    args += ["-r", fps]
    container = _CONTAINER_FORMATS.get(settings.recording_format)
    if container is not None:
        args += ["-f", container]
    args += ["-y", output_path]
    return args