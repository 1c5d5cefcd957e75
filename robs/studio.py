"""Studio state: scenes, sources, streaming and recording controls."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

from robs.devices import (
    MonitorInfo,
    list_audio_devices,
    monitor_source_name,
    parse_monitor_coords,
)
from robs.profile import ProfileManager
from robs.recorder import Recorder
from robs.recording_args import (
    DISPLAY_PREFIX,
    WINDOW_PREFIX,
    RecordingSettings,
    encoder_choices,
    find_capture_target,
    recording_filename,
)
from robs.scenes import Crop, Position, Scale, Scene, SceneCollection, SceneItem

log = logging.getLogger(__name__)

MAIN_SCENE = "Main Scene"
CANVAS_MARGIN = 0.95
MIN_SCALE = 0.01
MAX_SCALE = 10.0
MAX_ROTATION = 360.0
MAX_CROP = 9999


class _Canvas(NamedTuple):
    scale: float
    offset_x: float
    offset_y: float
    width: float
    height: float


def fit_canvas(
    available_width: float,
    available_height: float,
    scene_width: float,
    scene_height: float,
) -> _Canvas:
    """Fit the scene into the available area, centred, with a small margin."""
    if scene_width <= 0 or scene_height <= 0:
        raise ValueError(f"invalid scene size {scene_width}x{scene_height}")
    scale = min(available_width / scene_width, available_height / scene_height) * CANVAS_MARGIN
    width = scene_width * scale
    height = scene_height * scale
    return _Canvas(
        scale,
        (available_width - width) / 2.0,
        (available_height - height) / 2.0,
        width,
        height,
    )


def source_size(item_name: str, scene_width: int, scene_height: int) -> tuple[int, int]:
    """Native size of a source: the monitor size for display captures, else the scene size."""
    if item_name.startswith(DISPLAY_PREFIX):
        _, _, width, height = parse_monitor_coords(item_name)
        return width, height
    return scene_width, scene_height


def _is_capture(item: SceneItem) -> bool:
    return item.name.startswith(WINDOW_PREFIX) or item.name.startswith(DISPLAY_PREFIX)


def _clamp(value, low, high):
    return max(low, min(high, value))


@dataclass
class _MixerChannel:
    name: str
    volume: float
    muted: bool = False
    device_id: str = "default"
    is_desktop: bool = False


@dataclass
class _SourceEdit:
    item_id: uuid.UUID
    name: str
    position: Position = field(default_factory=Position)
    scale: Scale = field(default_factory=Scale)
    rotation: float = 0.0
    crop: Crop = field(default_factory=Crop)


class Studio:
    """Everything the studio window shows and edits, independent of any toolkit."""

    def __init__(
        self,
        ffmpeg_available: bool = False,
        nvenc_available: bool = False,
        aac_available: bool = False,
        profile_manager: ProfileManager | None = None,
    ) -> None:
        choices = encoder_choices(ffmpeg_available, nvenc_available, aac_available)
        self.ffmpeg_available = ffmpeg_available
        self.nvenc_available = nvenc_available
        self.aac_available = aac_available
        self.available_video_encoders = choices.video_encoders
        self.available_audio_encoders = choices.audio_encoders
        self.video_encoder = choices.video_encoder
        self.audio_encoder = choices.audio_encoder

        self.profile_manager = profile_manager if profile_manager is not None else ProfileManager()

        self.streaming = False
        self.recording = False
        self.streaming_time = 0
        self.bitrate = 6000
        self.dropped_frames = 0
        self.fps = 30.0

        self.scenes = SceneCollection()
        self.scenes.create_scene(MAIN_SCENE)
        self.scenes.set_current_scene(MAIN_SCENE)
        self.current_scene = MAIN_SCENE

        self.confirm_on_exit = True
        self.minimize_to_tray = False
        self.always_on_top = False
        self.check_for_updates = True
        self.filename_formatting = "%CCYY-%MM-%DD %hh-%mm-%ss"
        self.base_width = 1920
        self.base_height = 1080
        self.output_width = 1280
        self.output_height = 720
        self.fps_setting = 30.0
        self.stream_server = "rtmp://live.twitch.tv/app"
        self.stream_key = ""
        self.stream_bitrate = 6000
        self.keyframe_interval = 2
        self.recording_bitrate = 10000
        self.recording_path = ""
        self.recording_format = "mp4"
        self.audio_sample_rate = "48000"
        self.audio_channel_mode = "stereo"
        self.audio_channels = [
            _MixerChannel("Mic/Aux", 0.8, is_desktop=False),
            _MixerChannel("Desktop Audio", 0.6, is_desktop=True),
        ]
        self.audio_devices = list_audio_devices()

        self.show_settings = False
        self.show_source_properties = False
        self.editing: _SourceEdit | None = None

        self.recorder = Recorder(self._recording_settings())

    # Streaming and recording

    def toggle_streaming(self) -> bool:
        """Start or stop streaming; starting resets the stream clock."""
        self.streaming = not self.streaming
        if self.streaming:
            self.streaming_time = 0
        return self.streaming

    def tick(self) -> None:
        """Advance the once-a-second clock."""
        if self.streaming:
            self.streaming_time += 1

    def _recording_settings(self) -> RecordingSettings:
        return RecordingSettings(
            fps=self.fps_setting,
            output_width=self.output_width,
            output_height=self.output_height,
            recording_bitrate=self.recording_bitrate,
            keyframe_interval=self.keyframe_interval,
            recording_format=self.recording_format,
            video_encoder=self.video_encoder,
        )

    def _recording_dir(self) -> Path:
        if self.recording_path:
            return Path(self.recording_path)
        return Path.home() / "Videos"

    def toggle_recording(self) -> bool:
        """Start or stop recording the current scene's capture source."""
        if self.recording:
            self.recorder.stop()
            self.recording = False
            return False

        output = self._recording_dir() / recording_filename(self.recording_format)
        target = find_capture_target(self.scenes.current_scene())
        self.recorder.settings = self._recording_settings()
        try:
            self.recorder.start(target, output)
        except OSError as exc:
            print(f"[Recording] Failed to start FFmpeg: {exc}")
        self.recording = True
        return True

    # Scenes

    def _scene(self) -> Scene | None:
        return self.scenes.current_scene()

    def add_scene(self) -> str:
        """Add a scene named after the scene count and make it current."""
        name = f"Scene {len(self.scenes) + 1}"
        self.scenes.create_scene(name)
        self.scenes.set_current_scene(name)
        self.current_scene = name
        return name

    def remove_current_scene(self) -> bool:
        """Remove the current scene unless it is the last one."""
        name = self.scenes.current_scene_name
        if len(self.scenes) <= 1 or name is None:
            return False
        self.scenes.remove(name)
        names = self.scenes.list()
        if names:
            self.scenes.set_current_scene(names[0])
            self.current_scene = names[0]
        return True

    def select_scene(self, name: str) -> None:
        """Make a scene current; raises KeyError for unknown names."""
        self.scenes.set_current_scene(name)
        self.current_scene = name

    # Sources

    def add_display_capture(self, monitor: MonitorInfo, index: int) -> SceneItem | None:
        scene = self._scene()
        if scene is None:
            return None
        return scene.add_source(uuid.uuid4(), monitor_source_name(monitor, index))

    def add_window_capture(self, title: str) -> SceneItem | None:
        scene = self._scene()
        if scene is None:
            return None
        return scene.add_source(uuid.uuid4(), f"Window: {title}")

    def has_capture_source(self) -> bool:
        """True if the current scene has a visible window or display capture."""
        scene = self._scene()
        if scene is None:
            return False
        return any(item.visible and _is_capture(item) for item in scene.items)

    def _item(self, item_id: uuid.UUID) -> SceneItem | None:
        scene = self._scene()
        return scene.item(item_id) if scene is not None else None

    def open_source_properties(self, item_id: uuid.UUID) -> bool:
        """Load an item's transform into the properties editor."""
        item = self._item(item_id)
        if item is None:
            return False
        self.editing = _SourceEdit(
            item_id=item.id,
            name=item.name,
            position=Position(item.position.x, item.position.y),
            scale=Scale(item.scale.x, item.scale.y),
            rotation=item.rotation,
            crop=Crop(item.crop.left, item.crop.top, item.crop.right, item.crop.bottom),
        )
        self.show_source_properties = True
        return True

    def apply_source_properties(self) -> bool:
        """Write the edited transform back to the item and close the editor."""
        edit = self.editing
        applied = False
        if edit is not None:
            item = self._item(edit.item_id)
            if item is not None:
                item.position = Position(edit.position.x, edit.position.y)
                item.scale = Scale(
                    _clamp(edit.scale.x, MIN_SCALE, MAX_SCALE),
                    _clamp(edit.scale.y, MIN_SCALE, MAX_SCALE),
                )
                item.rotation = _clamp(edit.rotation, 0.0, MAX_ROTATION)
                item.crop = Crop(
                    *(
                        _clamp(value, 0, MAX_CROP)
                        for value in (edit.crop.left, edit.crop.top, edit.crop.right, edit.crop.bottom)
                    )
                )
                applied = True
        self.show_source_properties = False
        return applied

    def cancel_source_properties(self) -> None:
        self.show_source_properties = False

    def drag_item(self, item_id: uuid.UUID, dx: float, dy: float, canvas_scale: float) -> bool:
        """Move an item by a drag measured in canvas pixels."""
        item = self._item(item_id)
        if item is None:
            return False
        item.position = Position(
            item.position.x + dx / canvas_scale,
            item.position.y + dy / canvas_scale,
        )
        return True

    def resize_item(self, item_id: uuid.UUID, dx: float, dy: float, canvas_scale: float) -> bool:
        """Grow or shrink an item by a corner drag measured in canvas pixels."""
        scene = self._scene()
        item = scene.item(item_id) if scene is not None else None
        if item is None:
            return False
        src_w, src_h = source_size(item.name, *scene.output_size)
        if src_w == 0 or src_h == 0:
            return False
        item.scale = Scale(
            max(MIN_SCALE, item.scale.x + dx / canvas_scale / src_w),
            max(MIN_SCALE, item.scale.y + dy / canvas_scale / src_h),
        )
        return True