"""Application-wide settings: general, video, audio, hotkeys and UI layout."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any


class DockKind(enum.Enum):
    """How a dock node arranges its content."""

    HORIZONTAL = "Horizontal"
    VERTICAL = "Vertical"
    PANE = "Pane"
    TABS = "Tabs"


@dataclass
class DockNode:
    """A node of the dock layout, placed in normalised window coordinates."""

    kind: DockKind
    x: float = 0.0
    y: float = 0.0
    w: float = 1.0
    h: float = 1.0
    tabs: list[str] = field(default_factory=list)
    children: list[DockNode] = field(default_factory=list)

    @classmethod
    def pane(cls, name: str, x: float, y: float, w: float, h: float) -> DockNode:
        """A single named pane."""
        return cls(DockKind.PANE, x, y, w, h, [name])

    @classmethod
    def tabbed(cls, names, x: float, y: float, w: float, h: float) -> DockNode:
        """A group of panes shown as tabs."""
        return cls(DockKind.TABS, x, y, w, h, [str(name) for name in names])

    @classmethod
    def horizontal(cls, children) -> DockNode:
        """A full-size node laying its children out side by side."""
        return cls(DockKind.HORIZONTAL, children=list(children))

    @classmethod
    def vertical(cls, children) -> DockNode:
        """A full-size node stacking its children."""
        return cls(DockKind.VERTICAL, children=list(children))


def _default_docks() -> list[DockNode]:
    return [
        DockNode.pane("Sources", 0.0, 0.0, 0.25, 0.4),
        DockNode.pane("Scenes", 0.0, 0.4, 0.25, 0.3),
        DockNode.pane("Controls", 0.75, 0.7, 0.25, 0.3),
        DockNode.pane("Chat", 0.75, 0.0, 0.25, 0.7),
        DockNode.tabbed(["Audio Mixer", "Chat"], 0.75, 0.0, 0.25, 0.7),
    ]


@dataclass
class DockLayout:
    docks: list[DockNode] = field(default_factory=_default_docks)


@dataclass
class HotkeyBinding:
    action: str
    key: str
    modifiers: list[str] = field(default_factory=list)


@dataclass
class GeneralSettings:
    language: str = "en"
    theme: str = "dark"
    check_for_updates: bool = True
    confirm_on_exit: bool = True
    minimize_to_tray: bool = False
    always_on_top: bool = False
    recording_prefix: str = ""
    recording_suffix: str = ""
    replay_buffer_prefix: str = ""
    replay_buffer_suffix: str = ""
    filename_formatting: str = "%CCYY-%MM-%DD %hh-%mm-%ss"
    overwrite_confirm: bool = True
    auto_replay_buffer: bool = False


@dataclass
class VideoSettings:
    adapter: int = 0
    vsync: bool = True
    fps: int = 30
    base_resolution: tuple[int, int] = (1920, 1080)
    output_resolution: tuple[int, int] = (1280, 720)
    downscale_filter: str = "bilinear"
    disable_audio_monitoring: bool = False

    def __post_init__(self) -> None:
        self.base_resolution = tuple(self.base_resolution)
        self.output_resolution = tuple(self.output_resolution)


@dataclass
class AudioSettings:
    monitoring_device: str = "default"
    monitoring_device_name: str = "Default"
    disable_audio_ducking: bool = False
    suppress_warning: bool = False
    sample_rate: int = 48000
    channel_setup: str = "Stereo"


@dataclass
class UiSettings:
    layout: str = "default"
    preview_enabled: bool = True
    preview_scaling: str = "fit"
    dock_layout: DockLayout = field(default_factory=DockLayout)


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def _flat(cls, data: dict[str, Any]):
    return cls(**{f.name: data[f.name] for f in fields(cls)})


def _dock_node(data: dict[str, Any]) -> DockNode:
    return DockNode(
        kind=DockKind(data["kind"]),
        x=data["x"],
        y=data["y"],
        w=data["w"],
        h=data["h"],
        tabs=list(data["tabs"]),
        children=[_dock_node(child) for child in data["children"]],
    )


@dataclass
class AppSettings:
    general: GeneralSettings = field(default_factory=GeneralSettings)
    video: VideoSettings = field(default_factory=VideoSettings)
    audio: AudioSettings = field(default_factory=AudioSettings)
    hotkeys: list[HotkeyBinding] = field(default_factory=list)
    ui: UiSettings = field(default_factory=UiSettings)

    @classmethod
    def load_or_default(cls) -> AppSettings:
        """Settings are not persisted yet, so this yields the defaults."""
        return cls()

    def save(self) -> None:
        """Settings live in memory only; there is nothing to write."""
        return None

    def to_dict(self) -> dict[str, Any]:
        """Plain data (strings, numbers, lists, dicts) for serialisation."""
        return _plain(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppSettings:
        """Rebuild settings from plain data; raises ValueError if malformed."""
        try:
            ui = data["ui"]
            return cls(
                general=_flat(GeneralSettings, data["general"]),
                video=_flat(VideoSettings, data["video"]),
                audio=_flat(AudioSettings, data["audio"]),
                hotkeys=[_flat(HotkeyBinding, item) for item in data["hotkeys"]],
                ui=UiSettings(
                    layout=ui["layout"],
                    preview_enabled=ui["preview_enabled"],
                    preview_scaling=ui["preview_scaling"],
                    dock_layout=DockLayout(
                        [_dock_node(node) for node in ui["dock_layout"]["docks"]]
                    ),
                ),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"invalid settings data: {exc!r}") from exc