"""Profiles: named bundles of video, audio, streaming and output configuration."""

from __future__ import annotations

import copy
import dataclasses
import enum
import json
import tomllib
import uuid
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any

import platformdirs
import tomli_w


class ProfileNotFoundError(LookupError):
    """Raised when a profile id is not known to the manager."""


class ScaleType(enum.Enum):
    POINT = "Point"
    BILINEAR = "Bilinear"
    BICUBIC = "Bicubic"
    LANCZOS = "Lanczos"
    AREA = "Area"


class OutputMode(enum.Enum):
    SIMPLE = "Simple"
    ADVANCED = "Advanced"


class RecordingQuality(enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    LOSSLESS = "Lossless"


@dataclass
class VideoProfileConfig:
    width: int = 1280
    height: int = 720
    fps_num: int = 30
    fps_den: int = 1
    output_width: int = 1280
    output_height: int = 720
    scale_type: ScaleType = ScaleType.BILINEAR
    format: str = "NV12"


@dataclass
class AudioTrackConfig:
    id: int = 0
    name: str = "Track 1"
    sources: list[str] = field(default_factory=list)
    mixer: bool = True


@dataclass
class AudioProfileConfig:
    sample_rate: int = 48000
    channels: int = 2
    format: str = "F32"
    tracks: list[AudioTrackConfig] = field(default_factory=lambda: [AudioTrackConfig()])


@dataclass
class RecordingConfig:
    format: str = "mp4"
    path: str = ""
    quality: RecordingQuality = RecordingQuality.HIGH
    encoder: str = "x264"
    bitrate: int = 10000


@dataclass
class StreamingOutputConfig:
    encoder: str = "x264"
    bitrate: int = 6000
    use_cbr: bool = True
    enforce_bitrate: bool = True
    keyint: int = 2
    preset: str = "faster"


@dataclass
class ReplayBufferConfig:
    enabled: bool = False
    duration_secs: int = 20
    max_mb: int = 500


@dataclass
class OutputProfileConfig:
    mode: OutputMode = OutputMode.SIMPLE
    recording: RecordingConfig = field(default_factory=RecordingConfig)
    streaming: StreamingOutputConfig = field(default_factory=StreamingOutputConfig)
    replay_buffer: ReplayBufferConfig = field(default_factory=ReplayBufferConfig)


@dataclass
class DestinationConfig:
    name: str
    platform: str
    server: str
    stream_key: str
    enabled: bool
    bandwidth_limit: int | None = None


@dataclass
class StreamingConfig:
    destinations: list[DestinationConfig] = field(default_factory=list)
    primary: str | None = None


@dataclass
class SourceProfileConfig:
    name: str
    source_type: str
    properties: dict[str, Any] = field(default_factory=dict)
    active: bool = False


@dataclass
class EncoderProfileConfig:
    name: str
    encoder_type: str
    properties: dict[str, Any] = field(default_factory=dict)


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, uuid.UUID):
        return str(value)
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def _drop_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _drop_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [_drop_none(item) for item in value]
    return value


def _video(data: dict[str, Any]) -> VideoProfileConfig:
    return VideoProfileConfig(
        width=data["width"],
        height=data["height"],
        fps_num=data["fps_num"],
        fps_den=data["fps_den"],
        output_width=data["output_width"],
        output_height=data["output_height"],
        scale_type=ScaleType(data["scale_type"]),
        format=data["format"],
    )


def _audio(data: dict[str, Any]) -> AudioProfileConfig:
    return AudioProfileConfig(
        sample_rate=data["sample_rate"],
        channels=data["channels"],
        format=data["format"],
        tracks=[
            AudioTrackConfig(
                id=track["id"],
                name=track["name"],
                sources=list(track["sources"]),
                mixer=track["mixer"],
            )
            for track in data["tracks"]
        ],
    )


def _streaming(data: dict[str, Any]) -> StreamingConfig:
    return StreamingConfig(
        destinations=[
            DestinationConfig(
                name=dest["name"],
                platform=dest["platform"],
                server=dest["server"],
                stream_key=dest["stream_key"],
                enabled=dest["enabled"],
                bandwidth_limit=dest.get("bandwidth_limit"),
            )
            for dest in data["destinations"]
        ],
        primary=data.get("primary"),
    )


def _output(data: dict[str, Any]) -> OutputProfileConfig:
    rec = data["recording"]
    stream = data["streaming"]
    replay = data["replay_buffer"]
    return OutputProfileConfig(
        mode=OutputMode(data["mode"]),
        recording=RecordingConfig(
            format=rec["format"],
            path=rec["path"],
            quality=RecordingQuality(rec["quality"]),
            encoder=rec["encoder"],
            bitrate=rec["bitrate"],
        ),
        streaming=StreamingOutputConfig(
            encoder=stream["encoder"],
            bitrate=stream["bitrate"],
            use_cbr=stream["use_cbr"],
            enforce_bitrate=stream["enforce_bitrate"],
            keyint=stream["keyint"],
            preset=stream["preset"],
        ),
        replay_buffer=ReplayBufferConfig(
            enabled=replay["enabled"],
            duration_secs=replay["duration_secs"],
            max_mb=replay["max_mb"],
        ),
    )


@dataclass
class Profile:
    name: str = "Untitled"
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    video_config: VideoProfileConfig = field(default_factory=VideoProfileConfig)
    audio_config: AudioProfileConfig = field(default_factory=AudioProfileConfig)
    stream_config: StreamingConfig = field(default_factory=StreamingConfig)
    output_config: OutputProfileConfig = field(default_factory=OutputProfileConfig)
    sources: list[SourceProfileConfig] = field(default_factory=list)
    encoders: dict[str, EncoderProfileConfig] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Plain data suitable for JSON; missing optional values are None."""
        return _plain(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        """Rebuild a profile from plain data; raises ValueError if malformed."""
        try:
            return cls(
                id=uuid.UUID(str(data["id"])),
                name=data["name"],
                video_config=_video(data["video_config"]),
                audio_config=_audio(data["audio_config"]),
                stream_config=_streaming(data["stream_config"]),
                output_config=_output(data["output_config"]),
                sources=[
                    SourceProfileConfig(
                        name=src["name"],
                        source_type=src["source_type"],
                        properties=dict(src["properties"]),
                        active=src["active"],
                    )
                    for src in data["sources"]
                ],
                encoders={
                    key: EncoderProfileConfig(
                        name=enc["name"],
                        encoder_type=enc["encoder_type"],
                        properties=dict(enc["properties"]),
                    )
                    for key, enc in data["encoders"].items()
                },
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"invalid profile data: {exc!r}") from exc


def default_profiles_dir() -> Path:
    """The per-user directory where profiles are stored."""
    return platformdirs.user_config_path("ROBS", "robs") / "profiles"


def _read_profile(path: Path) -> Profile | None:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        return None
    try:
        return Profile.from_dict(tomllib.loads(content))
    except (tomllib.TOMLDecodeError, ValueError):
        pass
    try:
        return Profile.from_dict(json.loads(content))
    except ValueError:
        return None


class ProfileManager:
    """Keeps profiles in memory and stores them as TOML files in one directory."""

    def __init__(self, profiles_dir: str | Path | None = None) -> None:
        self.profiles_dir = Path(profiles_dir) if profiles_dir is not None else default_profiles_dir()
        self.profiles_dir.mkdir(parents=True, exist_ok=True)
        self._profiles: dict[uuid.UUID, Profile] = {}
        self._current: uuid.UUID | None = None
        self.load_all()

    def _path_for(self, profile: Profile) -> Path:
        return self.profiles_dir / f"{profile.name}.toml"

    def load_all(self) -> None:
        """Load every readable *.toml file (TOML, or JSON as a fallback)."""
        if not self.profiles_dir.exists():
            self.profiles_dir.mkdir(parents=True, exist_ok=True)
            return
        for path in sorted(self.profiles_dir.glob("*.toml")):
            if not path.is_file():
                continue
            profile = _read_profile(path)
            if profile is not None:
                self._profiles[profile.id] = profile

    def create(self, name: str) -> uuid.UUID:
        profile = Profile(name=name)
        self._profiles[profile.id] = profile
        return profile.id

    def delete(self, profile_id: uuid.UUID) -> None:
        """Forget a profile and remove its file; unknown ids are ignored."""
        profile = self._profiles.pop(profile_id, None)
        if profile is None:
            return
        path = self._path_for(profile)
        if path.exists():
            path.unlink()

    def get(self, profile_id: uuid.UUID) -> Profile | None:
        return self._profiles.get(profile_id)

    def current(self) -> Profile | None:
        if self._current is None:
            return None
        return self._profiles.get(self._current)

    def set_current(self, profile_id: uuid.UUID) -> None:
        if profile_id not in self._profiles:
            raise ProfileNotFoundError("Profile not found")
        self._current = profile_id

    def save(self, profile_id: uuid.UUID) -> None:
        """Write a profile to '<name>.toml'; unknown ids are ignored."""
        profile = self._profiles.get(profile_id)
        if profile is None:
            return
        content = tomli_w.dumps(_drop_none(profile.to_dict()))
        self._path_for(profile).write_text(content, encoding="utf-8")
        print(f"[Profile] Saved: {profile.name}")

    def list(self) -> list[tuple[uuid.UUID, str]]:
        return [(profile.id, profile.name) for profile in self._profiles.values()]

    def duplicate(self, profile_id: uuid.UUID, new_name: str) -> uuid.UUID:
        profile = self._profiles.get(profile_id)
        if profile is None:
            raise ProfileNotFoundError("Profile not found")
        clone = dataclasses.replace(copy.deepcopy(profile), id=uuid.uuid4(), name=new_name)
        self._profiles[clone.id] = clone
        return clone.id