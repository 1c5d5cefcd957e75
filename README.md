# robs

Building blocks for a screen-capture and streaming studio: profiles and
application settings, scenes with positioned and cropped sources, monitor
and audio device naming and discovery, audio mixer helpers, and recording
through FFmpeg.

## Installation

```
pip install .
```

Recording and audio device discovery start an `ffmpeg` executable, which
must be on `PATH`.

## Profiles (`robs.profile`)

```python
from pathlib import Path
from robs.profile import ProfileManager

manager = ProfileManager(Path("profiles"))   # creates the directory, loads *.toml files
profile_id = manager.create("Gaming")
manager.set_current(profile_id)
manager.save(profile_id)                     # writes profiles/Gaming.toml
copy_id = manager.duplicate(profile_id, "Gaming (copy)")
print(manager.list())                        # [(id, name), ...]
```

- Without a directory, `ProfileManager()` uses `default_profiles_dir()`,
  a per-user configuration directory.
- `load_all()` reads every `*.toml` file in the directory as TOML, falling
  back to JSON; unreadable files are skipped.
- `set_current` and `duplicate` raise `ProfileNotFoundError` for an unknown
  id; `get`, `save` and `delete` ignore unknown ids (`get` returns `None`).
  `delete` also removes the profile's `<name>.toml` file.
- `Profile.to_dict()` and `Profile.from_dict()` convert to and from plain
  data; `from_dict` raises `ValueError` on malformed data.

A profile bundles `VideoProfileConfig`, `AudioProfileConfig` (with
`AudioTrackConfig` tracks), `StreamingConfig` (with `DestinationConfig`
entries), `OutputProfileConfig` (`RecordingConfig`, `StreamingOutputConfig`,
`ReplayBufferConfig`), `SourceProfileConfig` and `EncoderProfileConfig`
entries, using the enums `ScaleType`, `OutputMode` and `RecordingQuality`.

## Settings (`robs.settings`)

`AppSettings` holds `GeneralSettings`, `VideoSettings`, `AudioSettings`,
a list of `HotkeyBinding` and `UiSettings`, all with defaults. The default
`DockLayout` is built from `DockNode.pane` and `DockNode.tabbed`;
`DockNode.horizontal` and `DockNode.vertical` build container nodes.
`to_dict` and `from_dict` convert to and from plain data (`from_dict`
raises `ValueError` on malformed data).

## Scenes (`robs.scenes`)

```python
import uuid
from robs.scenes import SceneCollection

scenes = SceneCollection()
scenes.create_scene("Main Scene")
scenes.set_current_scene("Main Scene")      # KeyError for unknown names
scene = scenes.current_scene()
item = scene.add_source(uuid.uuid4(), "Window: Editor")
scene.move_item_down(item.id)
scene.set_item_visible(item.id, False)
```

Each `SceneItem` has a `Position`, `Scale`, `Crop`, rotation and
visibility. Scenes keep items in order; `SceneCollection.list()` gives
scene names in creation order.

## Devices (`robs.devices`)

Display capture sources carry their monitor in the item name, for example
`Display Capture - Primary|idx:0|x:0|y:0|w:1920|h:1080`, produced by
`monitor_source_name(monitor, index)`. `parse_monitor_coords` reads back
`(x, y, width, height)` (defaulting to `(0, 0, 1920, 1080)`) and
`parse_monitor_index` reads back the index (default `0`).
`monitor_label` and `window_label` produce menu labels.

`list_audio_devices()` always begins with "Disabled" and "Default". On
Windows it runs `ffmpeg -list_devices true -f dshow -i dummy` and parses the
output with `parse_dshow_audio_devices`, adding a fixed list of known
devices if none are found.

## Audio mixer (`robs.audio_mixer`)

`AudioChannel` models a mixer strip. `volume_to_db`, `format_db` (for
example `"-6.0 dB"` or `"-∞ dB"`) and `meter_color` (`"red"` above 0.9,
`"yellow"` above 0.7, otherwise `"green"`) turn a linear level into display
values.

## Recording (`robs.recording_args`, `robs.recorder`)

- `encoder_choices` lists the video and audio encoders to offer and picks
  defaults (NVENC before x264).
- `find_capture_target(scene)` picks the first visible window capture, else
  the first visible display capture, else the whole desktop.
- `build_ffmpeg_args(settings, target, output_path)` builds the FFmpeg
  arguments from `RecordingSettings` and a `CaptureTarget`: window captures
  use `gdigrab`, desktop captures read raw BGRA frames from stdin; the
  encoder is `h264_nvenc` (CBR) or `libx264`.
- `recording_filename` gives `ROBS_<date time>.<format>`; `format_time`
  formats seconds as `HH:MM:SS`.

`Recorder` runs one FFmpeg process at a time. `start(target, output_path)`
launches it (and raises `RuntimeError` if one is already running);
`send_frame(rgba_data, width, height)` drops frames that arrive faster than
the configured frame rate, scales the rest to the output size with
`scale_frame`, converts them to BGRA with `swap_red_blue` and queues them
for FFmpeg; `stop()` closes the input, waits up to ten seconds for FFmpeg to
finish (then kills it) and returns the recording length in seconds.

## Studio (`robs.studio`)

`Studio` holds the state a studio window shows and edits: streaming and
recording toggles (`toggle_streaming`, `tick`, `toggle_recording`), scenes
(`add_scene`, `remove_current_scene`, `select_scene`), capture sources
(`add_display_capture`, `add_window_capture`, `has_capture_source`), the
source properties editor (`open_source_properties`,
`apply_source_properties`, `cancel_source_properties`) and canvas
interaction (`drag_item`, `resize_item`). `fit_canvas` and `source_size`
compute preview geometry.

## What this package does not do

- It has no window or graphical interface and no command to run; `Studio`
  is plain state for a user interface to drive.
- It does not grab screen or window pixels itself and does not enumerate
  monitors or open windows: `default_monitors()` returns a single 1920x1080
  display, and desktop recordings only contain the frames passed to
  `Recorder.send_frame`.
- It does not stream: `toggle_streaming` only flips state and the clock.
- `AppSettings.load_or_default()` returns defaults and `AppSettings.save()`
  writes nothing; only profiles are stored on disk.

## Tests

```
pip install .[test]
pytest
```