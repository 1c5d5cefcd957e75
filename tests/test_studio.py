from pathlib import Path

import pytest

from robs.devices import MonitorInfo
from robs.profile import ProfileManager
from robs.recording_args import NVENC_ENCODER_NAME, X264_ENCODER_NAME
from robs.studio import Studio, fit_canvas, source_size


@pytest.fixture
def studio(tmp_path):
    return Studio(True, False, True, ProfileManager(tmp_path / "profiles"))


def _monitor(width=2560, height=1440):
    return MonitorInfo("DISPLAY2", width, height, False, 1920, 0)


def test_fit_canvas_is_centred():
    canvas = fit_canvas(1000.0, 800.0, 1920, 1080)
    assert canvas.offset_x * 2 + canvas.width == pytest.approx(1000.0)
    assert canvas.offset_y * 2 + canvas.height == pytest.approx(800.0)
    assert canvas.width / canvas.height == pytest.approx(1920 / 1080)


def test_fit_canvas_margin():
    canvas = fit_canvas(1920, 1080, 1920, 1080)
    assert canvas.scale == pytest.approx(0.95)


def test_fit_canvas_rejects_empty_scene():
    with pytest.raises(ValueError):
        fit_canvas(100, 100, 0, 1080)


def test_source_size_display_uses_monitor():
    from robs.devices import monitor_source_name

    name = monitor_source_name(_monitor(2560, 1440), 1)
    assert source_size(name, 1920, 1080) == (2560, 1440)


def test_source_size_window_uses_scene():
    assert source_size("Window: Editor", 1280, 720) == (1280, 720)


def test_defaults(studio):
    assert studio.current_scene == "Main Scene"
    assert studio.scenes.list() == ["Main Scene"]
    assert studio.video_encoder == X264_ENCODER_NAME
    assert not studio.streaming and not studio.recording


def test_nvenc_preferred(tmp_path):
    studio = Studio(True, True, True, ProfileManager(tmp_path))
    assert studio.video_encoder == NVENC_ENCODER_NAME


def test_streaming_clock(studio):
    studio.tick()
    assert studio.streaming_time == 0
    assert studio.toggle_streaming() is True
    studio.tick()
    studio.tick()
    assert studio.streaming_time == 2
    studio.toggle_streaming()
    studio.tick()
    assert studio.streaming_time == 2
    studio.toggle_streaming()
    assert studio.streaming_time == 0


def test_add_and_remove_scene(studio):
    name = studio.add_scene()
    assert name == "Scene 2"
    assert studio.current_scene == name
    assert studio.scenes.current_scene_name == name
    assert studio.remove_current_scene() is True
    assert studio.scenes.list() == ["Main Scene"]
    assert studio.current_scene == "Main Scene"


def test_last_scene_not_removed(studio):
    assert studio.remove_current_scene() is False
    assert studio.scenes.list() == ["Main Scene"]


def test_select_unknown_scene(studio):
    with pytest.raises(KeyError):
        studio.select_scene("Nope")


def test_capture_sources(studio):
    assert studio.has_capture_source() is False
    item = studio.add_window_capture("Editor")
    assert item.name == "Window: Editor"
    assert studio.has_capture_source() is True
    studio.scenes.current_scene().set_item_visible(item.id, False)
    assert studio.has_capture_source() is False
    display = studio.add_display_capture(_monitor(), 1)
    assert display.name.startswith("Display Capture - DISPLAY2|idx:1")
    assert studio.has_capture_source() is True


def test_source_properties_apply(studio):
    item = studio.add_window_capture("Editor")
    assert studio.open_source_properties(item.id) is True
    assert studio.show_source_properties
    assert studio.editing.name == item.name
    studio.editing.position.x = 42.0
    studio.editing.scale.y = 50.0
    studio.editing.crop.left = 12
    assert studio.apply_source_properties() is True
    assert not studio.show_source_properties
    assert item.position.x == 42.0
    assert item.scale.y == 10.0
    assert item.crop.left == 12


def test_source_properties_cancel(studio):
    item = studio.add_window_capture("Editor")
    studio.open_source_properties(item.id)
    studio.editing.position.x = 42.0
    studio.cancel_source_properties()
    assert not studio.show_source_properties
    assert item.position.x == 0.0


def test_open_unknown_item(studio):
    import uuid

    assert studio.open_source_properties(uuid.uuid4()) is False
    assert studio.editing is None


def test_drag_item(studio):
    item = studio.add_window_capture("Editor")
    assert studio.drag_item(item.id, 15.0, -7.0, 1.0) is True
    assert (item.position.x, item.position.y) == (15.0, -7.0)


def test_resize_item_clamps(studio):
    item = studio.add_display_capture(_monitor(), 1)
    assert studio.resize_item(item.id, -1e9, -1e9, 1.0) is True
    assert (item.scale.x, item.scale.y) == (0.01, 0.01)


def test_resize_window_item_doubles(studio):
    item = studio.add_window_capture("Editor")
    studio.resize_item(item.id, 1920.0, 1080.0, 1.0)
    assert item.scale.x == pytest.approx(2.0)
    assert item.scale.y == pytest.approx(2.0)


def test_recording_toggle_without_ffmpeg(studio, tmp_path):
    studio.recording_path = str(tmp_path / "rec")
    studio.recorder.command = ["robs-missing-encoder-program"]
    assert studio.toggle_recording() is True
    assert studio.recording is True
    path = Path(studio.recorder.last_recording_path)
    assert path.parent == tmp_path / "rec"
    assert path.name.startswith("ROBS_") and path.suffix == ".mp4"
    assert studio.toggle_recording() is False
    assert studio.recording is False
    assert studio.recorder.recording is False