import pytest
from PIL import Image

from autoupload.exceptions import ProbeError
from autoupload.services.media_validator import validate_thumbnail, validate_video
from autoupload.utils.ffprobe import parse_frame_rate
from conftest import FakeProber, make_probe_info


def test_valid_video_passes():
    result = validate_video("video.mp4", prober=FakeProber(make_probe_info(duration=450)))
    assert result.valid
    assert result.errors is None
    assert result.metadata.duration == 450
    assert result.metadata.has_audio
    assert result.metadata.fps == pytest.approx(29.97, abs=0.01)
    assert result.metadata.video_codec == "h264"
    assert result.metadata.audio_codec == "aac"


def test_short_video_fails_on_duration_only():
    result = validate_video("video.mp4", prober=FakeProber(make_probe_info(duration=250)))
    assert not result.valid
    assert len(result.errors) == 1
    assert result.errors[0].startswith("duration")


@pytest.mark.parametrize("duration", [300, 600])
def test_duration_bounds_are_inclusive(duration):
    result = validate_video("video.mp4", prober=FakeProber(make_probe_info(duration=duration)))
    assert result.valid


def test_all_failures_are_itemized():
    info = make_probe_info(
        duration=700,
        width=1280,
        height=960,
        display_aspect_ratio="4:3",
        has_audio=False,
        format_name="matroska,webm"
    )
    result = validate_video("video.mkv", prober=FakeProber(info))
    assert not result.valid
    fields = [error.split(":")[0] for error in result.errors]
    assert fields == ["duration", "width", "height", "aspectRatio", "hasAudio", "format"]


def test_unknown_display_aspect_ratio_falls_back_to_dimensions():
    result = validate_video("video.mp4", prober=FakeProber(make_probe_info(display_aspect_ratio="0:1")))
    assert result.valid
    assert result.metadata.aspect_ratio == "1920:1080"


def test_missing_display_aspect_ratio_uses_dimensions():
    info = make_probe_info(width=2560, height=1080, display_aspect_ratio=None)
    result = validate_video("video.mp4", prober=FakeProber(info))
    assert not result.valid
    assert result.errors == ["aspectRatio: Aspect ratio must be 16:9 (got 2560:1080)"]


def test_missing_ffprobe_assumes_valid():
    prober = FakeProber(available=False)
    result = validate_video("video.mp4", prober=prober)
    assert result.valid
    assert result.metadata is None
    assert prober.probed == []


def test_no_video_stream():
    result = validate_video("audio.mp4", prober=FakeProber(make_probe_info(has_video=False)))
    assert not result.valid
    assert result.errors == ["No video stream found"]


def test_probe_failure_is_reported():
    result = validate_video("broken.mp4", prober=FakeProber(error=ProbeError("ffprobe failed")))
    assert not result.valid
    assert result.errors == ["ffprobe failed"]


@pytest.mark.parametrize("rate,expected", [
    ("30/1", 30.0),
    ("25", 25.0),
    ("60000/1001", 60000 / 1001),
    ("0/0", 0.0),
    (None, 30.0),
    ("", 30.0),
    ("__import__('os').getcwd()", 0.0),
    ("1/x", 0.0),
])
def test_parse_frame_rate(rate, expected):
    assert parse_frame_rate(rate) == pytest.approx(expected)


def _image(path, size, fmt):
    Image.new("RGB", size, color=(20, 20, 20)).save(path, fmt)
    return str(path)


def test_valid_thumbnail(tmp_path):
    result = validate_thumbnail(_image(tmp_path / "thumb.jpg", (1280, 720), "JPEG"))
    assert result.valid
    assert result.errors is None


def test_thumbnail_wrong_resolution(tmp_path):
    result = validate_thumbnail(_image(tmp_path / "thumb.png", (1920, 1080), "PNG"))
    assert not result.valid
    assert result.errors == ["Thumbnail must be 1280x720 resolution"]


def test_thumbnail_too_large(tmp_path):
    path = _image(tmp_path / "thumb.jpg", (1280, 720), "JPEG")
    with open(path, "ab") as f:
        f.write(b"\0" * (3 * 1024 * 1024))
    result = validate_thumbnail(path)
    assert not result.valid
    assert result.errors == ["Thumbnail must be under 2MB"]


def test_thumbnail_wrong_format(tmp_path):
    result = validate_thumbnail(_image(tmp_path / "thumb.gif", (1280, 720), "GIF"))
    assert not result.valid
    assert result.errors == ["Thumbnail must be JPG or PNG format"]


def test_thumbnail_failures_compound(tmp_path):
    result = validate_thumbnail(_image(tmp_path / "thumb.gif", (640, 480), "GIF"))
    assert not result.valid
    assert len(result.errors) == 2


def test_thumbnail_not_an_image(tmp_path):
    path = tmp_path / "thumb.jpg"
    path.write_bytes(b"not an image")
    result = validate_thumbnail(str(path))
    assert not result.valid
    assert len(result.errors) == 1
