"""Shared test fixtures for boardcompose tests."""

import subprocess

import pytest
import imageio_ffmpeg
from PIL import Image

from boardcompose.geometry import Frame

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()


@pytest.fixture
def frame():
    """The default 1536x1024 board."""
    return Frame(1536, 1024)


@pytest.fixture
def sample_image(tmp_path):
    """A 400x300 solid red PNG on disk."""
    out = tmp_path / "photo.png"
    Image.new("RGB", (400, 300), (255, 0, 0)).save(out)
    return out


@pytest.fixture
def large_image(tmp_path):
    """A 4000x2000 JPEG, larger than the default board on both axes."""
    out = tmp_path / "panorama.jpg"
    Image.new("RGB", (4000, 2000), (0, 128, 255)).save(out, quality=50)
    return out


@pytest.fixture
def source_video(tmp_path):
    """Create a 2-second test video (320x240, 10fps, solid blue) with ffmpeg."""
    out = tmp_path / "source.mp4"
    subprocess.run(
        [
            _FFMPEG, "-y",
            "-f", "lavfi", "-i", "color=c=blue:s=320x240:d=2:r=10",
            "-c:v", "libx264", "-crf", "28", "-pix_fmt", "yuv420p",
            str(out),
        ],
        check=True,
        capture_output=True,
    )
    return out


TWEET_EMBED = (
    '<blockquote class="twitter-tweet"><p>Hello world</p>'
    "— Jane Doe (@jane) <a>Jan 1, 2024</a></blockquote>"
)


@pytest.fixture
def tweet_embed():
    return TWEET_EMBED
