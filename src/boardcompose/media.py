"""Media loading — turn files on disk into item payloads.

Images are embedded as-is in a data URI (the original bytes, so the
board keeps full quality). Videos are reduced to their first frame,
encoded as PNG; the board never stores motion video.
"""

import mimetypes
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image
from moviepy import VideoFileClip

from .common import encode_data_uri, image_to_data_uri


@dataclass(frozen=True)
class LoadedMedia:
    data_uri: str
    width: int
    height: int


def guess_mime(path: str | Path) -> str:
    mime, _ = mimetypes.guess_type(str(path))
    return mime or ""


def is_image_file(path: str | Path) -> bool:
    return guess_mime(path).startswith("image/")


def is_video_file(path: str | Path) -> bool:
    return guess_mime(path).startswith("video/")


def read_image(path: str | Path) -> LoadedMedia:
    """Read an image file into a data URI plus its natural size.

    Raises:
        FileNotFoundError: Missing file.
        PIL.UnidentifiedImageError: Not a decodable image.
    """
    path = Path(path)
    with Image.open(path) as img:
        width, height = img.size
        mime = Image.MIME.get(img.format or "", "") or guess_mime(path)
    return LoadedMedia(encode_data_uri(path.read_bytes(), mime), width, height)


def capture_video_snapshot(path: str | Path, t: float = 0.0) -> LoadedMedia:
    """Grab one frame of a video (at *t* seconds) as a PNG data URI."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Video not found: {path}")
    with VideoFileClip(str(path)) as clip:
        t = min(max(0.0, t), max(0.0, (clip.duration or 0.0) - 1.0 / (clip.fps or 1)))
        frame = clip.get_frame(t)
    img = Image.fromarray(np.asarray(frame, dtype=np.uint8)).convert("RGB")
    return LoadedMedia(image_to_data_uri(img), img.width, img.height)
