"""boardcompose.common — shared utilities for board composition.

Contains: color parsing, path variable resolution, font loading,
text measuring/wrapping/rendering, and data URI encoding.
"""

import base64
import io
import re
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont


# ── Font paths ─────────────────────────────────────────────────────
# Inter preferred for clean card text, DejaVu Sans as fallback.

FONT_PATHS = [
    Path.home() / ".local/share/fonts/Inter.ttc",
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
]

BOLD_FONT_PATHS = [
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
]


# ── Color utilities ────────────────────────────────────────────────

def parse_hex_color(hex_str: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' or 'RRGGBB' string to (R, G, B) tuple."""
    hex_str = hex_str.lstrip("#")
    if len(hex_str) != 6 or not all(c in "0123456789abcdefABCDEF" for c in hex_str):
        raise ValueError(f"Invalid hex color: '#{hex_str}'")
    return (int(hex_str[0:2], 16), int(hex_str[2:4], 16), int(hex_str[4:6], 16))


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return paths[key]
    return re.sub(r"\$\{(\w+)\}", _replace, text)


# ── Data URIs ──────────────────────────────────────────────────────

def encode_data_uri(data: bytes, mime: str) -> str:
    """Encode raw bytes as a base64 data URI."""
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> bytes:
    """Decode a base64 data URI back to raw bytes.

    Raises:
        ValueError: Not a base64 data URI.
    """
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URI")
    return base64.b64decode(payload)


def image_to_data_uri(img: Image.Image) -> str:
    """Encode a Pillow image as a PNG data URI."""
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return encode_data_uri(buf.getvalue(), "image/png")


def open_image_source(src: str) -> Image.Image:
    """Open an image handle: a data URI or a filesystem path."""
    if src.startswith("data:"):
        return Image.open(io.BytesIO(decode_data_uri(src)))
    return Image.open(src)


# ── Font loading ───────────────────────────────────────────────────

def load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load Inter (or fallback) at the given size.

    Bold tries a dedicated bold face first and falls back to the regular
    font list when none is installed.
    """
    candidates = (BOLD_FONT_PATHS + FONT_PATHS) if bold else FONT_PATHS
    for font_path in candidates:
        if font_path.exists():
            try:
                return ImageFont.truetype(str(font_path), size=size, index=0)
            except (OSError, IndexError):
                continue
    # Last resort: Pillow default font.
    return ImageFont.load_default()


# ── Text rendering ─────────────────────────────────────────────────

def text_width(text: str, font) -> int:
    draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    bbox = draw.textbbox((0, 0), text, font=font)
    return bbox[2] - bbox[0]


def wrap_text(text: str, font, max_width: int) -> list[str]:
    """Greedy word wrap so each line fits within max_width pixels.

    Explicit newlines are kept. A single word wider than max_width is
    placed on its own line rather than split.
    """
    lines = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if text_width(candidate, font) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


def render_text_on_image(
    img: Image.Image,
    text: str,
    position: tuple[int, int],
    font: ImageFont.FreeTypeFont,
    color: tuple[int, int, int],
    max_width: int | None = None,
) -> int:
    """Draw text on a Pillow image and return the text height.

    If max_width is set and text exceeds it, the text is truncated
    with an ellipsis so it fits within the specified pixel width.
    """
    draw = ImageDraw.Draw(img)

    if max_width:
        bbox = draw.textbbox((0, 0), text, font=font)
        while (bbox[2] - bbox[0]) > max_width and len(text) > 5:
            text = text[:-4] + "..."
            bbox = draw.textbbox((0, 0), text, font=font)

    draw.text(position, text, fill=color, font=font)
    bbox = draw.textbbox((0, 0), text, font=font)
    return bbox[3] - bbox[1]
