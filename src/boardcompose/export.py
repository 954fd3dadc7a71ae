"""Export — rasterize a composition snapshot to PNG.

Paints items in z-order onto a frame-sized canvas:

  - image / video: source pixels stretched to the item box, rounded
    corners; videos get a translucent play badge in the middle.
  - post: a themed card with avatar disc, author, handle, wrapped body
    text and the date line along the bottom.

Card layout (light theme shown):
  ┌──────────────────────────────────────┐
  │ (●)  Jane Doe                        │  ← avatar + author (bold)
  │      @jane                           │  ← handle (muted)
  │                                      │
  │ Shipped the thing, thanks everyone   │  ← text, word-wrapped
  │ who helped along the way.            │
  │                                      │
  │ Jan 1, 2024                          │  ← date (muted)
  └──────────────────────────────────────┘

Remote avatars are never fetched; a neutral disc stands in for them.
"""

import io
from pathlib import Path

from PIL import Image, ImageDraw

from .common import load_font, open_image_source, render_text_on_image, wrap_text
from .items import Item
from .store import Snapshot


# ── Constants ────────────────────────────────────────────────────

CORNER_RADIUS = 12
SELECTION_COLOR = (79, 70, 229)
SELECTION_WIDTH = 2
PLACEHOLDER_COLOR = (203, 213, 225)

PLAY_BADGE_FRAC = 0.16            # badge radius as fraction of min(w, h)
PLAY_TRIANGLE_FRAC = 0.5          # triangle size relative to badge radius
PLAY_BADGE_ALPHA = 128

CARD_PADDING = 16
CARD_AVATAR_SIZE = 32
CARD_AVATAR_GAP = 12
CARD_HANDLE_OFFSET = 24
CARD_TEXT_OFFSET = 52
CARD_DATE_BOTTOM = 28
CARD_AUTHOR_FONT = 18
CARD_HANDLE_FONT = 14
CARD_TEXT_FONT = 16
CARD_DATE_FONT = 12
CARD_LINE_SPACING = 4

CARD_THEMES = {
    "light": {"bg": (255, 255, 255), "text": (17, 24, 39), "sub": (107, 114, 128)},
    "dark": {"bg": (15, 23, 42), "text": (229, 231, 235), "sub": (156, 163, 175)},
}


# ── Tiles ────────────────────────────────────────────────────────


def _box_size(item: Item) -> tuple[int, int]:
    return max(1, round(item.width)), max(1, round(item.height))


def _rounded_mask(size: tuple[int, int], radius: int = CORNER_RADIUS) -> Image.Image:
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle(
        [(0, 0), (size[0] - 1, size[1] - 1)], radius=radius, fill=255,
    )
    return mask


def _picture_tile(src: str, size: tuple[int, int]) -> Image.Image:
    try:
        with open_image_source(src) as img:
            tile = img.convert("RGB").resize(size, Image.LANCZOS)
    except (OSError, ValueError):
        tile = Image.new("RGB", size, PLACEHOLDER_COLOR)
    tile = tile.convert("RGBA")
    tile.putalpha(_rounded_mask(size))
    return tile


def _draw_play_badge(tile: Image.Image) -> None:
    w, h = tile.size
    radius = min(w, h) * PLAY_BADGE_FRAC
    cx, cy = w / 2, h / 2

    badge = Image.new("RGBA", tile.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(badge)
    draw.ellipse(
        [(cx - radius, cy - radius), (cx + radius, cy + radius)],
        fill=(0, 0, 0, PLAY_BADGE_ALPHA),
    )
    s = radius * PLAY_TRIANGLE_FRAC
    draw.polygon(
        [(cx - s * 0.6, cy - s), (cx - s * 0.6, cy + s), (cx + s, cy)],
        fill=(255, 255, 255, 255),
    )
    tile.alpha_composite(badge)


def _post_tile(item: Item, size: tuple[int, int]) -> Image.Image:
    palette = CARD_THEMES["dark" if item.theme == "dark" else "light"]
    w, h = size

    card = Image.new("RGB", size, palette["bg"])
    draw = ImageDraw.Draw(card)

    content_left = CARD_PADDING
    if item.avatar_url:
        draw.ellipse(
            [(CARD_PADDING, CARD_PADDING),
             (CARD_PADDING + CARD_AVATAR_SIZE, CARD_PADDING + CARD_AVATAR_SIZE)],
            fill=PLACEHOLDER_COLOR,
        )
        content_left += CARD_AVATAR_SIZE + CARD_AVATAR_GAP

    max_w = max(1, w - content_left - CARD_PADDING)
    if item.author:
        render_text_on_image(
            card, item.author, (content_left, CARD_PADDING),
            load_font(CARD_AUTHOR_FONT, bold=True), palette["text"], max_width=max_w,
        )
    if item.handle:
        render_text_on_image(
            card, item.handle, (content_left, CARD_PADDING + CARD_HANDLE_OFFSET),
            load_font(CARD_HANDLE_FONT), palette["sub"], max_width=max_w,
        )

    # Body text stops above the date line.
    text_font = load_font(CARD_TEXT_FONT)
    y = CARD_PADDING + CARD_TEXT_OFFSET
    bottom = h - CARD_DATE_BOTTOM if item.date_text else h - CARD_PADDING
    text_w = max(1, w - 2 * CARD_PADDING)
    for line in wrap_text(item.text, text_font, text_w):
        line_h = CARD_TEXT_FONT
        if line:
            line_h = max(line_h, render_text_on_image(
                card, line, (CARD_PADDING, y), text_font, palette["text"],
                max_width=text_w,
            ))
        y += line_h + CARD_LINE_SPACING
        if y + CARD_TEXT_FONT > bottom:
            break

    if item.date_text:
        render_text_on_image(
            card, item.date_text, (CARD_PADDING, h - CARD_DATE_BOTTOM),
            load_font(CARD_DATE_FONT), palette["sub"],
        )

    tile = card.convert("RGBA")
    tile.putalpha(_rounded_mask(size))
    return tile


def render_item(item: Item) -> Image.Image:
    """Render one item to an RGBA tile of its own size."""
    size = _box_size(item)
    if item.type == "image":
        return _picture_tile(item.src, size)
    elif item.type == "video":
        tile = _picture_tile(item.snapshot_src, size)
        _draw_play_badge(tile)
        return tile
    elif item.type == "post":
        return _post_tile(item, size)
    raise ValueError(f"Unknown item type '{item.type}'")


# ── Frame-level rendering ────────────────────────────────────────


def render_composition(
    snapshot: Snapshot,
    background: tuple[int, int, int] = (255, 255, 255),
    show_selection: bool = False,
) -> Image.Image:
    """Paint every item of *snapshot* in z-order onto a frame-sized canvas.

    Items hanging over the frame edge are cropped. With show_selection the
    selected item gets its highlight border, as in the editor view.
    """
    frame = snapshot.frame
    canvas = Image.new("RGB", (frame.width, frame.height), background)

    for item in snapshot.items:
        tile = render_item(item)
        canvas.paste(tile, (round(item.x), round(item.y)), tile)

    if show_selection and snapshot.selected_id is not None:
        selected = snapshot.get(snapshot.selected_id)
        if selected is not None:
            w, h = _box_size(selected)
            x, y = round(selected.x), round(selected.y)
            ImageDraw.Draw(canvas).rounded_rectangle(
                [(x, y), (x + w - 1, y + h - 1)], radius=CORNER_RADIUS,
                outline=SELECTION_COLOR, width=SELECTION_WIDTH,
            )

    return canvas


def export_png_bytes(snapshot: Snapshot, **render_kwargs) -> bytes:
    buf = io.BytesIO()
    render_composition(snapshot, **render_kwargs).save(buf, format="PNG")
    return buf.getvalue()


def export_png(snapshot: Snapshot, output_path: str | Path, **render_kwargs) -> bytes:
    """Write the rendered frame to *output_path* as PNG and return the bytes."""
    data = export_png_bytes(snapshot, **render_kwargs)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    return data
