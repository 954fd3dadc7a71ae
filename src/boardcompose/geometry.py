"""Geometry constraints — keep items inside the frame.

All coordinates are frame pixels with the origin at the top-left.
Items may carry fractional positions during a drag; the frame itself
is a fixed integer rectangle for the whole session.

Two floors exist for item size:
  - MIN_ITEM_SIZE (32) is enforced when a resize gesture ends.
  - TRANSFORM_MIN_SIZE (48) bounds the live transform box while the
    user is still dragging a resize handle.

clamp_to_frame() only moves items. An item wider or taller than the
frame cannot be contained and comes back still overflowing; the only
guard against that is the creation-time policy in fit_to_frame(), which
caps new items at MAX_FRAME_FRACTION of each frame dimension.
"""

from dataclasses import dataclass, replace

from .items import Item


MIN_ITEM_SIZE = 32
TRANSFORM_MIN_SIZE = 48
MAX_FRAME_FRACTION = 0.8

# Creation-time floors per media kind.
IMAGE_MIN_SIZE = 64
VIDEO_MIN_SIZE = 96

# Post card defaults.
POST_MAX_WIDTH = 560
POST_MIN_HEIGHT = 180
POST_MAX_HEIGHT = 400
POST_HEIGHT_FRACTION = 0.6

CONTAINMENT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Frame:
    """The fixed output rectangle every item lives in."""

    width: int
    height: int

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(
                    f"Frame {name} must be a positive integer, got {value!r}"
                )


def _clamp(value: float, low: float, high: float) -> float:
    # Order matters: when high < low the result is high.
    return float(min(max(value, low), high))


def clamp_to_frame(item: Item, frame: Frame) -> Item:
    """Move an item so it lies fully inside the frame.

    Size is left untouched. Idempotent. Returns the same object when no
    correction is needed.
    """
    max_x = frame.width - item.width
    max_y = frame.height - item.height
    x = _clamp(item.x, 0, max_x)
    y = _clamp(item.y, 0, max_y)
    if x == item.x and y == item.y:
        return item
    return replace(item, x=x, y=y)


def apply_resize(
    item: Item,
    new_width: float,
    new_height: float,
    frame: Frame,
    min_size: float = MIN_ITEM_SIZE,
) -> Item:
    """Resize an item, keeping its top-left anchor, then re-clamp.

    Both dimensions are floored at *min_size*. Aspect ratio is whatever
    the caller passes in.
    """
    width = max(min_size, float(new_width))
    height = max(min_size, float(new_height))
    return clamp_to_frame(replace(item, width=width, height=height), frame)


def bound_drag_position(
    item: Item, x: float, y: float, frame: Frame,
) -> tuple[float, float]:
    """Clamp a live drag position so the item never leaves the frame."""
    return (
        _clamp(x, 0, frame.width - item.width),
        _clamp(y, 0, frame.height - item.height),
    )


def bound_transform_box(
    width: float, height: float, min_size: float = TRANSFORM_MIN_SIZE,
) -> tuple[float, float]:
    """Floor a live transform box at *min_size* on both axes."""
    return max(min_size, width), max(min_size, height)


def fit_to_frame(
    natural_w: float,
    natural_h: float,
    frame: Frame,
    floor: float = IMAGE_MIN_SIZE,
) -> tuple[float, float]:
    """Creation-time size for media with the given natural dimensions.

    Scales down (never up) so the media fits MAX_FRAME_FRACTION of the
    frame on both axes, preserving aspect ratio, then floors each side
    at *floor*.

    Raises:
        ValueError: Non-positive natural dimensions.
    """
    if natural_w <= 0 or natural_h <= 0:
        raise ValueError(
            f"Media dimensions must be positive, got {natural_w}x{natural_h}"
        )
    max_w = frame.width * MAX_FRAME_FRACTION
    max_h = frame.height * MAX_FRAME_FRACTION
    ratio = min(max_w / natural_w, max_h / natural_h, 1)
    return max(floor, natural_w * ratio), max(floor, natural_h * ratio)


def post_card_size(frame: Frame) -> tuple[float, float]:
    """Default post card size for the given frame."""
    width = min(POST_MAX_WIDTH, frame.width * MAX_FRAME_FRACTION)
    height = max(POST_MIN_HEIGHT, min(POST_MAX_HEIGHT, frame.height * POST_HEIGHT_FRACTION))
    return width, height


def centered_origin(width: float, height: float, frame: Frame) -> tuple[float, float]:
    """Top-left corner that centers a width x height box in the frame."""
    return (frame.width - width) / 2, (frame.height - height) / 2


def is_contained(
    item: Item, frame: Frame, tolerance: float = CONTAINMENT_TOLERANCE,
) -> bool:
    """True when the item lies fully inside the frame."""
    return (
        item.x >= -tolerance
        and item.y >= -tolerance
        and item.x + item.width <= frame.width + tolerance
        and item.y + item.height <= frame.height + tolerance
    )
