"""Item model — the tagged union of things placed on the board.

Three variants share one geometry: an id, a top-left corner (x, y) and
a size (width, height) in frame pixels, plus a reserved rotation.

  - image: src is a data URI (or path) holding the source pixels.
  - video: snapshot_src is a PNG data URI of one captured still frame.
            Motion video is never stored.
  - post:  a rendered social-post card. text is required; author,
           handle, date_text, theme ("light"/"dark") and avatar_url
           are optional.

Items are immutable. Edits build a new value with replace_fields() and
the store swaps it in at the same index.

Wire record schema (one per item in the persisted slot):
  {"type": "post", "id": "post_k3j9x0aa", "x": 488.0, "y": 312.0,
   "width": 560.0, "height": 400.0, "text": "Shipped it",
   "author": "Jane Doe", "handle": "@jane"}

Unset optional fields are omitted from the record, never written as null.
"""

import secrets
import string
from dataclasses import dataclass, fields, replace
from typing import ClassVar


ITEM_TYPES = ("image", "video", "post")

VALID_THEMES = {"light", "dark"}

# Read-side alias: records written before posts were generalized.
LEGACY_TYPE_ALIASES = {"tweet": "post"}

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_SUFFIX_LENGTH = 8


def generate_id(prefix: str = "item") -> str:
    """Return '<prefix>_<8 random base-36 chars>'.

    Unique with overwhelming probability within a session. Collisions are
    not detected here; Composition.add_items rejects duplicate ids.
    """
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return f"{prefix}_{suffix}"


# ── Variants ──────────────────────────────────────────────────────


@dataclass(frozen=True, kw_only=True)
class BaseItem:
    id: str
    x: float
    y: float
    width: float
    height: float
    rotation: float | None = None

    type: ClassVar[str] = ""


@dataclass(frozen=True, kw_only=True)
class ImageItem(BaseItem):
    src: str

    type: ClassVar[str] = "image"


@dataclass(frozen=True, kw_only=True)
class VideoItem(BaseItem):
    snapshot_src: str

    type: ClassVar[str] = "video"


@dataclass(frozen=True, kw_only=True)
class PostItem(BaseItem):
    text: str
    author: str | None = None
    handle: str | None = None
    date_text: str | None = None
    theme: str | None = None
    avatar_url: str | None = None

    type: ClassVar[str] = "post"


Item = ImageItem | VideoItem | PostItem

ITEM_CLASSES = {
    "image": ImageItem,
    "video": VideoItem,
    "post": PostItem,
}


# ── Constructors ──────────────────────────────────────────────────


def make_image(
    src: str,
    x: float,
    y: float,
    width: float,
    height: float,
    rotation: float | None = None,
    id: str | None = None,
) -> ImageItem:
    return ImageItem(
        id=id or generate_id("img"),
        x=float(x), y=float(y), width=float(width), height=float(height),
        rotation=rotation, src=src,
    )


def make_video(
    snapshot_src: str,
    x: float,
    y: float,
    width: float,
    height: float,
    rotation: float | None = None,
    id: str | None = None,
) -> VideoItem:
    return VideoItem(
        id=id or generate_id("vid"),
        x=float(x), y=float(y), width=float(width), height=float(height),
        rotation=rotation, snapshot_src=snapshot_src,
    )


def make_post(
    text: str,
    x: float,
    y: float,
    width: float,
    height: float,
    author: str | None = None,
    handle: str | None = None,
    date_text: str | None = None,
    theme: str | None = None,
    avatar_url: str | None = None,
    rotation: float | None = None,
    id: str | None = None,
) -> PostItem:
    """Build a post card item.

    Raises:
        ValueError: theme is set but not "light" or "dark".
    """
    if theme is not None and theme not in VALID_THEMES:
        raise ValueError(
            f"Invalid theme '{theme}'. Valid: {sorted(VALID_THEMES)}"
        )
    return PostItem(
        id=id or generate_id("post"),
        x=float(x), y=float(y), width=float(width), height=float(height),
        rotation=rotation, text=text, author=author, handle=handle,
        date_text=date_text, theme=theme, avatar_url=avatar_url,
    )


def replace_fields(item: Item, **changes) -> Item:
    """Return a new item with *changes* merged over the old fields.

    Raises:
        ValueError: Attempt to change id or type, or an unknown field.
    """
    for frozen_name in ("id", "type"):
        if frozen_name in changes:
            raise ValueError(f"Cannot change item '{frozen_name}' ({item.id})")
    valid = {f.name for f in fields(item)}
    unknown = sorted(set(changes) - valid)
    if unknown:
        raise ValueError(
            f"Unknown field(s) for {item.type} item: {unknown}. "
            f"Valid: {sorted(valid)}"
        )
    if "theme" in changes and changes["theme"] is not None:
        if changes["theme"] not in VALID_THEMES:
            raise ValueError(
                f"Invalid theme '{changes['theme']}'. Valid: {sorted(VALID_THEMES)}"
            )
    return replace(item, **changes)


# ── Wire records ──────────────────────────────────────────────────
# (attribute name, record key, required)

_VARIANT_FIELDS = {
    "image": [("src", "src", True)],
    "video": [("snapshot_src", "snapshotSrc", True)],
    "post": [
        ("text", "text", True),
        ("author", "author", False),
        ("handle", "handle", False),
        ("date_text", "dateText", False),
        ("theme", "theme", False),
        ("avatar_url", "avatarUrl", False),
    ],
}

_GEOMETRY_FIELDS = ("x", "y", "width", "height")


def item_to_record(item: Item) -> dict:
    """Serialize an item to its camelCase wire record."""
    if item.type not in _VARIANT_FIELDS:
        raise ValueError(f"Unknown item type '{item.type}'")

    record = {"type": item.type, "id": item.id}
    for name in _GEOMETRY_FIELDS:
        record[name] = getattr(item, name)
    if item.rotation is not None:
        record["rotation"] = item.rotation

    for attr, key, required in _VARIANT_FIELDS[item.type]:
        value = getattr(item, attr)
        if required or value is not None:
            record[key] = value
    return record


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_float(value, prefix: str, name: str) -> float:
    if not _is_number(value):
        raise ValueError(f"{prefix}: '{name}' must be a number, got {value!r}")
    try:
        return float(value)
    except OverflowError:
        raise ValueError(f"{prefix}: '{name}' is out of range") from None


def item_from_record(record: dict, index: int = 0) -> Item:
    """Validate a wire record and build the matching item.

    Args:
        record: Decoded record dict.
        index: Position in the persisted list, used in error messages.

    Raises:
        ValueError: Unknown type, missing field, or wrong field type.
    """
    if not isinstance(record, dict):
        raise ValueError(f"Item {index}: record must be an object")

    item_type = record.get("type")
    legacy = item_type in LEGACY_TYPE_ALIASES
    item_type = LEGACY_TYPE_ALIASES.get(item_type, item_type)
    if item_type not in ITEM_CLASSES:
        raise ValueError(
            f"Item {index}: Unknown item type '{record.get('type')}'. "
            f"Valid: {list(ITEM_TYPES)}"
        )
    prefix = f"Item {index} ({item_type})"

    item_id = record.get("id")
    if not isinstance(item_id, str) or not item_id:
        raise ValueError(f"{prefix}: 'id' must be a non-empty string")

    kwargs = {"id": item_id}
    for name in _GEOMETRY_FIELDS:
        if name not in record:
            raise ValueError(f"{prefix}: missing required field '{name}'")
        kwargs[name] = _to_float(record[name], prefix, name)

    rotation = record.get("rotation")
    if rotation is not None:
        kwargs["rotation"] = _to_float(rotation, prefix, "rotation")

    source = dict(record)
    if legacy and "text" not in source and "tweetText" in source:
        source["text"] = source["tweetText"]
    if legacy and "avatarUrl" not in source and "avatar" in source:
        source["avatarUrl"] = source["avatar"]

    for attr, key, required in _VARIANT_FIELDS[item_type]:
        value = source.get(key)
        if value is None:
            if required:
                raise ValueError(f"{prefix}: missing required field '{key}'")
            continue
        if not isinstance(value, str):
            raise ValueError(f"{prefix}: '{key}' must be a string")
        kwargs[attr] = value

    theme = kwargs.get("theme")
    if theme is not None and theme not in VALID_THEMES:
        raise ValueError(
            f"{prefix}: invalid theme '{theme}'. Valid: {sorted(VALID_THEMES)}"
        )

    return ITEM_CLASSES[item_type](**kwargs)
