"""Interaction controller — gesture callbacks in, store mutations out.

A renderer (GUI canvas, CLI, test) reports what the user did through the
on_* callbacks. Drag and resize ends write the new geometry and then
clamp it back into the frame; live drag/transform helpers only compute
bounded values for the renderer to display.

The add_* methods are the creation paths: they size each new item for
the frame, center it, and append the whole batch in one add_items call.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from .embed import parse_embed
from .geometry import (
    MIN_ITEM_SIZE,
    TRANSFORM_MIN_SIZE,
    IMAGE_MIN_SIZE,
    VIDEO_MIN_SIZE,
    apply_resize,
    bound_drag_position,
    bound_transform_box,
    centered_origin,
    fit_to_frame,
    post_card_size,
)
from .items import Item, PostItem, make_image, make_post, make_video, replace_fields
from .media import capture_video_snapshot, is_image_file, is_video_file, read_image
from .store import Composition

logger = logging.getLogger(__name__)


class InteractionController:
    def __init__(
        self,
        store: Composition,
        min_item_size: float = MIN_ITEM_SIZE,
        transform_min_size: float = TRANSFORM_MIN_SIZE,
    ):
        self.store = store
        self.min_item_size = min_item_size
        self.transform_min_size = transform_min_size

    # ── Gestures ─────────────────────────────────────────────────

    def on_drag_move(self, item_id: str, x: float, y: float) -> tuple[float, float] | None:
        """Bounded live position for an item being dragged (no mutation)."""
        item = self.store.get_item(item_id)
        if item is None:
            return None
        return bound_drag_position(item, x, y, self.store.frame)

    def on_drag_end(self, item_id: str, x: float, y: float) -> None:
        self.store.update_item(item_id, x=float(x), y=float(y))
        self.store.enforce_bounds(item_id)

    def on_transform(self, width: float, height: float) -> tuple[float, float]:
        """Bounded live box while a resize handle is being dragged."""
        return bound_transform_box(width, height, self.transform_min_size)

    def on_resize_end(
        self, item_id: str, width: float, height: float, x: float, y: float,
    ) -> None:
        """Commit a resize. The caller passes the final box (already aspect-locked)."""
        item = self.store.get_item(item_id)
        if item is None:
            return
        moved = replace_fields(item, x=float(x), y=float(y))
        resized = apply_resize(moved, width, height, self.store.frame, self.min_item_size)
        self.store.update_item(
            item_id,
            x=resized.x, y=resized.y, width=resized.width, height=resized.height,
        )

    def on_select(self, item_id: str) -> None:
        self.store.set_selected(item_id)

    def on_deselect_background(self) -> None:
        self.store.set_selected(None)

    def on_delete_key(self) -> None:
        selected = self.store.selected_id
        if selected is not None:
            self.store.remove_item(selected)

    def on_delete_click(self, item_id: str) -> None:
        self.store.remove_item(item_id)

    # ── Creation paths ───────────────────────────────────────────

    def add_images(self, paths: Iterable[str | Path]) -> list[Item]:
        """Load image files, fit and center each, add them as one batch.

        Files that are not images (by MIME type) are skipped.
        """
        frame = self.store.frame
        new_items = []
        for path in paths:
            if not is_image_file(path):
                logger.debug("Skipping non-image file %s", path)
                continue
            media = read_image(path)
            width, height = fit_to_frame(media.width, media.height, frame, IMAGE_MIN_SIZE)
            x, y = centered_origin(width, height, frame)
            new_items.append(make_image(media.data_uri, x, y, width, height))
        self.store.add_items(new_items)
        return new_items

    def add_videos(self, paths: Iterable[str | Path]) -> list[Item]:
        """Capture a still from each video file and add them as one batch."""
        frame = self.store.frame
        new_items = []
        for path in paths:
            if not is_video_file(path):
                logger.debug("Skipping non-video file %s", path)
                continue
            media = capture_video_snapshot(path)
            width, height = fit_to_frame(media.width, media.height, frame, VIDEO_MIN_SIZE)
            x, y = centered_origin(width, height, frame)
            new_items.append(make_video(media.data_uri, x, y, width, height))
        self.store.add_items(new_items)
        return new_items

    def add_post(self, raw: str) -> PostItem | None:
        """Parse pasted embed markup or a URL into a centered post card.

        Blank input is rejected (returns None, nothing added).
        """
        if not raw or not raw.strip():
            return None
        fields = parse_embed(raw)
        width, height = post_card_size(self.store.frame)
        x, y = centered_origin(width, height, self.store.frame)
        post = make_post(x=x, y=y, width=width, height=height, **fields)
        self.store.add_items([post])
        return post

    def clear(self) -> None:
        self.store.clear_all()
