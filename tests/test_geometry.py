"""Tests for frame containment and resize rules."""

import random

import pytest

from boardcompose.geometry import (
    Frame,
    MIN_ITEM_SIZE,
    TRANSFORM_MIN_SIZE,
    MAX_FRAME_FRACTION,
    apply_resize,
    bound_drag_position,
    bound_transform_box,
    centered_origin,
    clamp_to_frame,
    fit_to_frame,
    is_contained,
    post_card_size,
)
from boardcompose.items import make_image, make_post


def _image(x, y, w=100, h=80):
    return make_image("data:x", x, y, w, h, id="img_test")


class TestFrame:
    def test_valid(self):
        f = Frame(1536, 1024)
        assert (f.width, f.height) == (1536, 1024)

    @pytest.mark.parametrize("w,h", [(0, 10), (10, -1), (10.5, 10), (True, 10)])
    def test_invalid_dimensions_raise(self, w, h):
        with pytest.raises(ValueError, match="positive integer"):
            Frame(w, h)


class TestClampToFrame:
    def test_inside_is_unchanged(self, frame):
        item = _image(10, 10)
        assert clamp_to_frame(item, frame) is item

    def test_negative_position_clamped_to_origin(self, frame):
        out = clamp_to_frame(_image(-50, -3.5), frame)
        assert (out.x, out.y) == (0, 0)

    def test_past_right_bottom_edge(self, frame):
        out = clamp_to_frame(_image(1500, 1000, 100, 80), frame)
        assert out.x == 1536 - 100
        assert out.y == 1024 - 80

    def test_size_untouched(self, frame):
        out = clamp_to_frame(_image(5000, 5000, 123.5, 77.25), frame)
        assert (out.width, out.height) == (123.5, 77.25)

    def test_fractional_position_preserved_inside(self, frame):
        out = clamp_to_frame(_image(10.75, 3.125), frame)
        assert (out.x, out.y) == (10.75, 3.125)

    def test_idempotent(self, frame):
        rng = random.Random(7)
        for _ in range(200):
            item = _image(
                rng.uniform(-2000, 4000), rng.uniform(-2000, 4000),
                rng.uniform(32, 1228), rng.uniform(32, 819),
            )
            once = clamp_to_frame(item, frame)
            assert clamp_to_frame(once, frame) == once
            assert is_contained(once, frame)

    def test_item_wider_than_frame_is_not_contained(self):
        # Oversize items are only prevented by the creation-time policy;
        # clamping leaves them overflowing (x ends at frame.width - width).
        small = Frame(100, 100)
        out = clamp_to_frame(_image(20, 0, 150, 50), small)
        assert out.x == -50
        assert not is_contained(out, small)

    def test_oversize_clamp_is_still_idempotent(self):
        small = Frame(100, 100)
        once = clamp_to_frame(_image(20, 20, 150, 150), small)
        assert clamp_to_frame(once, small) == once


class TestApplyResize:
    def test_floor_at_minimum(self, frame):
        out = apply_resize(_image(10, 10), 1, 1, frame)
        assert out.width >= MIN_ITEM_SIZE
        assert out.height >= MIN_ITEM_SIZE
        assert (out.width, out.height) == (MIN_ITEM_SIZE, MIN_ITEM_SIZE)

    def test_custom_floor(self, frame):
        out = apply_resize(_image(10, 10), 1, 1, frame, min_size=TRANSFORM_MIN_SIZE)
        assert (out.width, out.height) == (48, 48)

    def test_keeps_top_left_anchor(self, frame):
        out = apply_resize(_image(200, 150), 300, 240, frame)
        assert (out.x, out.y) == (200, 150)
        assert (out.width, out.height) == (300, 240)

    def test_reclamps_after_growing(self, frame):
        out = apply_resize(_image(1400, 900), 300, 300, frame)
        assert out.x == 1536 - 300
        assert out.y == 1024 - 300
        assert is_contained(out, frame)

    def test_no_aspect_lock(self, frame):
        out = apply_resize(_image(0, 0, 100, 100), 400, 50, frame)
        assert (out.width, out.height) == (400, 50)


class TestLiveBounds:
    def test_drag_position_clamped(self, frame):
        item = _image(0, 0, 100, 80)
        assert bound_drag_position(item, -10, 2000, frame) == (0, 1024 - 80)

    def test_drag_position_inside(self, frame):
        item = _image(0, 0, 100, 80)
        assert bound_drag_position(item, 50.5, 60, frame) == (50.5, 60)

    def test_transform_box_floor(self):
        assert bound_transform_box(10, 200) == (48, 200)
        assert bound_transform_box(10, 10, min_size=32) == (32, 32)


class TestCreationPolicy:
    def test_small_media_not_upscaled(self, frame):
        assert fit_to_frame(400, 300, frame) == (400, 300)

    def test_large_media_scaled_to_80_percent(self, frame):
        w, h = fit_to_frame(4000, 2000, frame)
        assert w == pytest.approx(1536 * MAX_FRAME_FRACTION)
        assert h == pytest.approx(2000 * (1536 * 0.8 / 4000))
        assert w <= frame.width * 0.8 + 1e-9
        assert h <= frame.height * 0.8 + 1e-9

    def test_tall_media_limited_by_height(self, frame):
        w, h = fit_to_frame(500, 5000, frame)
        assert h == pytest.approx(1024 * 0.8)

    def test_floor_applied(self, frame):
        assert fit_to_frame(10, 10, frame, floor=64) == (64, 64)
        assert fit_to_frame(10, 10, frame, floor=96) == (96, 96)

    def test_non_positive_dimensions_raise(self, frame):
        with pytest.raises(ValueError, match="positive"):
            fit_to_frame(0, 100, frame)

    def test_centered_origin(self, frame):
        assert centered_origin(536, 24, frame) == (500, 500)

    def test_post_card_size_default_frame(self, frame):
        assert post_card_size(frame) == (560, 400)

    def test_post_card_size_small_frame(self):
        w, h = post_card_size(Frame(400, 200))
        assert w == pytest.approx(320)
        assert h == 180

    def test_created_items_are_contained(self, frame):
        for natural in [(400, 300), (4000, 2000), (10, 10), (500, 5000)]:
            w, h = fit_to_frame(*natural, frame)
            x, y = centered_origin(w, h, frame)
            assert is_contained(make_image("s", x, y, w, h), frame)
        w, h = post_card_size(frame)
        x, y = centered_origin(w, h, frame)
        assert is_contained(make_post("t", x, y, w, h), frame)
