"""Tests for frame placement and composite layout."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest

from frm_toolbox.core.datatypes import Direction, Frame, FrameLayout, FrmFile
from frm_toolbox.core.exceptions import EmptyFrameSequenceError, InvalidDirectionCountError, LayoutError
from frm_toolbox.tools.frm_converter._pal import Palette
from frm_toolbox.tools.frm_converter.layout import (
    BLEND_SOURCE,
    DISPOSE_BACKGROUND,
    compose_anim,
    compose_anim_packed,
    compose_legacy,
    compute_packed_layout,
    convert_offsets,
    frame_delay,
)

# Offset chains exercising left, right, up and down motion.
_SEQUENCES: list[list[tuple[int, int, int, int]]] = [
    [(10, 10, 0, 0), (10, 10, -8, 0)],
    [(7, 13, 0, 0), (9, 11, 3, -4), (5, 20, -12, 6), (11, 8, 1, -15)],
    [(30, 40, 0, 0), (28, 42, 5, 0), (31, 39, 5, 0), (29, 41, 5, 0)],
    [(4, 4, 0, 0), (6, 2, -1, -1), (2, 6, -1, -1), (3, 3, -20, 30)],
    [(1, 1, 0, 0), (1, 1, 0, -5), (1, 1, 0, -5)],
]


# ── TestConvertOffsets ─────────────────────────────────────────────────────


class TestConvertOffsets:
    """Tests for the ``convert_offsets`` function."""

    def test_negative_x_shifts_first_frame(self, make_frame: Callable[..., Frame]) -> None:
        """A frame moving left of the origin pushes frame 0 right."""
        frames = [make_frame(10, 10, 0, 0, index=0), make_frame(10, 10, -8, 0, index=1)]

        layout = convert_offsets(frames)

        assert layout.placements == ((8, 0), (0, 0))
        assert (layout.width, layout.height) == (18, 10)

    def test_negative_y_shifts_first_frame(self, make_frame: Callable[..., Frame]) -> None:
        """A frame moving above the origin pushes frame 0 down."""
        frames = [make_frame(10, 10, index=0), make_frame(10, 10, 0, -3, index=1)]

        layout = convert_offsets(frames)

        assert layout.placements == ((0, 3), (0, 0))
        assert (layout.width, layout.height) == (10, 13)

    def test_taller_frame_is_bottom_aligned(self, make_frame: Callable[..., Frame]) -> None:
        """Frames share the spot at their bottom centre."""
        frames = [make_frame(10, 10, index=0), make_frame(10, 14, index=1)]

        layout = convert_offsets(frames)

        # Frame 1 would start at y=-4, so frame 0 moves down by 4.
        assert layout.placements == ((0, 4), (0, 0))
        assert (layout.width, layout.height) == (10, 14)

    def test_odd_widths_truncate(self, make_frame: Callable[..., Frame]) -> None:
        """Half widths are computed with integer division."""
        frames = [make_frame(5, 4, index=0), make_frame(3, 4, index=1)]

        layout = convert_offsets(frames)

        # spot x = 5 // 2 = 2, frame 1 at 2 - 3 // 2 = 1.
        assert layout.placements == ((0, 0), (1, 0))
        assert (layout.width, layout.height) == (5, 4)

    def test_positive_motion_grows_canvas(self, make_frame: Callable[..., Frame]) -> None:
        """Moving right extends the canvas without moving frame 0."""
        frames = [make_frame(10, 10, index=0), make_frame(10, 10, 4, 0, index=1), make_frame(10, 10, 4, 0, index=2)]

        layout = convert_offsets(frames)

        assert layout.placements == ((0, 0), (4, 0), (8, 0))
        assert (layout.width, layout.height) == (18, 10)

    def test_offsets_accumulate(self, make_frame: Callable[..., Frame]) -> None:
        """Every offset is relative to the previous frame, not to frame 0."""
        frames = [
            make_frame(10, 10, index=0),
            make_frame(10, 10, -3, 0, index=1),
            make_frame(10, 10, -3, 0, index=2),
        ]

        layout = convert_offsets(frames)

        assert layout.placements == ((6, 0), (3, 0), (0, 0))
        assert layout.width == 16

    def test_first_frame_offset_is_ignored(self, make_frame: Callable[..., Frame]) -> None:
        """The offset stored on frame 0 does not move anything."""
        frames = [make_frame(10, 10, 50, 50, index=0), make_frame(10, 10, 0, 0, index=1)]

        layout = convert_offsets(frames)

        assert layout.placements == ((0, 0), (0, 0))
        assert (layout.width, layout.height) == (10, 10)

    def test_single_frame_identity(self, make_frame: Callable[..., Frame]) -> None:
        """One frame is placed at the origin on a canvas of its own size."""
        layout = convert_offsets([make_frame(17, 23)])

        assert layout == FrameLayout(placements=((0, 0),), width=17, height=23)

    def test_empty_sequence_raises(self) -> None:
        """A direction without frames cannot be laid out."""
        with pytest.raises(EmptyFrameSequenceError):
            convert_offsets([])

    @pytest.mark.parametrize("specs", _SEQUENCES)
    def test_is_deterministic(self, make_direction: Callable[..., Direction], specs: list[tuple[int, int, int, int]]) -> None:
        """Repeated calls return identical layouts."""
        frames = make_direction(specs).frames

        assert convert_offsets(frames) == convert_offsets(frames)

    @pytest.mark.parametrize("specs", _SEQUENCES)
    def test_placements_are_non_negative(
        self, make_direction: Callable[..., Direction], specs: list[tuple[int, int, int, int]]
    ) -> None:
        """No placement has a negative coordinate."""
        layout = convert_offsets(make_direction(specs).frames)

        assert len(layout.placements) == len(specs)
        assert all(x >= 0 and y >= 0 for x, y in layout.placements)

    @pytest.mark.parametrize("specs", _SEQUENCES)
    def test_canvas_is_tight(self, make_direction: Callable[..., Direction], specs: list[tuple[int, int, int, int]]) -> None:
        """Every frame fits, and each canvas edge touches at least one frame."""
        frames = make_direction(specs).frames
        layout = convert_offsets(frames)

        rights = [x + f.width for (x, _y), f in zip(layout.placements, frames, strict=True)]
        bottoms = [y + f.height for (_x, y), f in zip(layout.placements, frames, strict=True)]

        assert max(rights) == layout.width
        assert max(bottoms) == layout.height
        assert min(x for x, _y in layout.placements) == 0
        assert min(y for _x, y in layout.placements) == 0


# ── TestComposeLegacy ──────────────────────────────────────────────────────


class TestComposeLegacy:
    """Tests for the ``compose_legacy`` grid generator."""

    def test_grid_size_and_cell_origin(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """Two directions of two 8x8 frames form a 16x16 grid."""
        frm = make_frm([[(8, 8, 0, 0), (8, 8, 0, 0)], [(8, 8, 0, 0), (8, 8, 0, 0)]])

        canvas = compose_legacy(frm, palette)

        assert canvas.size == (16, 16)
        # Direction 1, frame 1 is filled with index 12 and starts at (8, 8).
        assert canvas.get_pixel(8, 8) == palette.color(12)
        assert canvas.get_pixel(15, 15) == palette.color(12)
        assert canvas.get_pixel(7, 8) == palette.color(11)
        assert canvas.get_pixel(0, 0) == palette.color(1)

    def test_offsets_are_ignored(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """Frames stay in their cells whatever their motion offsets."""
        frm = make_frm([[(8, 8, 0, 0), (8, 8, -50, 90)]])

        canvas = compose_legacy(frm, palette)

        assert canvas.size == (16, 8)
        assert canvas.get_pixel(8, 0) == palette.color(2)

    def test_cells_use_largest_frame(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """Cells are sized to the largest frame of the whole file."""
        frm = make_frm([[(4, 6, 0, 0), (12, 3, 0, 0)], [(5, 5, 0, 0), (2, 2, 0, 0)]])

        canvas = compose_legacy(frm, palette)

        assert canvas.size == (24, 12)
        # Small frames leave the rest of their cell transparent.
        assert canvas.get_pixel(4, 0) == (0, 0, 0, 0)
        assert canvas.get_pixel(12, 6) == palette.color(12)
        assert canvas.get_pixel(14, 6) == (0, 0, 0, 0)


# ── TestComposeAnim ────────────────────────────────────────────────────────


class TestComposeAnim:
    """Tests for the per-direction ``compose_anim`` generator."""

    def test_one_animation_per_direction(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """Each direction becomes its own animation."""
        frm = make_frm([[(10, 10, 0, 0), (10, 10, -8, 0)], [(6, 6, 0, 0), (6, 6, 0, 0)]])

        animations = compose_anim(frm, palette)

        assert len(animations) == 2
        assert [a.name for a in animations] == ["0", "1"]
        assert (animations[0].width, animations[0].height) == (18, 10)
        assert (animations[1].width, animations[1].height) == (6, 6)

    def test_steps_follow_placements(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """Steps hold the bare frames at their corrected positions."""
        frm = make_frm([[(10, 10, 0, 0), (10, 10, -8, 0)]], fps=10)

        (animation,) = compose_anim(frm, palette)

        assert [(s.x, s.y) for s in animation.steps] == [(8, 0), (0, 0)]
        assert all(s.canvas.size == (10, 10) for s in animation.steps)
        assert animation.steps[1].canvas.get_pixel(0, 0) == palette.color(2)

    def test_step_timing_and_ops(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """Every step uses the halved frame rate, background disposal and source blending."""
        frm = make_frm([[(4, 4, 0, 0), (4, 4, 1, 0), (4, 4, 1, 0)]], fps=12)

        (animation,) = compose_anim(frm, palette)

        for step in animation.steps:
            assert (step.delay_num, step.delay_den) == (1, 6)
            assert step.dispose == DISPOSE_BACKGROUND
            assert step.blend == BLEND_SOURCE

    def test_preview_centres_first_frame(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """The preview shows frame 0 in the middle of the canvas."""
        frm = make_frm([[(10, 10, 0, 0), (10, 10, -8, 0)]])

        (animation,) = compose_anim(frm, palette)

        assert animation.preview is not None
        assert animation.preview.size == (18, 10)
        assert animation.frame_count == 3
        # Centred: 18 // 2 - 10 // 2 = 4.
        assert animation.preview.get_pixel(3, 5) == (0, 0, 0, 0)
        assert animation.preview.get_pixel(4, 5) == palette.color(1)
        assert animation.preview.get_pixel(13, 5) == palette.color(1)
        assert animation.preview.get_pixel(14, 5) == (0, 0, 0, 0)

    def test_preview_can_be_disabled(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """Without a preview only the real frames remain."""
        frm = make_frm([[(4, 4, 0, 0), (4, 4, 0, 0)]])

        (animation,) = compose_anim(frm, palette, preview=False)

        assert animation.preview is None
        assert animation.frame_count == 2

    def test_frame_delay_with_low_fps(self, make_frm: Callable[..., FrmFile]) -> None:
        """A frame rate below 2 yields a zero denominator."""
        assert frame_delay(make_frm([[(1, 1, 0, 0)]], fps=1)) == (1, 0)
        assert frame_delay(make_frm([[(1, 1, 0, 0)]], fps=10)) == (1, 5)


# ── TestComputePackedLayout ────────────────────────────────────────────────


def _square_layouts(size: int = 10) -> list[FrameLayout]:
    return [FrameLayout(placements=((0, 0),), width=size, height=size) for _ in range(6)]


class TestComputePackedLayout:
    """Tests for the six-direction ``compute_packed_layout`` geometry."""

    @pytest.mark.parametrize("count", [0, 1, 5, 7])
    def test_requires_six_directions(self, count: int) -> None:
        """Anything but six directions is rejected."""
        layouts = [FrameLayout(placements=((0, 0),), width=4, height=4)] * count

        with pytest.raises(InvalidDirectionCountError, match="exactly 6"):
            compute_packed_layout(layouts)

    def test_uniform_squares(self) -> None:
        """Six equal canvases form a two-column, three-row grid."""
        packed = compute_packed_layout(_square_layouts(10), spacing=4)

        assert (packed.width, packed.height) == (24, 38)
        assert packed.center_x == 12
        assert packed.origins == (
            (14, 0),  # NE
            (14, 14),  # E
            (14, 28),  # SE
            (0, 28),  # SW
            (0, 14),  # W
            (0, 0),  # NW
        )

    def test_left_column_is_right_aligned(self) -> None:
        """Narrow west-side canvases hug the column gap."""
        layouts = _square_layouts(10)
        layouts[4] = FrameLayout(placements=((0, 0),), width=6, height=10)  # W

        packed = compute_packed_layout(layouts, spacing=4)

        assert packed.origins[4] == (4, 14)
        assert packed.origins[1] == (14, 14)

    def test_rows_are_bottom_aligned(self) -> None:
        """The shorter canvas of a pair sits on the bottom of the row."""
        layouts = _square_layouts(10)
        layouts[5] = FrameLayout(placements=((0, 0),), width=10, height=6)  # NW
        layouts[1] = FrameLayout(placements=((0, 0),), width=10, height=16)  # E

        packed = compute_packed_layout(layouts, spacing=4)

        assert packed.origins[5] == (0, 4)
        assert packed.origins[0] == (14, 0)
        # Row 1 is 16 tall; W (10 tall) is pushed down by 6.
        assert packed.origins[1] == (14, 14)
        assert packed.origins[4] == (0, 20)
        # Row 2 starts below 10 + 16 plus two gaps.
        assert packed.origins[2] == (14, 34)
        assert packed.height == 10 + 16 + 10 + 8

    def test_width_from_widest_pair(self) -> None:
        """Composite width is the widest pair plus one gap."""
        layouts = _square_layouts(10)
        layouts[3] = FrameLayout(placements=((0, 0),), width=20, height=10)  # SW

        packed = compute_packed_layout(layouts, spacing=4)

        assert packed.width == 34
        assert packed.center_x == 22
        assert packed.origins[3] == (0, 28)
        assert packed.origins[5] == (10, 0)
        assert packed.origins[0] == (24, 0)

    def test_diagonal_wide_pair_overflows_composite(self) -> None:
        """Wide NW and SE canvases on different rows push SE past the right edge."""
        layouts = _square_layouts(10)
        layouts[5] = FrameLayout(placements=((0, 0),), width=20, height=10)  # NW
        layouts[2] = FrameLayout(placements=((0, 0),), width=20, height=10)  # SE

        packed = compute_packed_layout(layouts, spacing=4)

        # Widest pair is 20 + 10, but the columns split at 22.
        assert (packed.width, packed.height) == (34, 38)
        assert packed.center_x == 22
        assert packed.origins[5] == (0, 0)
        assert packed.origins[2] == (24, 28)
        assert packed.origins[2][0] + 20 > packed.width

    def test_zero_spacing(self) -> None:
        """Without spacing the columns and rows touch."""
        packed = compute_packed_layout(_square_layouts(8), spacing=0)

        assert (packed.width, packed.height) == (16, 24)
        assert packed.origins[0] == (8, 0)
        assert packed.origins[3] == (0, 16)


# ── TestComposeAnimPacked ──────────────────────────────────────────────────


class TestComposeAnimPacked:
    """Tests for the ``compose_anim_packed`` generator."""

    @pytest.mark.parametrize("count", [1, 5, 7])
    def test_requires_six_directions(
        self, make_frm: Callable[..., FrmFile], palette: Palette, count: int
    ) -> None:
        """Sprites without exactly six directions are rejected."""
        frm = make_frm([[(4, 4, 0, 0)]] * count)

        with pytest.raises(InvalidDirectionCountError):
            compose_anim_packed(frm, palette)

    def test_six_directions_succeed(
        self, make_frm: Callable[..., FrmFile], palette: Palette, six_squares: list[list[tuple[int, int, int, int]]]
    ) -> None:
        """A six-direction sprite yields one composite per frame index."""
        frm = make_frm(six_squares)

        animation = compose_anim_packed(frm, palette, spacing=4)

        # Each direction canvas is 12x10 (second frame moved 2px right).
        assert (animation.width, animation.height) == (28, 38)
        assert len(animation.steps) == 2
        assert all(step.canvas.size == (28, 38) for step in animation.steps)
        assert all((step.x, step.y) == (0, 0) for step in animation.steps)

    def test_frames_drawn_at_origin_plus_placement(
        self, make_frm: Callable[..., FrmFile], palette: Palette, six_squares: list[list[tuple[int, int, int, int]]]
    ) -> None:
        """Each direction's frame lands at its origin plus its own placement."""
        frm = make_frm(six_squares)

        animation = compose_anim_packed(frm, palette, spacing=4)
        first, second = (step.canvas for step in animation.steps)

        # center_x = 12 + 2; NE origin (16, 0), NW origin (0, 0).
        assert first.get_pixel(16, 0) == palette.color(1)  # NE frame 0
        assert first.get_pixel(15, 0) == (0, 0, 0, 0)
        assert first.get_pixel(0, 0) == palette.color(51)  # NW frame 0
        assert second.get_pixel(18, 0) == palette.color(2)  # NE frame 1, +2px
        assert second.get_pixel(16, 0) == (0, 0, 0, 0)
        # E on row 1 at y = 10 + 4.
        assert first.get_pixel(16, 14) == palette.color(11)
        # SW on row 2 at y = 28.
        assert first.get_pixel(0, 28) == palette.color(31)

    def test_composites_do_not_share_pixels(
        self, make_frm: Callable[..., FrmFile], palette: Palette, six_squares: list[list[tuple[int, int, int, int]]]
    ) -> None:
        """Every frame index starts from a fresh transparent canvas."""
        frm = make_frm(six_squares)

        animation = compose_anim_packed(frm, palette)
        second = animation.steps[1].canvas

        # Frame 0 covered x=16..17 in the NE slot; frame 1 does not.
        assert second.get_pixel(17, 0) == (0, 0, 0, 0)

    def test_preview_copies_first_composite(
        self, make_frm: Callable[..., FrmFile], palette: Palette, six_squares: list[list[tuple[int, int, int, int]]]
    ) -> None:
        """The preview equals, but does not alias, the first composite."""
        frm = make_frm(six_squares)

        animation = compose_anim_packed(frm, palette)

        assert animation.preview is not None
        assert np.array_equal(animation.preview.pixels, animation.steps[0].canvas.pixels)
        assert animation.preview.pixels is not animation.steps[0].canvas.pixels
        assert animation.frame_count == 3

    def test_overflowing_direction_is_clipped(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """Pixels of a direction that runs past the composite are dropped."""
        specs = [[(10, 10, 0, 0)] for _ in range(6)]
        specs[5] = [(20, 10, 0, 0)]  # NW
        specs[2] = [(20, 10, 0, 0)]  # SE
        frm = make_frm(specs)

        animation = compose_anim_packed(frm, palette, spacing=4, preview=False)
        composite = animation.steps[0].canvas

        assert (animation.width, animation.height) == (34, 38)
        assert composite.size == (34, 38)
        # SE starts at x = 24; only its first 10 columns fit.
        assert composite.get_pixel(24, 28) == palette.color(21)
        assert composite.get_pixel(33, 37) == palette.color(21)
        assert composite.get_pixel(0, 0) == palette.color(51)
        assert composite.get_pixel(19, 9) == palette.color(51)

    def test_short_direction_raises(self, make_frm: Callable[..., FrmFile], palette: Palette) -> None:
        """A direction with fewer frames than declared is a layout error."""
        specs = [[(4, 4, 0, 0), (4, 4, 0, 0)] for _ in range(6)]
        specs[3] = [(4, 4, 0, 0)]
        frm = make_frm(specs)

        with pytest.raises(LayoutError, match="SW"):
            compose_anim_packed(frm, palette)
