"""Frame placement and composite layout — pure computation, no file I/O.

FRM frames do not store positions.  Each frame carries the motion of the
sprite's anchor point (its "spot", bottom centre of the first frame)
relative to the previous frame.  ``convert_offsets`` turns that chain of
motions into top-left placements on the smallest canvas that holds every
frame, and the ``compose_*`` functions use those placements to draw the
output images:

* ``compose_legacy`` — one static grid, a row per direction, offsets ignored.
* ``compose_anim`` — one animation per direction.
* ``compose_anim_packed`` — one animation holding all six directions,
  NE/NW, E/W and SE/SW side by side in three rows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from frm_toolbox.core.datatypes import (
    DIR_COUNT,
    DIR_NE,
    DIR_NW,
    DIR_SE,
    Frame,
    FrameLayout,
    FrmFile,
    PackedLayout,
)
from frm_toolbox.core.exceptions import EmptyFrameSequenceError, InvalidDirectionCountError, LayoutError
from frm_toolbox.tools.frm_converter._canvas import Canvas, blit_frame
from frm_toolbox.tools.frm_converter._pal import Palette

logger = logging.getLogger(__name__)

# ── Constants ─────────────────────────────────────────────────────────────

# APNG frame disposal / blending operations.
DISPOSE_NONE = 0
DISPOSE_BACKGROUND = 1
BLEND_SOURCE = 0

DEFAULT_SPACING = 4


class Generator(StrEnum):
    """Output strategy used to turn an FRM into PNG files."""

    LEGACY = "legacy"
    ANIM = "anim"
    ANIM_PACKED = "anim-packed"


@dataclass(frozen=True)
class AnimationStep:
    """One animation frame: an image placed on the animation canvas."""

    canvas: Canvas
    x: int
    y: int
    delay_num: int
    delay_den: int
    dispose: int = DISPOSE_BACKGROUND
    blend: int = BLEND_SOURCE


@dataclass(frozen=True)
class Animation:
    """A complete animated image, ready for the APNG writer.

    Attributes:
        width: Animation canvas width.
        height: Animation canvas height.
        steps: Animation frames in playback order.
        preview: Still image for viewers without animation support, or ``None``.
        loop: Number of plays, 0 for infinite.
        name: Label used in logs and output file names.
    """

    width: int
    height: int
    steps: tuple[AnimationStep, ...]
    preview: Canvas | None = None
    loop: int = 0
    name: str = ""

    @property
    def frame_count(self) -> int:
        """Return the number of images written, preview included."""
        return len(self.steps) + (1 if self.preview is not None else 0)


def frame_delay(frm: FrmFile) -> tuple[int, int]:
    """Return the ``(numerator, denominator)`` delay in seconds of one frame.

    FRM playback runs at half the stored frame rate.
    """
    return (1, frm.frames_per_second // 2)


# ── Offset conversion ─────────────────────────────────────────────────────


def convert_offsets(frames: Sequence[Frame]) -> FrameLayout:
    """Convert relative frame offsets into absolute placements.

    The spot starts at the bottom centre of frame 0, which is provisionally
    placed at ``(0, 0)``.  Every following frame moves the spot by its
    offset and is placed with its own bottom centre on the spot.  A frame
    that would land at a negative coordinate pushes frame 0 (and with it
    every other frame) right or down far enough to keep it on the canvas.

    Args:
        frames: One direction's frames in playback order.

    Returns:
        Placements in frame order and the tightest canvas size.

    Raises:
        EmptyFrameSequenceError: If *frames* is empty.
    """
    if not frames:
        msg = "Cannot lay out a direction without frames"
        raise EmptyFrameSequenceError(msg)

    first = frames[0]
    spot_x = first.width // 2
    spot_y = first.height
    anchor_x = anchor_y = 0
    relative: list[tuple[int, int]] = [(0, 0)]

    for frame in frames[1:]:
        spot_x += frame.offset_x
        spot_y += frame.offset_y
        x = spot_x - frame.width // 2
        y = spot_y - frame.height
        relative.append((x, y))

        if x < 0:
            anchor_x = max(anchor_x, -x)
        if y < 0:
            anchor_y = max(anchor_y, -y)

    placements: list[tuple[int, int]] = [(anchor_x, anchor_y)]
    placements.extend((x + anchor_x, y + anchor_y) for x, y in relative[1:])

    width = max(x + f.width for (x, _y), f in zip(placements, frames, strict=True))
    height = max(y + f.height for (_x, y), f in zip(placements, frames, strict=True))

    for frame, (x, y) in zip(frames, placements, strict=True):
        logger.debug(
            "offset frame:%d %d,%d -> %d,%d",
            frame.index,
            frame.offset_x,
            frame.offset_y,
            x,
            y,
        )

    return FrameLayout(placements=tuple(placements), width=width, height=height)


# ── Legacy grid ───────────────────────────────────────────────────────────


def compose_legacy(frm: FrmFile, palette: Palette) -> Canvas:
    """Draw every frame into a static grid: one row per direction.

    Each cell is as large as the largest frame of the whole file, and
    frame *f* of the *d*-th direction goes to cell ``(f, d)``.

    Args:
        frm: The sprite to draw.
        palette: Colour lookup for the frames.

    Returns:
        The grid canvas.
    """
    cell_w = frm.max_frame_width
    cell_h = frm.max_frame_height
    canvas = Canvas(cell_w * frm.frames_per_direction, cell_h * len(frm.directions))

    for row, direction in enumerate(frm.directions):
        for col, frame in enumerate(direction.frames):
            logger.debug(
                "draw dir:%d frame:%d @ %d,%d -> %dx%d",
                row,
                col,
                cell_w * col,
                cell_h * row,
                frame.width,
                frame.height,
            )
            blit_frame(frame, canvas, cell_w * col, cell_h * row, palette)

    return canvas


# ── Per-direction animation ───────────────────────────────────────────────


def compose_anim(frm: FrmFile, palette: Palette, *, preview: bool = True) -> list[Animation]:
    """Build one animation per direction.

    Every step is the bare frame image positioned at its placement; the
    optional preview shows frame 0 centred on the direction's canvas.

    Args:
        frm: The sprite to animate.
        palette: Colour lookup for the frames.
        preview: Whether to add the non-animated preview image.

    Returns:
        One ``Animation`` per direction, in direction order.
    """
    delay_num, delay_den = frame_delay(frm)
    animations: list[Animation] = []

    for position, direction in enumerate(frm.directions):
        logger.debug("direction %d (%s)", position, direction.name)
        layout = convert_offsets(direction.frames)

        preview_canvas: Canvas | None = None
        if preview:
            first = direction.frames[0]
            preview_canvas = Canvas(layout.width, layout.height)
            blit_frame(
                first,
                preview_canvas,
                layout.width // 2 - first.width // 2,
                layout.height // 2 - first.height // 2,
                palette,
            )

        steps: list[AnimationStep] = []
        for frame, (x, y) in zip(direction.frames, layout.placements, strict=True):
            image = Canvas(frame.width, frame.height)
            blit_frame(frame, image, 0, 0, palette)
            steps.append(AnimationStep(canvas=image, x=x, y=y, delay_num=delay_num, delay_den=delay_den))

        animations.append(
            Animation(
                width=layout.width,
                height=layout.height,
                steps=tuple(steps),
                preview=preview_canvas,
                name=str(position),
            )
        )

    return animations


# ── Packed six-direction animation ────────────────────────────────────────


def _require_six(count: int) -> None:
    if count != DIR_COUNT:
        msg = f"Packed layout needs exactly {DIR_COUNT} directions, got {count}"
        raise InvalidDirectionCountError(msg)


def compute_packed_layout(layouts: Sequence[FrameLayout], spacing: int = DEFAULT_SPACING) -> PackedLayout:
    """Place six direction canvases into two columns and three rows.

    Row *k* holds direction ``NW - k`` on the left and ``NE + k`` on the
    right, i.e. NW|NE, W|E, SW|SE.  Left-column canvases are right-aligned
    against the gap, right-column canvases start after it, and every
    canvas sits on the bottom of its row.

    Args:
        layouts: ``FrameLayout`` of each direction, in slot order NE..NW.
        spacing: Gap between the columns and between consecutive rows.

    Returns:
        The composite size and the origin of every direction's canvas.

    Raises:
        InvalidDirectionCountError: If there are not exactly six layouts.
    """
    _require_six(len(layouts))

    widths = [layout.width for layout in layouts]
    heights = [layout.height for layout in layouts]

    def row_height(row: int) -> int:
        return max(heights[DIR_NW - row], heights[DIR_NE + row])

    width = 0
    height = 0
    center_x = 0
    for row in range(DIR_SE + 1):
        left, right = DIR_NW - row, DIR_NE + row
        logger.debug(
            "dirSize %d:%d,%d %d:%d,%d",
            left,
            widths[left],
            heights[left],
            right,
            widths[right],
            heights[right],
        )
        width = max(width, widths[left] + widths[right])
        height += row_height(row)
        center_x = max(center_x, widths[left])

    width += spacing
    height += spacing * 2
    center_x += spacing // 2

    origins: list[tuple[int, int]] = []
    for slot in range(DIR_COUNT):
        if slot <= DIR_SE:
            x = center_x + spacing // 2
            row = slot
        else:
            x = center_x - spacing // 2 - widths[slot]
            row = DIR_NW - slot

        y = row_height(row) - heights[slot]
        y += spacing * row
        y += sum(row_height(previous) for previous in range(row))

        logger.debug("direction %d: row %d origin %d,%d", slot, row, x, y)
        origins.append((x, y))

    return PackedLayout(width=width, height=height, center_x=center_x, spacing=spacing, origins=tuple(origins))


def compose_anim_packed(
    frm: FrmFile,
    palette: Palette,
    *,
    spacing: int = DEFAULT_SPACING,
    preview: bool = True,
) -> Animation:
    """Build a single animation that shows all six directions at once.

    Output frame *f* is a fresh composite with frame *f* of every
    direction drawn at its direction origin plus its own placement.

    Args:
        frm: A six-direction sprite.
        palette: Colour lookup for the frames.
        spacing: Gap between the columns and between consecutive rows.
        preview: Whether to add a preview image (copy of composite 0).

    Returns:
        The packed ``Animation``.

    Raises:
        InvalidDirectionCountError: If *frm* has not exactly six directions.
        LayoutError: If a direction holds fewer frames than the file declares.
    """
    _require_six(len(frm.directions))

    frame_count = frm.frames_per_direction
    for direction in frm.directions:
        if len(direction.frames) < frame_count:
            msg = f"Direction {direction.name} has {len(direction.frames)} frames, expected {frame_count}"
            raise LayoutError(msg)

    layouts = [convert_offsets(direction.frames) for direction in frm.directions]
    packed = compute_packed_layout(layouts, spacing)
    delay_num, delay_den = frame_delay(frm)

    steps: list[AnimationStep] = []
    for frame_idx in range(frame_count):
        logger.debug("frame %d", frame_idx)
        image = Canvas(packed.width, packed.height)

        for slot, direction in enumerate(frm.directions):
            origin_x, origin_y = packed.origins[slot]
            place_x, place_y = layouts[slot].placements[frame_idx]
            blit_frame(direction.frames[frame_idx], image, origin_x + place_x, origin_y + place_y, palette)

        steps.append(AnimationStep(canvas=image, x=0, y=0, delay_num=delay_num, delay_den=delay_den))

    preview_canvas = steps[0].canvas.copy() if preview and steps else None

    return Animation(width=packed.width, height=packed.height, steps=tuple(steps), preview=preview_canvas)
