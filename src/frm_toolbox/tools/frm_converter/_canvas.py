"""RGBA pixel buffer and the palette-indexed frame blitter.

Out-of-range writes are clipped: any part of a frame that falls outside
the canvas (right, bottom, or at negative coordinates) is dropped without
raising.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

if TYPE_CHECKING:
    from frm_toolbox.core.datatypes import Frame
    from frm_toolbox.tools.frm_converter._pal import Palette

logger = logging.getLogger(__name__)

RGBA = tuple[int, int, int, int]


class Canvas:
    """Fixed-size RGBA buffer, zero-initialised (transparent black).

    Pixels live in a contiguous ``(height, width, 4)`` uint8 array.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            msg = f"Canvas size must be non-negative, got {width}x{height}"
            raise ValueError(msg)
        self._pixels = np.zeros((height, width, 4), dtype=np.uint8)

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def pixels(self) -> np.ndarray:
        """The underlying ``(height, width, 4)`` array (shared, not copied)."""
        return self._pixels

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> RGBA:
        """Return the RGBA value at ``(x, y)``.

        Raises:
            IndexError: If the position lies outside the canvas.
        """
        if not self.contains(x, y):
            msg = f"Pixel ({x}, {y}) outside {self.width}x{self.height} canvas"
            raise IndexError(msg)
        r, g, b, a = (int(c) for c in self._pixels[y, x])
        return (r, g, b, a)

    def set_pixel(self, x: int, y: int, rgba: RGBA) -> None:
        """Write one pixel; positions outside the canvas are ignored."""
        if self.contains(x, y):
            self._pixels[y, x] = rgba

    def copy(self) -> Canvas:
        clone = Canvas(0, 0)
        clone._pixels = self._pixels.copy()
        return clone

    def to_image(self) -> Image.Image:
        """Return the buffer as a Pillow ``RGBA`` image."""
        return Image.fromarray(self._pixels)


def blit_frame(frame: Frame, canvas: Canvas, x: int, y: int, palette: Palette) -> None:
    """Draw *frame* onto *canvas* with its top-left corner at ``(x, y)``.

    Every frame pixel, transparent index 0 included, replaces the canvas
    pixel beneath it with ``palette`` colour of its index.  Parts of the
    frame outside the canvas are dropped.

    Args:
        frame: The palette-indexed frame to draw.
        canvas: Destination buffer, modified in place.
        x: Destination column of the frame's left edge.
        y: Destination row of the frame's top edge.
        palette: Colour lookup for the frame's indices.
    """
    # Visible window, in frame coordinates.
    src_left = max(0, -x)
    src_top = max(0, -y)
    src_right = min(frame.width, canvas.width - x)
    src_bottom = min(frame.height, canvas.height - y)

    if src_right <= src_left or src_bottom <= src_top:
        logger.debug("Frame %d at (%d, %d) is entirely outside the canvas", frame.index, x, y)
        return

    if src_right - src_left < frame.width or src_bottom - src_top < frame.height:
        logger.debug(
            "Frame %d at (%d, %d) clipped to %dx%d",
            frame.index,
            x,
            y,
            src_right - src_left,
            src_bottom - src_top,
        )

    indices = frame.as_array()[src_top:src_bottom, src_left:src_right]
    canvas.pixels[y + src_top : y + src_bottom, x + src_left : x + src_right] = palette.table[indices]
