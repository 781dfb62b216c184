"""Shared value objects used across tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from frm_toolbox.core.exceptions import FormatError

# Compass slots of a six-direction sprite, in file order.
DIR_NE = 0
DIR_E = 1
DIR_SE = 2
DIR_SW = 3
DIR_W = 4
DIR_NW = 5
DIR_COUNT = 6

DIRECTION_NAMES: tuple[str, ...] = ("NE", "E", "SE", "SW", "W", "NW")


@dataclass(frozen=True)
class Frame:
    """A single palette-indexed image inside a direction.

    Attributes:
        width: Frame width in pixels.
        height: Frame height in pixels.
        offset_x: Horizontal motion relative to the previous frame.
        offset_y: Vertical motion relative to the previous frame.
        pixels: Row-major palette indices, ``width * height`` bytes.
        index: Position of the frame within its direction.
    """

    width: int
    height: int
    offset_x: int = 0
    offset_y: int = 0
    pixels: bytes = b""
    index: int = 0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            msg = f"Frame {self.index} has invalid size {self.width}x{self.height}"
            raise FormatError(msg)
        if len(self.pixels) != self.width * self.height:
            msg = (
                f"Frame {self.index} holds {len(self.pixels)} pixels, "
                f"expected {self.width * self.height}"
            )
            raise FormatError(msg)

    def color_index(self, x: int, y: int) -> int:
        """Return the palette index at ``(x, y)``, or 0 outside the frame."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return 0
        return self.pixels[self.width * y + x]

    def as_array(self) -> np.ndarray:
        """Return the palette indices as a ``(height, width)`` uint8 array."""
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(self.height, self.width)


@dataclass(frozen=True)
class Direction:
    """An ordered animation sequence for one compass direction."""

    frames: tuple[Frame, ...]
    index: int = 0
    shift_x: int = 0
    shift_y: int = 0
    data_offset: int = 0

    @property
    def name(self) -> str:
        """Return the compass name of this direction (``"NE"`` ... ``"NW"``)."""
        return DIRECTION_NAMES[self.index] if 0 <= self.index < DIR_COUNT else str(self.index)

    @property
    def max_frame_width(self) -> int:
        """Return the widest frame width in this direction."""
        return max((f.width for f in self.frames), default=0)

    @property
    def max_frame_height(self) -> int:
        """Return the tallest frame height in this direction."""
        return max((f.height for f in self.frames), default=0)


@dataclass(frozen=True)
class FrmFile:
    """A parsed ``.frm`` sprite container."""

    directions: tuple[Direction, ...]
    frames_per_direction: int
    frames_per_second: int = 10
    action_frame: int = 0
    version: int = 4

    @property
    def max_frame_width(self) -> int:
        """Return the widest frame width across all directions."""
        return max((d.max_frame_width for d in self.directions), default=0)

    @property
    def max_frame_height(self) -> int:
        """Return the tallest frame height across all directions."""
        return max((d.max_frame_height for d in self.directions), default=0)


@dataclass(frozen=True)
class FrameLayout:
    """Absolute frame placements of one direction and the canvas they need.

    Attributes:
        placements: Top-left ``(x, y)`` of every frame, in frame order.
        width: Width of the tightest canvas holding all frames.
        height: Height of the tightest canvas holding all frames.
    """

    placements: tuple[tuple[int, int], ...]
    width: int
    height: int


@dataclass(frozen=True)
class PackedLayout:
    """Geometry of the six-direction packed composite.

    Attributes:
        width: Composite canvas width.
        height: Composite canvas height.
        center_x: X coordinate of the gap between the two columns.
        spacing: Pixels between columns and between rows.
        origins: Top-left of every direction's own canvas, by direction slot.
    """

    width: int
    height: int
    center_x: int
    spacing: int
    origins: tuple[tuple[int, int], ...]


@dataclass(frozen=True)
class ImageData:
    """Reference to an image file with metadata."""

    path: Path
    width: int
    height: int
    format: str
    frame_count: int = 1


@dataclass(frozen=True)
class ConversionResult:
    """Result of an FRM to PNG conversion."""

    images: tuple[ImageData, ...]
    generator: str
    directions: int
    frames_per_direction: int

    @property
    def count(self) -> int:
        """Return the number of written image files."""
        return len(self.images)


@dataclass(frozen=True)
class FrmInfo:
    """Summary of an ``.frm`` file header and frame sizes."""

    path: Path
    version: int
    frames_per_second: int
    action_frame: int
    directions: int
    frames_per_direction: int
    max_frame_width: int
    max_frame_height: int
    direction_names: tuple[str, ...] = field(default_factory=tuple)
