"""Read Fallout ``.pal`` colour palettes.

Layout (only the colour table is used)::

    Offset  Size  Field
    0       768   256 RGB triples, each component 0..63
    768     ...   colour conversion table (ignored)

Index 0 is always fully transparent.  Components are stored with six
bits of precision, so the RGB values are scaled by a multiplier
(4 by default) before being written to a PNG.  Indices 0 and 255, and
the colour-cycling range 229..254 (fire, water, screens), are never
scaled; they keep their stored colour.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from frm_toolbox.core.exceptions import FormatError, ToolError, ValidationError

logger = logging.getLogger(__name__)

PALETTE_SIZE = 256
_TABLE_BYTES = PALETTE_SIZE * 3
_ANIMATED = range(229, 255)
_UNSCALED = (0, *_ANIMATED, 255)

MIN_MULTIPLIER = 1
MAX_MULTIPLIER = 4


class Palette:
    """256-entry RGBA colour lookup table.

    Args:
        table: ``(256, 4)`` uint8 array of RGBA entries.
    """

    def __init__(self, table: np.ndarray) -> None:
        if table.shape != (PALETTE_SIZE, 4):
            msg = f"Palette table must have shape (256, 4), got {table.shape}"
            raise FormatError(msg)
        self._table = table.astype(np.uint8, copy=True)
        self._table.flags.writeable = False

    @property
    def table(self) -> np.ndarray:
        """Read-only ``(256, 4)`` uint8 lookup table, indexable by frame arrays."""
        return self._table

    def __len__(self) -> int:
        return PALETTE_SIZE

    def color(self, index: int) -> tuple[int, int, int, int]:
        """Return the RGBA colour stored at *index*.

        Raises:
            IndexError: If *index* is outside ``0..255``.
        """
        if not 0 <= index < PALETTE_SIZE:
            msg = f"Palette index {index} out of range"
            raise IndexError(msg)
        r, g, b, a = (int(c) for c in self._table[index])
        return (r, g, b, a)

    __getitem__ = color

    def with_multiplier(self, multiplier: int) -> Palette:
        """Return a copy with RGB scaled by *multiplier*, clipped to 255.

        Entries 0, 229..254 and 255 are copied unchanged.

        Args:
            multiplier: Brightness factor in ``1..4``.

        Raises:
            ValidationError: If *multiplier* is out of range.
        """
        if not MIN_MULTIPLIER <= multiplier <= MAX_MULTIPLIER:
            msg = f"RGB multiplier must be between {MIN_MULTIPLIER} and {MAX_MULTIPLIER}, got {multiplier}"
            raise ValidationError(msg)

        scaled = self._table.astype(np.uint16)
        rows = np.ones(PALETTE_SIZE, dtype=bool)
        rows[list(_UNSCALED)] = False
        scaled[rows, :3] *= multiplier

        overflow = int(np.count_nonzero(scaled[:, :3] > 255))
        if overflow:
            logger.debug("Clipped %d palette components above 255", overflow)

        return Palette(np.clip(scaled, 0, 255).astype(np.uint8))


def parse_pal(data: bytes) -> Palette:
    """Parse raw ``.pal`` bytes into an unscaled ``Palette``.

    Args:
        data: Raw file bytes; at least the 768-byte colour table.

    Returns:
        The palette with index 0 transparent and every other entry opaque.

    Raises:
        FormatError: If the data is shorter than the colour table.
    """
    if len(data) < _TABLE_BYTES:
        msg = f"PAL data too short ({len(data)} bytes, need {_TABLE_BYTES})"
        raise FormatError(msg)

    rgb = np.frombuffer(data, dtype=np.uint8, count=_TABLE_BYTES).reshape(PALETTE_SIZE, 3)
    table = np.empty((PALETTE_SIZE, 4), dtype=np.uint8)
    table[:, :3] = rgb
    table[:, 3] = 255
    table[0] = (0, 0, 0, 0)
    return Palette(table)


def read_pal(path: Path) -> Palette:
    """Read and parse a ``.pal`` file from disk.

    Raises:
        ToolError: If the file cannot be read.
        FormatError: If the content is not a palette.
    """
    try:
        data = path.read_bytes()
    except OSError as exc:
        msg = f"Palette '{path}' could not be read"
        raise ToolError(msg) from exc
    logger.info("Loaded palette %s", path)
    return parse_pal(data)
