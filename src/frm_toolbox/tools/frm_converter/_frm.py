"""Parse Fallout ``.frm`` sprite containers.

Header (62 bytes, big-endian)::

    Offset  Size  Field
    0       4     version
    4       2     frames per second
    6       2     action frame
    8       2     frames per direction
    10      12    shift x, 6 x int16 (one per direction)
    22      12    shift y, 6 x int16
    34      24    data offset, 6 x uint32 (relative to the frame area)
    58      4     frame area size
    62      ...   frame area

Frame record (at ``62 + data offset`` for the first frame of a direction,
records of one direction follow each other)::

    width uint16, height uint16, pixel count uint32,
    offset x int16, offset y int16, width*height palette indices

A direction slot whose data offset equals the previous slot's offset
shares its frames and is skipped, so a one-direction sprite (all six
offsets equal) yields a single direction.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path

from frm_toolbox.core.datatypes import DIR_COUNT, Direction, Frame, FrmFile
from frm_toolbox.core.exceptions import FormatError, ToolError

logger = logging.getLogger(__name__)

HEADER_SIZE = 62
_HEADER = struct.Struct(">IHHH6h6h6II")
_FRAME_HEADER = struct.Struct(">HHIhh")

VALID_DIRECTION_COUNTS: frozenset[int] = frozenset({1, DIR_COUNT})


def parse_frm(data: bytes) -> FrmFile:
    """Parse raw ``.frm`` bytes.

    Args:
        data: Raw bytes of the sprite file.

    Returns:
        The parsed ``FrmFile`` with duplicate directions removed.

    Raises:
        FormatError: If the header or any frame record is truncated.
    """
    if len(data) < HEADER_SIZE:
        msg = f"FRM data too short ({len(data)} bytes)"
        raise FormatError(msg)

    fields = _HEADER.unpack_from(data, 0)
    version, fps, action_frame, frames_per_direction = fields[:4]
    shift_x = fields[4:10]
    shift_y = fields[10:16]
    data_offsets = fields[16:22]

    if frames_per_direction == 0:
        msg = "FRM declares zero frames per direction"
        raise FormatError(msg)

    directions: list[Direction] = []
    for slot in range(DIR_COUNT):
        if slot > 0 and data_offsets[slot] == data_offsets[slot - 1]:
            continue
        frames = _parse_frames(data, HEADER_SIZE + data_offsets[slot], frames_per_direction, slot)
        directions.append(
            Direction(
                frames=frames,
                index=slot,
                shift_x=shift_x[slot],
                shift_y=shift_y[slot],
                data_offset=data_offsets[slot],
            )
        )

    if len(directions) not in VALID_DIRECTION_COUNTS:
        logger.warning("FRM has %d distinct directions, expected 1 or 6", len(directions))

    logger.debug(
        "FRM v%d: %d fps, %d frames x %d directions",
        version,
        fps,
        frames_per_direction,
        len(directions),
    )

    return FrmFile(
        directions=tuple(directions),
        frames_per_direction=frames_per_direction,
        frames_per_second=fps,
        action_frame=action_frame,
        version=version,
    )


def _parse_frames(data: bytes, position: int, count: int, slot: int) -> tuple[Frame, ...]:
    frames: list[Frame] = []
    for index in range(count):
        if position + _FRAME_HEADER.size > len(data):
            msg = f"Direction {slot}, frame {index}: header truncated at byte {position}"
            raise FormatError(msg)

        width, height, _pixel_count, offset_x, offset_y = _FRAME_HEADER.unpack_from(data, position)
        position += _FRAME_HEADER.size

        end = position + width * height
        if end > len(data):
            msg = f"Direction {slot}, frame {index}: pixel data truncated ({width}x{height} at byte {position})"
            raise FormatError(msg)

        frames.append(
            Frame(
                width=width,
                height=height,
                offset_x=offset_x,
                offset_y=offset_y,
                pixels=bytes(data[position:end]),
                index=index,
            )
        )
        position = end
    return tuple(frames)


def read_frm(path: Path) -> FrmFile:
    """Read and parse an ``.frm`` file from disk.

    Raises:
        ToolError: If the file cannot be read.
        FormatError: If the content is malformed.
    """
    try:
        data = path.read_bytes()
    except OSError as exc:
        msg = f"FRM file '{path}' could not be read"
        raise ToolError(msg) from exc
    logger.info("Loaded FRM %s (%d bytes)", path, len(data))
    return parse_frm(data)


def build_frm(frm: FrmFile) -> bytes:
    """Serialise an ``FrmFile`` back to ``.frm`` bytes.

    Directions are written in order; when fewer than six are present the
    last one is repeated for the remaining slots, which is how the format
    marks shared directions.
    """
    area = bytearray()
    offsets: list[int] = []
    for direction in frm.directions:
        offsets.append(len(area))
        for frame in direction.frames:
            area += _FRAME_HEADER.pack(
                frame.width, frame.height, frame.width * frame.height, frame.offset_x, frame.offset_y
            )
            area += frame.pixels

    shift_x = [d.shift_x for d in frm.directions]
    shift_y = [d.shift_y for d in frm.directions]
    while len(offsets) < DIR_COUNT:
        offsets.append(offsets[-1] if offsets else 0)
        shift_x.append(shift_x[-1] if shift_x else 0)
        shift_y.append(shift_y[-1] if shift_y else 0)

    header = _HEADER.pack(
        frm.version,
        frm.frames_per_second,
        frm.action_frame,
        frm.frames_per_direction,
        *shift_x[:DIR_COUNT],
        *shift_y[:DIR_COUNT],
        *offsets[:DIR_COUNT],
        len(area),
    )
    return header + bytes(area)
