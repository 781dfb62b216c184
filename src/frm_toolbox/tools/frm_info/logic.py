"""FRM inspection logic — no CLI imports allowed."""

from __future__ import annotations

import logging
from pathlib import Path

from frm_toolbox.core.datatypes import FrmFile, FrmInfo
from frm_toolbox.tools.frm_converter._frm import read_frm

logger = logging.getLogger(__name__)


def summarize_frm(frm: FrmFile, path: Path) -> FrmInfo:
    """Build an ``FrmInfo`` from an already parsed sprite."""
    return FrmInfo(
        path=path,
        version=frm.version,
        frames_per_second=frm.frames_per_second,
        action_frame=frm.action_frame,
        directions=len(frm.directions),
        frames_per_direction=frm.frames_per_direction,
        max_frame_width=frm.max_frame_width,
        max_frame_height=frm.max_frame_height,
        direction_names=tuple(d.name for d in frm.directions),
    )


def describe_frm(path: Path) -> FrmInfo:
    """Read *path* and summarise its header and frame sizes.

    Raises:
        ToolError: If the file cannot be read.
        FormatError: If the file is not a valid sprite.
    """
    return summarize_frm(read_frm(path), path)


def format_info(info: FrmInfo) -> list[str]:
    """Return the human-readable report lines for *info*."""
    return [
        "=== FRM info ===",
        f"Filename ............... {info.path.name}",
        f"Version ................ {info.version}",
        f"Frames per second ...... {info.frames_per_second}",
        f"Action frame ........... {info.action_frame}",
        f"Directions ............. {info.directions} ({', '.join(info.direction_names)})",
        f"Frames per direction ... {info.frames_per_direction}",
        f"Max frame size ......... {info.max_frame_width}x{info.max_frame_height}",
    ]
