"""Shared fixtures for the FRM info tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from frm_toolbox.core.datatypes import Direction, Frame, FrmFile
from frm_toolbox.tools.frm_converter._frm import build_frm


def _direction(slot: int, sizes: list[tuple[int, int]]) -> Direction:
    frames = tuple(Frame(width=w, height=h, pixels=bytes(w * h), index=i) for i, (w, h) in enumerate(sizes))
    return Direction(frames=frames, index=slot)


@pytest.fixture()
def sprite(tmp_path: Path) -> Path:
    """Write a six-direction, three-frame sprite at 12 fps, action frame 2."""
    frm = FrmFile(
        directions=tuple(_direction(slot, [(10, 20), (14, 18), (12, 22 + slot)]) for slot in range(6)),
        frames_per_direction=3,
        frames_per_second=12,
        action_frame=2,
        version=4,
    )
    path = tmp_path / "hero.frm"
    path.write_bytes(build_frm(frm))
    return path
