"""Shared fixtures for the FRM converter tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from frm_toolbox.core.datatypes import Direction, Frame, FrmFile
from frm_toolbox.tools.frm_converter._frm import build_frm
from frm_toolbox.tools.frm_converter._pal import Palette, parse_pal

FrameSpec = tuple[int, int, int, int]  # width, height, offset_x, offset_y


def _make_frame(
    width: int,
    height: int,
    offset_x: int = 0,
    offset_y: int = 0,
    *,
    fill: int = 1,
    index: int = 0,
) -> Frame:
    return Frame(
        width=width,
        height=height,
        offset_x=offset_x,
        offset_y=offset_y,
        pixels=bytes([fill]) * (width * height),
        index=index,
    )


def _make_direction(specs: Sequence[FrameSpec], *, slot: int = 0) -> Direction:
    # Frame i of slot s is filled with palette index 10*s + i + 1.
    frames = tuple(
        _make_frame(w, h, ox, oy, fill=10 * slot + i + 1, index=i) for i, (w, h, ox, oy) in enumerate(specs)
    )
    return Direction(frames=frames, index=slot)


def _make_frm(directions: Sequence[Sequence[FrameSpec]], *, fps: int = 10) -> FrmFile:
    return FrmFile(
        directions=tuple(_make_direction(specs, slot=slot) for slot, specs in enumerate(directions)),
        frames_per_direction=len(directions[0]) if directions else 0,
        frames_per_second=fps,
    )


def palette_bytes() -> bytes:
    """Return a 768-byte palette whose entries are all distinct 6-bit colours."""
    data = bytearray()
    for i in range(256):
        data += bytes([i % 64, (i // 4) % 64, 63 - i % 64])
    return bytes(data)


# ── Builders ──────────────────────────────────────────────────────────────


@pytest.fixture()
def make_frame() -> Callable[..., Frame]:
    """Factory: ``make_frame(w, h, ox=0, oy=0, fill=1, index=0)``."""
    return _make_frame


@pytest.fixture()
def make_direction() -> Callable[..., Direction]:
    """Factory: ``make_direction([(w, h, ox, oy), ...], slot=0)``."""
    return _make_direction


@pytest.fixture()
def make_frm() -> Callable[..., FrmFile]:
    """Factory: ``make_frm([[(w, h, ox, oy), ...], ...], fps=10)``, one list per direction."""
    return _make_frm


@pytest.fixture()
def six_squares() -> list[list[FrameSpec]]:
    """Six directions of two 10x10 frames, the second moved 2px right."""
    return [[(10, 10, 0, 0), (10, 10, 2, 0)] for _ in range(6)]


# ── Files ─────────────────────────────────────────────────────────────────


@pytest.fixture()
def palette() -> Palette:
    """An unscaled palette with distinct colours per index."""
    return parse_pal(palette_bytes())


@pytest.fixture()
def pal_file(tmp_path: Path) -> Path:
    """Write the test palette to disk."""
    path = tmp_path / "color.pal"
    path.write_bytes(palette_bytes())
    return path


@pytest.fixture()
def write_frm(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing ``make_frm``-style sprites to ``tmp_path``."""

    def _write(directions: Sequence[Sequence[FrameSpec]], *, name: str = "critter.frm", fps: int = 10) -> Path:
        path = tmp_path / name
        path.write_bytes(build_frm(_make_frm(directions, fps=fps)))
        return path

    return _write
