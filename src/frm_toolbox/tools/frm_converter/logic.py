"""FRM to PNG conversion logic — no CLI imports allowed."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import assert_never

from frm_toolbox.core.datatypes import ConversionResult, FrmFile, ImageData
from frm_toolbox.core.events import EventBus
from frm_toolbox.core.exceptions import ValidationError
from frm_toolbox.tools.frm_converter._apng import write_animation, write_png
from frm_toolbox.tools.frm_converter._frm import read_frm
from frm_toolbox.tools.frm_converter._pal import MAX_MULTIPLIER, MIN_MULTIPLIER, Palette, read_pal
from frm_toolbox.tools.frm_converter.layout import (
    DEFAULT_SPACING,
    Generator,
    compose_anim,
    compose_anim_packed,
    compose_legacy,
)

logger = logging.getLogger(__name__)

_TOOL = "frm_converter"


# ── Validation ────────────────────────────────────────────────────────────


def validate_convert_params(
    *,
    generator: str,
    rgb_multiplier: int,
    spacing: int,
) -> Generator:
    """Validate conversion parameters and resolve the generator.

    Args:
        generator: Generator name (``legacy``, ``anim`` or ``anim-packed``).
        rgb_multiplier: Palette brightness multiplier.
        spacing: Gap in pixels used by the packed layout.

    Returns:
        The matching ``Generator`` member.

    Raises:
        ValidationError: If any parameter is out of range or unknown.
    """
    try:
        resolved = Generator(generator)
    except ValueError as exc:
        msg = f"Generator must be one of {[g.value for g in Generator]}, got '{generator}'"
        raise ValidationError(msg) from exc

    if not MIN_MULTIPLIER <= rgb_multiplier <= MAX_MULTIPLIER:
        msg = f"RGB multiplier must be between {MIN_MULTIPLIER} and {MAX_MULTIPLIER}, got {rgb_multiplier}"
        raise ValidationError(msg)

    if spacing < 0:
        msg = f"Spacing must be >= 0, got {spacing}"
        raise ValidationError(msg)

    return resolved


def direction_output_path(output_path: Path, position: int) -> Path:
    """Return ``<stem>_<position><suffix>`` next to *output_path*."""
    return output_path.with_name(f"{output_path.stem}_{position}{output_path.suffix}")


# ── Core logic ────────────────────────────────────────────────────────────


def render_frm(
    frm: FrmFile,
    palette: Palette,
    output_path: Path,
    generator: Generator,
    *,
    spacing: int = DEFAULT_SPACING,
    event_bus: EventBus | None = None,
) -> tuple[ImageData, ...]:
    """Render an already loaded sprite with the chosen generator.

    Args:
        frm: The sprite to render.
        palette: Palette with the brightness multiplier already applied.
        output_path: Output file; ``anim`` adds ``_<n>`` per direction.
        generator: Output strategy.
        spacing: Gap used by ``anim-packed``.
        event_bus: Optional event bus for progress events.

    Returns:
        The written images, in order.
    """
    images: list[ImageData] = []

    def _written(image: ImageData, total: int) -> None:
        images.append(image)
        if event_bus is not None:
            event_bus.progress(
                _TOOL,
                len(images),
                total,
                f"Wrote {image.path.name} ({image.width}x{image.height}, {image.frame_count} frames)",
            )

    match generator:
        case Generator.LEGACY:
            _written(write_png(compose_legacy(frm, palette), output_path), 1)
        case Generator.ANIM:
            animations = compose_anim(frm, palette)
            for position, animation in enumerate(animations):
                path = direction_output_path(output_path, position)
                _written(write_animation(animation, path), len(animations))
        case Generator.ANIM_PACKED:
            animation = compose_anim_packed(frm, palette, spacing=spacing)
            _written(write_animation(animation, output_path), 1)
        case _:  # pragma: no cover
            assert_never(generator)

    return tuple(images)


def convert_frm(
    frm_path: Path,
    output_path: Path,
    *,
    palette_path: Path,
    generator: str = Generator.LEGACY,
    rgb_multiplier: int = MAX_MULTIPLIER,
    spacing: int = DEFAULT_SPACING,
    event_bus: EventBus | None = None,
) -> ConversionResult:
    """Convert an ``.frm`` sprite into PNG / APNG files.

    Args:
        frm_path: Path to the source sprite.
        output_path: Path of the PNG to write (see ``render_frm`` for naming).
        palette_path: Path to the ``.pal`` palette.
        generator: Generator name.
        rgb_multiplier: Palette brightness multiplier (1..4).
        spacing: Gap used by ``anim-packed``.
        event_bus: Optional event bus for progress events.

    Returns:
        A ``ConversionResult`` listing the written images.

    Raises:
        ValidationError: If parameters are invalid.
        ToolError: If an input cannot be read or an output cannot be written.
        FormatError: If the sprite or palette is malformed.
        InvalidDirectionCountError: For ``anim-packed`` without six directions.
    """
    resolved = validate_convert_params(generator=generator, rgb_multiplier=rgb_multiplier, spacing=spacing)

    frm = read_frm(frm_path)
    palette = read_pal(palette_path).with_multiplier(rgb_multiplier)

    logger.info(
        "Converting %s with generator '%s' (%d directions x %d frames)",
        frm_path.name,
        resolved.value,
        len(frm.directions),
        frm.frames_per_direction,
    )

    images = render_frm(frm, palette, output_path, resolved, spacing=spacing, event_bus=event_bus)

    if event_bus is not None:
        event_bus.completed(_TOOL, f"{frm_path.name} converted into {len(images)} file(s)")

    return ConversionResult(
        images=images,
        generator=resolved.value,
        directions=len(frm.directions),
        frames_per_direction=frm.frames_per_direction,
    )
