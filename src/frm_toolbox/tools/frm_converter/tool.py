"""FrmConverterTool — BaseTool wrapper for FRM to PNG conversion."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from frm_toolbox.core.base_tool import BaseTool, ToolParameter
from frm_toolbox.core.config import ConfigManager
from frm_toolbox.core.datatypes import ConversionResult
from frm_toolbox.core.events import EventBus
from frm_toolbox.core.exceptions import ValidationError
from frm_toolbox.tools.frm_converter._pal import MAX_MULTIPLIER, MIN_MULTIPLIER
from frm_toolbox.tools.frm_converter.layout import Generator
from frm_toolbox.tools.frm_converter.logic import convert_frm


class FrmConverterTool(BaseTool):
    """Convert Fallout ``.frm`` sprites into static or animated PNG files.

    Values missing from ``params`` fall back to the ``ConfigManager``
    (``palette``, ``generator``, ``rgb_multiplier``, ``spacing``).
    """

    name = "frm_converter"
    display_name = "FRM Converter"
    description = "Convert .frm sprites to PNG / APNG"
    version = "0.1.0"
    category = "Sprites"

    def __init__(self, event_bus: EventBus | None = None, config: ConfigManager | None = None) -> None:
        """Initialise the converter tool.

        Args:
            event_bus: Shared event bus for progress reporting.
            config: Settings source for defaults; an empty manager if omitted.
        """
        super().__init__(event_bus=event_bus)
        self.config = config or ConfigManager()

    def define_parameters(self) -> list[ToolParameter]:
        """Return the parameter schema for FRM conversion."""
        return [
            ToolParameter(
                name="input",
                label="FRM file",
                type=Path,
                required=True,
                help="Path to the .frm sprite to convert.",
            ),
            ToolParameter(
                name="output",
                label="Output file",
                type=Path,
                default=None,
                help="PNG to write (default: <input stem>.png next to the input).",
            ),
            ToolParameter(
                name="palette",
                label="Palette file",
                type=Path,
                default=None,
                help="Path to the .pal palette (default: 'palette' config key).",
            ),
            ToolParameter(
                name="generator",
                label="Generator",
                type=str,
                default=Generator.LEGACY.value,
                choices=[g.value for g in Generator],
                help="legacy: static grid; anim: APNG per direction; anim-packed: one APNG with all six directions.",
            ),
            ToolParameter(
                name="rgb_multiplier",
                label="RGB multiplier",
                type=int,
                default=MAX_MULTIPLIER,
                min_value=MIN_MULTIPLIER,
                max_value=MAX_MULTIPLIER,
                help="Brightness multiplier applied to the 6-bit palette colours.",
            ),
            ToolParameter(
                name="spacing",
                label="Spacing",
                type=int,
                default=4,
                min_value=0,
                help="Gap in pixels between directions (anim-packed).",
            ),
        ]

    def _resolve(self, params: dict[str, Any]) -> dict[str, Any]:
        resolved = dict(params)
        if resolved.get("generator") is None:
            resolved["generator"] = self.config.get("generator", tool=self.name)
        for key in ("rgb_multiplier", "spacing"):
            if resolved.get(key) is None:
                resolved[key] = self.config.get_int(key, tool=self.name)
        if resolved.get("palette") is None:
            resolved["palette"] = self.config.get_path("palette", tool=self.name)
        return resolved

    def validate(self, params: dict[str, Any]) -> None:
        """Validate parameters after applying configuration defaults.

        Args:
            params: Parameter dict to validate.

        Raises:
            ValidationError: If parameters are invalid or no palette is known.
        """
        resolved = self._resolve(params)
        super().validate(resolved)

        if resolved.get("palette") is None:
            msg = "A palette is required: pass 'palette' or set the 'palette' config key"
            raise ValidationError(msg)

    def _do_execute(self, params: dict[str, Any]) -> ConversionResult:
        """Run the conversion.

        Args:
            params: Validated parameter dictionary.

        Returns:
            A ``ConversionResult`` listing the written images.
        """
        resolved = self._resolve(params)
        frm_path = Path(resolved["input"])

        raw_output: Path | None = resolved.get("output")
        output = frm_path.with_suffix(".png") if raw_output is None else Path(raw_output)

        return convert_frm(
            frm_path,
            output,
            palette_path=Path(resolved["palette"]),
            generator=resolved["generator"],
            rgb_multiplier=resolved["rgb_multiplier"],
            spacing=resolved["spacing"],
            event_bus=self.event_bus,
        )
