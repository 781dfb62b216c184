"""FrmInfoTool — BaseTool wrapper for FRM inspection."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from frm_toolbox.core.base_tool import BaseTool, ToolParameter
from frm_toolbox.core.datatypes import FrmInfo
from frm_toolbox.core.events import EventBus
from frm_toolbox.tools.frm_info.logic import describe_frm, format_info


class FrmInfoTool(BaseTool):
    """Report version, frame rate and frame counts of an ``.frm`` sprite."""

    name = "frm_info"
    display_name = "FRM Info"
    description = "Show the header of an .frm sprite"
    version = "0.1.0"
    category = "Sprites"

    def __init__(self, event_bus: EventBus | None = None) -> None:
        """Initialise the info tool.

        Args:
            event_bus: Shared event bus; report lines are emitted as ``log`` events.
        """
        super().__init__(event_bus=event_bus)

    def define_parameters(self) -> list[ToolParameter]:
        """Return the parameter schema for FRM inspection."""
        return [
            ToolParameter(
                name="input",
                label="FRM file",
                type=Path,
                required=True,
                help="Path to the .frm sprite to inspect.",
            ),
        ]

    def _do_execute(self, params: dict[str, Any]) -> FrmInfo:
        info = describe_frm(Path(params["input"]))
        for line in format_info(info):
            self.event_bus.log(self.name, line)
        return info
