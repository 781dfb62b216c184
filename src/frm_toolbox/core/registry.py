"""ToolRegistry — singleton catalogue of the tools shipped under ``frm_toolbox.tools``."""

from __future__ import annotations

import importlib
import logging
import pkgutil
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from frm_toolbox.core.base_tool import BaseTool
    from frm_toolbox.core.events import EventBus

logger = logging.getLogger(__name__)

_TOOLS_PACKAGE = "frm_toolbox.tools"


class ToolRegistry:
    """Singleton holding one instance of every concrete ``BaseTool``.

    ``discover()`` imports ``frm_toolbox.tools.<name>.tool`` for each tool
    sub-package and registers the ``BaseTool`` subclasses defined in that
    module (imported helpers are not registered twice).  The CLI uses the
    registry to list the available tools and their parameters.
    """

    _instance: ToolRegistry | None = None
    _tools: dict[str, BaseTool]

    def __new__(cls) -> ToolRegistry:
        """Return the singleton instance, creating it on first call."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._tools = {}
        return cls._instance

    def discover(self, event_bus: EventBus | None = None) -> None:
        """Import every tool package and register its tools.

        Args:
            event_bus: Shared event bus injected into each tool.
        """
        from frm_toolbox.core.base_tool import BaseTool

        tools_package = importlib.import_module(_TOOLS_PACKAGE)

        for _importer, module_name, is_pkg in pkgutil.iter_modules(tools_package.__path__):
            if not is_pkg:
                continue
            try:
                tool_module = importlib.import_module(f"{_TOOLS_PACKAGE}.{module_name}.tool")
            except ModuleNotFoundError:
                logger.debug("Skipping %s: no tool module", module_name)
                continue

            for attr in vars(tool_module).values():
                if (
                    isinstance(attr, type)
                    and issubclass(attr, BaseTool)
                    and attr is not BaseTool
                    and attr.__module__ == tool_module.__name__
                ):
                    self.register(attr(event_bus=event_bus))

    def register(self, tool: BaseTool) -> None:
        """Add *tool*, replacing any tool registered under the same name."""
        if tool.name in self._tools:
            logger.warning("Tool '%s' registered twice, keeping the last one", tool.name)
        self._tools[tool.name] = tool
        logger.info("Registered tool: %s", tool.name)

    def get(self, name: str) -> BaseTool | None:
        """Look up a tool by its unique slug (e.g. ``"frm_converter"``)."""
        return self._tools.get(name)

    def all_tools(self) -> dict[str, BaseTool]:
        """Return all registered tools by name, sorted by category then name."""
        ordered = sorted(self._tools.values(), key=lambda t: (t.category, t.name))
        return {tool.name: tool for tool in ordered}

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton — intended for testing only."""
        cls._instance = None
