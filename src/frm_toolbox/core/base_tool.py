"""BaseTool ABC — the contract every frm-toolbox tool implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from frm_toolbox.core.events import EventBus
from frm_toolbox.core.exceptions import ValidationError


@dataclass
class ToolParameter:
    """Declarative parameter definition — drives CLI options and validation."""

    name: str
    label: str
    type: type
    default: Any = None
    choices: list[Any] | None = None
    min_value: float | None = None
    max_value: float | None = None
    required: bool = False
    help: str = ""


class BaseTool(ABC):
    """Template Method base for every tool in the toolbox.

    Subclasses provide metadata, the parameter schema and ``_do_execute``;
    callers only use ``run()``.
    """

    # ── metadata (override in subclass) ────────────────────────
    name: str
    display_name: str
    description: str
    version: str = "0.1.0"
    category: str = "Sprites"

    def __init__(self, event_bus: EventBus | None = None) -> None:
        """Initialise the tool with an optional event bus.

        Args:
            event_bus: Event bus for emitting progress and status events.
                       A default bus is created if none is provided.
        """
        self.event_bus = event_bus or EventBus()

    # ── parameter schema ───────────────────────────────────────
    @abstractmethod
    def define_parameters(self) -> list[ToolParameter]:
        """Return the list of parameters this tool accepts."""
        ...

    # ── lifecycle (Template Method skeleton) ───────────────────
    def run(self, params: dict[str, Any]) -> Any:
        """Execute the tool — public entry point, do NOT override.

        Args:
            params: Dictionary of parameter values keyed by parameter name.

        Returns:
            The result produced by the tool's core logic.
        """
        self.validate(params)
        self._pre_execute(params)
        result = self._do_execute(params)
        self._post_execute(result)
        return result

    def validate(self, params: dict[str, Any]) -> None:
        """Validate params against ``define_parameters()``.

        Checks required parameters, ``choices`` membership and the numeric
        ``min_value`` / ``max_value`` bounds.  Override to add tool rules.

        Args:
            params: Parameter dict to validate.

        Raises:
            ValidationError: If any parameter is invalid.
        """
        for param in self.define_parameters():
            value = params.get(param.name)
            if value is None:
                if param.required:
                    msg = f"Parameter '{param.name}' is required"
                    raise ValidationError(msg)
                continue
            if param.choices is not None and value not in param.choices:
                msg = f"Parameter '{param.name}' must be one of {param.choices}, got '{value}'"
                raise ValidationError(msg)
            bounded = param.min_value is not None or param.max_value is not None
            if bounded and (isinstance(value, bool) or not isinstance(value, int | float)):
                msg = f"Parameter '{param.name}' must be a number, got {value!r}"
                raise ValidationError(msg)
            if param.min_value is not None and value < param.min_value:
                msg = f"Parameter '{param.name}' must be >= {param.min_value}, got {value}"
                raise ValidationError(msg)
            if param.max_value is not None and value > param.max_value:
                msg = f"Parameter '{param.name}' must be <= {param.max_value}, got {value}"
                raise ValidationError(msg)

    def _pre_execute(self, params: dict[str, Any]) -> None:  # noqa: B027
        """Hook called before execution (optional override)."""

    @abstractmethod
    def _do_execute(self, params: dict[str, Any]) -> Any:
        """Core logic — MUST override.  Pure computation, no CLI code.

        Args:
            params: Validated parameter dictionary.

        Returns:
            The tool's result.
        """
        ...

    def _post_execute(self, result: Any) -> None:  # noqa: B027
        """Hook called after execution (optional override)."""
