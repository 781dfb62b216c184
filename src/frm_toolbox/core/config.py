"""ConfigManager — global and per-tool settings backed by TOML files."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from frm_toolbox.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "frm-toolbox"

# Built-in values used when neither the global nor the tool file sets a key.
DEFAULTS: dict[str, Any] = {
    "generator": "legacy",
    "rgb_multiplier": 4,
    "spacing": 4,
    "palette": None,
}


class ConfigManager:
    """Hierarchical configuration: built-in defaults < global file < tool file.

    Layout of ``config_dir``::

        config.toml              global settings
        tools/<tool name>.toml   per-tool overrides

    Args:
        config_dir: Root directory for configuration files.
                    Defaults to ``~/.config/frm-toolbox/``.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialise the config manager.

        Args:
            config_dir: Custom configuration directory.  Uses the
                        platform default if ``None``.
        """
        self._config_dir = config_dir or _DEFAULT_CONFIG_DIR
        self._global: dict[str, Any] = {}
        self._per_tool: dict[str, dict[str, Any]] = {}

    @property
    def config_dir(self) -> Path:
        """Return the configuration directory path."""
        return self._config_dir

    def load(self) -> None:
        """Load global and per-tool config from ``config_dir``.

        Missing files are silently skipped.

        Raises:
            ValidationError: If a file exists but is not valid TOML.
        """
        global_file = self._config_dir / "config.toml"
        if global_file.is_file():
            self._global = self._read_toml(global_file)
            logger.info("Loaded global config from %s", global_file)

        tools_dir = self._config_dir / "tools"
        if tools_dir.is_dir():
            for toml_file in sorted(tools_dir.glob("*.toml")):
                self._per_tool[toml_file.stem] = self._read_toml(toml_file)
                logger.info("Loaded config for tool '%s'", toml_file.stem)

    def get(self, key: str, *, tool: str | None = None, default: Any = None) -> Any:
        """Retrieve a config value with optional tool-level override.

        Args:
            key: The configuration key.
            tool: If given, check the tool-specific config first.
            default: Fallback when the key is set nowhere, including ``DEFAULTS``.

        Returns:
            The configuration value, or *default*.
        """
        if tool and tool in self._per_tool:
            value = self._per_tool[tool].get(key)
            if value is not None:
                return value
        value = self._global.get(key)
        if value is not None:
            return value
        builtin = DEFAULTS.get(key)
        return default if builtin is None else builtin

    def get_int(self, key: str, *, tool: str | None = None, default: int = 0) -> int:
        """Retrieve an integer setting.

        Raises:
            ValidationError: If the stored value is not an integer.
        """
        value = self.get(key, tool=tool, default=default)
        if isinstance(value, bool) or not isinstance(value, int):
            msg = f"Config key '{key}' must be an integer, got {value!r}"
            raise ValidationError(msg)
        return value

    def get_path(self, key: str, *, tool: str | None = None) -> Path | None:
        """Retrieve a path setting, expanding ``~``; ``None`` when unset."""
        value = self.get(key, tool=tool)
        if value is None:
            return None
        return Path(str(value)).expanduser()

    @staticmethod
    def _read_toml(path: Path) -> dict[str, Any]:
        with path.open("rb") as fh:
            try:
                return tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Config file '{path}' is not valid TOML"
                raise ValidationError(msg) from exc
