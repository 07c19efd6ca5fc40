"""Helpers for constructing configuration instances."""

from pathlib import Path
from typing import Any, Mapping, Optional

from react_loop.config import Config


class ConfigProvider:
    """
    Provides configuration instances without import-time side effects.

    Args:
        path: Optional override path for the JSON config file.
        overrides: Field values that take precedence over every source,
            typically command-line options. ``None`` values are ignored.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._path = path
        self._overrides = {
            key: value for key, value in (overrides or {}).items() if value is not None
        }

    def load(self) -> Config:
        """
        Loads and validates configuration, then applies overrides.

        Returns:
            A validated configuration object.
        """
        config = Config.load(self._path)
        if not self._overrides:
            return config
        merged = config.model_dump()
        merged.update(self._overrides)
        return Config.model_validate(merged)
