"""Process-wide logging setup.

The configuration is built once by the entry point, applied once, and only
read afterwards. The level filter can be overridden through the ``KELVIN_LOG``
environment variable, which takes a comma separated list of ``level`` or
``logger=level`` items, for example::

    KELVIN_LOG=debug
    KELVIN_LOG=warning,kelvin_submit.archive=debug
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

from pydantic import BaseModel, Field, field_validator

from kelvin_submit.errors import ConfigError

LOG_ENV_VAR = "KELVIN_LOG"
LOG_FORMAT = "[%(levelname)s %(name)s] %(message)s"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 1,
}


def parse_level(name: str) -> int:
    """Translate a level name (case-insensitive) into a ``logging`` level.

    Raises:
        ConfigError: If the name is not a known level.
    """
    try:
        return _LEVELS[name.strip().lower()]
    except KeyError:
        raise ConfigError(f"unknown log level '{name}'") from None


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Level of the root logger.
        module_levels: Per-logger level overrides.
    """

    level: int = logging.INFO
    module_levels: dict[str, int] = Field(default_factory=dict)

    @field_validator("level", mode="before")
    @classmethod
    def convert_level(cls, v: object) -> object:
        """Accept level names as well as numeric levels."""
        return parse_level(v) if isinstance(v, str) else v

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LoggingConfig:
        """Build the configuration from the default level and ``KELVIN_LOG``.

        Args:
            environ: Environment to read, ``os.environ`` by default.

        Raises:
            ConfigError: If the variable contains an unknown level.
        """
        environ = os.environ if environ is None else environ
        config = cls()
        spec = environ.get(LOG_ENV_VAR, "")
        for item in spec.split(","):
            item = item.strip()
            if not item:
                continue
            if "=" in item:
                name, level = item.split("=", 1)
                config.module_levels[name.strip()] = parse_level(level)
            else:
                config.level = parse_level(item)
        return config

    def apply(self) -> None:
        """Install a stderr handler on the root logger and set the levels.

        An already configured root handler is kept.
        """
        logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr)
        logging.getLogger().setLevel(self.level)
        for name, level in self.module_levels.items():
            logging.getLogger(name).setLevel(level)
