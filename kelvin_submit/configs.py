"""Configuration models for kelvin submit."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, NonNegativeInt, ValidationError, field_validator

from kelvin_submit.errors import ConfigError

# Default operational settings
DEFAULT_KELVIN_URL: str = "https://kelvin.cs.vsb.cz"
TOKEN_ENV_VAR: str = "KELVIN_API_TOKEN"


def _strip_trailing_slash(v: Any) -> Any:
    return v.rstrip("/") if isinstance(v, str) else v


class FileConfig(BaseModel):
    """Defaults loaded from a YAML configuration file.

    Every field is optional; values given on the command line win.

    Attributes:
        token: Kelvin API token.
        kelvin_url: Base URL of the Kelvin instance.
        no_open: Do not open the browser after a successful submit.
    """

    token: str | None = None
    kelvin_url: str | None = None
    no_open: bool | None = None

    @field_validator("kelvin_url", mode="before")
    @classmethod
    def strip_kelvin_url(cls, v: Any) -> Any:
        """Drop a trailing slash so that API paths can be appended."""
        return _strip_trailing_slash(v)


class SubmitConfig(BaseModel):
    """Everything needed for a single submit run.

    Attributes:
        assignment_id: Assignment into which the code is submitted.
        token: Kelvin API token, sent as a bearer token.
        kelvin_url: Base URL of the Kelvin instance.
        no_open: Do not open the browser after a successful submit.
    """

    assignment_id: NonNegativeInt
    token: str
    kelvin_url: str = DEFAULT_KELVIN_URL
    no_open: bool = False

    @field_validator("token")
    @classmethod
    def check_token(cls, v: str) -> str:
        """Reject empty tokens."""
        if not v.strip():
            raise ValueError("API token must not be empty")
        return v

    @field_validator("kelvin_url", mode="before")
    @classmethod
    def strip_kelvin_url(cls, v: Any) -> Any:
        """Drop a trailing slash so that API paths can be appended."""
        return _strip_trailing_slash(v)


def load_config(path: Path) -> FileConfig:
    """Load YAML configuration and parse into FileConfig model.

    Args:
        path: Path to YAML config.

    Returns:
        Parsed FileConfig object. An empty file yields all defaults.

    Raises:
        ConfigError: If the file is missing, malformed or has invalid structure.
    """
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"reading configuration file {path}") from e

    try:
        return FileConfig.model_validate(yaml_data or {})
    except ValidationError as e:
        raise ConfigError(f"validating configuration file {path}") from e


def build_submit_config(
    assignment_id: int,
    token: str | None,
    kelvin_url: str | None,
    no_open: bool,
    file_config: FileConfig | None = None,
) -> SubmitConfig:
    """Merge command line values with file defaults into a SubmitConfig.

    Args:
        assignment_id: Assignment ID from the command line.
        token: Token from the command line or environment, if any.
        kelvin_url: Kelvin URL from the command line, if any.
        no_open: Whether ``--no-open`` was passed.
        file_config: Optional defaults from a configuration file.

    Returns:
        Validated SubmitConfig.

    Raises:
        ConfigError: If no token is available or a value is invalid.
    """
    file_config = file_config or FileConfig()

    values: dict[str, Any] = {"assignment_id": assignment_id}
    resolved_token = token or file_config.token
    if resolved_token is None:
        raise ConfigError(f"missing API token, pass --token or set {TOKEN_ENV_VAR}")
    values["token"] = resolved_token

    resolved_url = kelvin_url or file_config.kelvin_url
    if resolved_url is not None:
        values["kelvin_url"] = resolved_url
    values["no_open"] = no_open or bool(file_config.no_open)

    try:
        return SubmitConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError("validating submit options") from e
