"""Command-line interface for kelvin submit.

Installed as the ``cargo-kelvin`` cargo subcommand, so cargo invokes it as
``cargo-kelvin kelvin submit ...``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from kelvin_submit.configs import DEFAULT_KELVIN_URL, TOKEN_ENV_VAR, build_submit_config, load_config
from kelvin_submit.errors import KelvinError, describe_error
from kelvin_submit.logging_config import LoggingConfig
from kelvin_submit.workflow import run

logger = logging.getLogger(__name__)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="kelvin-submit")
def main() -> None:
    """Cargo subcommand for submitting code to Kelvin."""


@main.group()
def kelvin() -> None:
    """Interact with the Kelvin grading system."""


@kelvin.command()
@click.argument("assignment_id", type=click.IntRange(min=0))
@click.option(
    "--token",
    envvar=TOKEN_ENV_VAR,
    help=f"API token for submitting things to Kelvin. Generate it at {DEFAULT_KELVIN_URL}/api_token.",
)
@click.option("--kelvin-url", default=None, help=f"Base URL of Kelvin [default: {DEFAULT_KELVIN_URL}].")
@click.option("--no-open", is_flag=True, default=False, help="Do not open the browser after uploading the submit.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with defaults for token, kelvin_url and no_open.",
)
def submit(
    assignment_id: int,
    token: str | None,
    kelvin_url: str | None,
    no_open: bool,
    config_path: Path | None,
) -> None:
    """Submit the current workspace to Kelvin.

    ASSIGNMENT_ID can be found in the URL of the task, i.e.
    https://kelvin.cs.vsb.cz/task/<assignment-id>/<your-login>.
    """
    try:
        LoggingConfig.from_env().apply()
        file_config = load_config(config_path) if config_path else None
        config = build_submit_config(assignment_id, token, kelvin_url, no_open, file_config)
        run(config)
    except KelvinError as e:
        logger.debug("Submit failed", exc_info=True)
        raise click.ClickException(describe_error(e)) from e


if __name__ == "__main__":
    main()
