"""High-level workflow orchestration for submitting a workspace."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from kelvin_submit.archive import build_archive
from kelvin_submit.configs import SubmitConfig
from kelvin_submit.errors import BrowserError
from kelvin_submit.submission import submit
from kelvin_submit.types import SubmitAccepted, SubmitResult
from kelvin_submit.workspace import locate_workspace_root

logger = logging.getLogger(__name__)

# "open -W" and "start /WAIT" block until the browser exits; xdg-open returns once it is launched
_WAIT_FOR_LAUNCHER = sys.platform not in ("darwin", "win32", "cygwin")


def open_in_browser(url: str) -> None:
    """Open ``url`` in the default browser.

    Raises:
        BrowserError: If no browser could be launched.
    """
    try:
        return_code = click.launch(url, wait=_WAIT_FOR_LAUNCHER)
    except OSError as e:
        raise BrowserError("opening browser") from e
    if return_code != 0:
        raise BrowserError("opening browser") from RuntimeError(f"launcher exited with {return_code}")


def run(config: SubmitConfig, root: Path | None = None) -> SubmitResult:
    """Main workflow function.

    Locates the workspace, compresses it, uploads it to Kelvin and opens the
    created submit in a browser.

    Args:
        config: Submit options.
        root: Workspace root; looked up through cargo when not given.

    Returns:
        Result of the submit.

    Raises:
        KelvinError: If any step fails fatally. A rejected submit is not an error.
    """
    if root is None:
        root = locate_workspace_root()
    logger.debug("Workspace root: %s", root)

    archive = build_archive(root)

    result = submit(archive, config.assignment_id, config.token, config.kelvin_url)

    # A browser failure is fatal even though Kelvin already holds the submit
    if isinstance(result, SubmitAccepted) and not config.no_open:
        open_in_browser(result.url)

    return result
