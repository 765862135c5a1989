"""Workspace root lookup through cargo metadata."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

from kelvin_submit.errors import WorkspaceError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "Cargo.toml"
CARGO_METADATA_COMMAND = ["cargo", "metadata", "--format-version", "1", "--no-deps"]


def locate_manifest(cwd: Path | None = None) -> Path:
    """Find the manifest of the cargo workspace containing ``cwd``.

    Args:
        cwd: Directory to run cargo in, the current directory by default.

    Returns:
        Absolute path to the workspace ``Cargo.toml``.

    Raises:
        WorkspaceError: If cargo cannot be run or its output is not usable.
    """
    try:
        completed = subprocess.run(
            CARGO_METADATA_COMMAND,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise WorkspaceError("getting cargo metadata") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise WorkspaceError("getting cargo metadata") from RuntimeError(stderr or f"cargo exited with {e.returncode}")

    try:
        metadata = json.loads(completed.stdout)
        workspace_root = Path(metadata["workspace_root"])
    except (ValueError, KeyError, TypeError) as e:
        raise WorkspaceError("getting cargo metadata") from e

    manifest = workspace_root / MANIFEST_NAME
    logger.debug("Using manifest %s", manifest)
    return manifest


def locate_workspace_root(cwd: Path | None = None) -> Path:
    """Return the directory holding the workspace manifest."""
    return locate_manifest(cwd).parent
