"""Workspace archive builder.

Walks the workspace root and compresses the source files of the project into
an in-memory ZIP archive:

- ignore files, hidden entries and other mounts are skipped by the walker;
- files larger than ``MAX_FILE_SIZE`` are skipped;
- only files with an extension from ``INCLUDED_EXTENSIONS`` are archived;
- nothing below the ``target`` build directory is archived.

Problems with a single file are logged and the file is left out. Only the
finalisation of the archive itself can fail the whole operation.
"""

from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Iterator
from pathlib import Path

from kelvin_submit.errors import ArchiveError
from kelvin_submit.walker import Walker

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 1024 * 1024

INCLUDED_EXTENSIONS = frozenset({"toml", "lock", "rs", "md", "txt"})

# Cargo build output
BUILD_DIR = "target"


def should_descend(path: Path) -> bool:
    """Directories are always traversed."""
    return True


def should_include(path: Path) -> bool:
    """Check whether a file belongs into the archive, based on its extension."""
    # Path.suffix is case-sensitive; "Cargo.TOML" is not included
    return path.is_file() and path.suffix[1:] in INCLUDED_EXTENSIONS


def _filter_entry(path: Path, is_dir: bool) -> bool:
    return should_descend(path) if is_dir else should_include(path)


def iter_workspace_files(root: Path) -> Iterator[tuple[str, Path]]:
    """Yield ``(archive name, file path)`` for every file to archive.

    Archive names are relative to ``root`` and use ``/`` as the separator.
    Traversal errors are logged as warnings and skipped.

    Args:
        root: Workspace root directory.
    """
    walker = Walker(
        root,
        max_filesize=MAX_FILE_SIZE,
        same_file_system=True,
        filter_entry=_filter_entry,
    )
    for entry in walker:
        if entry.error is not None:
            logger.warning("Cannot include file %s: %s", entry.path, entry.error)
            continue
        if entry.is_dir or entry.path == root:
            continue
        if not should_include(entry.path):
            continue
        try:
            relative_path = entry.path.relative_to(root)
        except ValueError:
            continue
        if relative_path.parts[0] == BUILD_DIR:
            continue
        yield relative_path.as_posix(), entry.path


def _write_file_to_zip(archive: zipfile.ZipFile, name: str, fs_path: Path) -> None:
    # Fail before touching the archive if the name cannot be stored
    name.encode("utf-8")
    data = fs_path.read_bytes()
    archive.writestr(name, data, compress_type=zipfile.ZIP_DEFLATED)


def _add_workspace_files(archive: zipfile.ZipFile, root: Path) -> int:
    file_count = 0
    for name, fs_path in iter_workspace_files(root):
        try:
            _write_file_to_zip(archive, name, fs_path)
        except (OSError, UnicodeError, ValueError) as e:
            logger.warning("Cannot write file %s to ZIP archive: %s", fs_path, e)
            continue
        logger.debug("Added %s", name)
        file_count += 1
    return file_count


def build_archive(root: Path) -> bytes:
    """Compress the workspace at ``root`` into a ZIP archive held in memory.

    Args:
        root: Workspace root directory.

    Returns:
        Bytes of a complete ZIP archive. The archive is valid even if no file
        was included.

    Raises:
        ArchiveError: If the archive cannot be finalised.
    """
    buffer = io.BytesIO()
    archive = zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED)

    try:
        file_count = _add_workspace_files(archive, root)
    except BaseException:
        archive.close()
        raise

    try:
        archive.close()
    except (OSError, ValueError) as e:
        raise ArchiveError("cannot create ZIP archive") from e

    data = buffer.getvalue()
    logger.info(
        "Compressed %d file%s, total size: %dB",
        file_count,
        "" if file_count == 1 else "s",
        len(data),
    )
    return data
