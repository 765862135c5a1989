"""Recursive directory walker with ignore-file support."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from kelvin_submit.ignore_rules import IgnoreRules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalkEntry:
    """A visited path, or a traversal error attached to a path."""

    path: Path
    is_dir: bool = False
    error: OSError | None = None


def _accept_all(path: Path, is_dir: bool) -> bool:
    return True


def _device_of(path: Path) -> int:
    """Device number of ``path`` itself, without following a final symlink."""
    return os.lstat(path).st_dev


@dataclass
class Walker:
    """Depth-first walk of ``root`` yielding :class:`WalkEntry` objects.

    The root itself is yielded first. Directory entries are visited in name
    order. Hidden entries and entries matched by ignore files are skipped.
    Symbolic links to directories are not followed.

    Attributes:
        root: Directory to walk.
        max_filesize: Files larger than this many bytes are skipped.
        same_file_system: Do not enter directories on another device than ``root``.
        filter_entry: Predicate ``(path, is_dir)``; rejected entries are neither
            yielded nor descended into.
    """

    root: Path
    max_filesize: int | None = None
    same_file_system: bool = False
    filter_entry: Callable[[Path, bool], bool] = field(default=_accept_all)

    def __iter__(self) -> Iterator[WalkEntry]:
        try:
            root_dev = self.root.stat().st_dev
        except OSError as e:
            yield WalkEntry(self.root, is_dir=True, error=e)
            return

        yield WalkEntry(self.root, is_dir=True)
        rules = IgnoreRules.for_root(self.root)
        yield from self._walk_dir(self.root, rules, root_dev)

    def _walk_dir(self, directory: Path, rules: IgnoreRules, root_dev: int) -> Iterator[WalkEntry]:
        try:
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as e:
            yield WalkEntry(directory, is_dir=True, error=e)
            return
        rules = rules.descend(directory)

        for child in children:
            path = Path(child.path)
            if child.name.startswith("."):
                continue
            try:
                is_dir = child.is_dir(follow_symlinks=False)
                if is_dir and self.same_file_system and _device_of(path) != root_dev:
                    logger.debug("Not crossing file system boundary at %s", path)
                    continue
                if not is_dir and self.max_filesize is not None and child.stat().st_size > self.max_filesize:
                    logger.debug("Skipping %s, larger than %d bytes", path, self.max_filesize)
                    continue
            except OSError as e:
                yield WalkEntry(path, is_dir=False, error=e)
                continue

            if rules.is_ignored(path, is_dir):
                continue
            if not self.filter_entry(path, is_dir):
                continue

            yield WalkEntry(path, is_dir=is_dir)
            if is_dir:
                yield from self._walk_dir(path, rules, root_dev)
