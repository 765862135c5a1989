"""Ignore-file handling for workspace traversal.

Follows the usual conventions of version-control aware walkers:

- ``.ignore`` files are honoured in every directory;
- ``.gitignore`` files and ``.git/info/exclude`` are honoured only inside a
  git repository, including ``.gitignore`` files of the directories between
  the repository top and the walked root;
- rules of deeper directories take precedence, and inside one file the last
  matching pattern wins (``!pattern`` re-includes).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

GITIGNORE = ".gitignore"
IGNORE = ".ignore"


@dataclass(frozen=True)
class IgnoreFile:
    """Patterns of one ignore file, matched relative to ``base``."""

    base: Path
    spec: pathspec.GitIgnoreSpec

    def match(self, path: Path, is_dir: bool) -> bool | None:
        """Return True if ignored, False if re-included, None if no pattern matched."""
        try:
            relative = path.relative_to(self.base).as_posix()
        except ValueError:
            return None

        result: bool | None = None
        for pattern in self.spec.patterns:
            if pattern.include is None:
                continue
            # "foo/" must match the directory foo, while "foo/**" must not
            candidate = relative + "/" if is_dir and _is_directory_only(pattern) else relative
            if pattern.match_file(candidate) is not None:
                result = pattern.include
        return result


def _is_directory_only(pattern: pathspec.Pattern) -> bool:
    # RegexPattern keeps the source line as .pattern
    return isinstance(pattern.pattern, str) and pattern.pattern.rstrip().endswith("/")


def _read_ignore_file(path: Path, base: Path) -> IgnoreFile | None:
    try:
        if not path.is_file():
            return None
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning("Cannot read ignore file %s: %s", path, e)
        return None
    return IgnoreFile(base=base, spec=pathspec.GitIgnoreSpec.from_lines(lines))


def find_git_top(directory: Path) -> Path | None:
    """Return the closest directory at or above ``directory`` containing ``.git``."""
    for candidate in (directory, *directory.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


class IgnoreRules:
    """Immutable stack of ignore files, shallowest first."""

    def __init__(self, files: tuple[IgnoreFile, ...] = (), use_git: bool = False) -> None:
        self.files = files
        self.use_git = use_git

    @classmethod
    def for_root(cls, root: Path) -> IgnoreRules:
        """Create the rules in effect when entering ``root``.

        Collects ``.git/info/exclude`` and the ``.gitignore`` files of the
        ancestors of ``root`` within its git repository. The ignore files of
        ``root`` itself are added by :meth:`descend`.
        """
        git_top = find_git_top(root)
        if git_top is None:
            return cls()

        files: list[IgnoreFile] = []
        exclude = _read_ignore_file(git_top / ".git" / "info" / "exclude", git_top)
        if exclude is not None:
            files.append(exclude)

        ancestors = [p for p in reversed(root.parents) if p == git_top or git_top in p.parents]
        for ancestor in ancestors:
            ignore_file = _read_ignore_file(ancestor / GITIGNORE, ancestor)
            if ignore_file is not None:
                files.append(ignore_file)
        return cls(tuple(files), use_git=True)

    def descend(self, directory: Path) -> IgnoreRules:
        """Return the rules extended with the ignore files found in ``directory``."""
        added: list[IgnoreFile] = []
        names = (GITIGNORE, IGNORE) if self.use_git else (IGNORE,)
        for name in names:
            ignore_file = _read_ignore_file(directory / name, directory)
            if ignore_file is not None:
                added.append(ignore_file)
        if not added:
            return self
        return IgnoreRules(self.files + tuple(added), use_git=self.use_git)

    def is_ignored(self, path: Path, is_dir: bool) -> bool:
        """Check whether ``path`` is excluded by the deepest matching ignore file."""
        for ignore_file in reversed(self.files):
            result = ignore_file.match(path, is_dir)
            if result is not None:
                return result
        return False
