"""Ignore rules shared by the directory scanner and the watcher."""

import fnmatch
import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Set

if TYPE_CHECKING:
    from fsdb.config import SyncConfig


def is_hidden(relative_path: Path) -> bool:
    """True if any component of the path starts with a dot."""
    return any(part.startswith(".") for part in relative_path.parts)


def matches_pattern(relative_path: Path, pattern: str) -> bool:
    """Check a root-relative path against one gitignore-style pattern.

    Supported forms:
        /name, /dir/   anchored at the watch root
        dir/           directory name anywhere in the path
        name           exact path component anywhere in the path
        *.tmp          glob against the relative path or the file name
    """
    relative_posix = relative_path.as_posix()

    # Handle patterns starting with / (root relative)
    if pattern.startswith("/"):
        root_pattern = pattern[1:]
        if root_pattern.endswith("/"):
            dir_name = root_pattern[:-1]
            return len(relative_path.parts) > 0 and relative_path.parts[0] == dir_name
        return fnmatch.fnmatch(relative_posix, root_pattern)

    # Handle directory patterns (ending with /)
    if pattern.endswith("/"):
        return pattern[:-1] in relative_path.parts

    # Direct name match (e.g., "node_modules")
    if pattern in relative_path.parts:
        return True

    return fnmatch.fnmatch(relative_posix, pattern) or fnmatch.fnmatch(relative_path.name, pattern)


class IgnoreRules:
    """Decides which paths under a root are excluded from syncing.

    Hidden files and directories are excluded by default. ``excluded`` lists
    exact paths that are always skipped, wherever they are.
    """

    def __init__(
        self,
        root: Path,
        ignore_hidden: bool = True,
        patterns: Iterable[str] = (),
        excluded: Iterable[str | Path] = (),
    ):
        self.root = Path(root)
        self.ignore_hidden = ignore_hidden
        self.patterns: Set[str] = {p.strip() for p in patterns if p.strip()}
        self.excluded: Set[str] = {os.path.normpath(str(p)) for p in excluded}

    @classmethod
    def from_config(cls, config: "SyncConfig") -> "IgnoreRules":
        """Rules for a config, excluding the database and the other files fsdb writes."""
        return cls(
            config.watch_folder,
            ignore_hidden=config.ignore_hidden,
            patterns=config.ignore_patterns,
            excluded=config.internal_paths,
        )

    def __call__(self, path: str | Path) -> bool:
        return self.should_ignore(path)

    def should_ignore(self, path: str | Path) -> bool:
        """Check if a path should be ignored.

        Apart from excluded paths, paths outside the root are never ignored
        here; callers decide what to do with them.
        """
        if os.path.normpath(str(path)) in self.excluded:
            return True

        try:
            relative_path = Path(path).relative_to(self.root)
        except ValueError:
            return False

        if not relative_path.parts:
            return False

        if self.ignore_hidden and is_hidden(relative_path):
            return True

        return any(matches_pattern(relative_path, pattern) for pattern in self.patterns)

    def __repr__(self) -> str:
        return f"IgnoreRules(root='{self.root}', ignore_hidden={self.ignore_hidden}, patterns={sorted(self.patterns)})"
