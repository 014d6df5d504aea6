"""Recursive enumeration of the files under the watch folder."""

import os
from pathlib import Path
from typing import Callable, Optional, Set

from loguru import logger

from fsdb.exceptions import ScanError

IgnoreFilter = Callable[[str], bool]


def _scan(directory: str, ignore: Optional[IgnoreFilter]) -> Set[str]:
    files: Set[str] = set()
    pending = [directory]

    while pending:
        dir_path = pending.pop()
        try:
            with os.scandir(dir_path) as entries:
                for entry in entries:
                    # symlinks are never followed, so link cycles cannot occur
                    if entry.is_symlink():
                        logger.trace(f"Skipping symlink: {entry.path}")
                        continue
                    if ignore is not None and ignore(entry.path):
                        logger.trace(f"Ignoring path: {entry.path}")
                        continue
                    if entry.is_dir(follow_symlinks=False):
                        pending.append(entry.path)
                    elif entry.is_file(follow_symlinks=False):
                        files.add(entry.path)
        except OSError as e:
            logger.error(f"Failed to scan directory {dir_path}: {e}")
            raise ScanError(f"Failed to scan directory {dir_path}: {e}") from e

    return files


async def scan_directory(directory: Path, ignore: Optional[IgnoreFilter] = None) -> Set[str]:
    """
    Return the absolute path of every regular file under ``directory``.

    The scan is all-or-nothing: a partial file set would make the sync delete
    records for files that exist but were not enumerated, so any unreadable
    directory fails the whole scan.

    Args:
        directory: Root directory to scan
        ignore: Optional predicate; matching files and directories are skipped

    Returns:
        Set of absolute file paths, in no particular order

    Raises:
        ScanError: If the root or any subdirectory cannot be read
    """
    root = os.path.normpath(os.path.abspath(directory))
    logger.debug(f"Scanning directory: {root}")
    files = _scan(root, ignore)
    logger.debug(f"Found {len(files)} files in {root}")
    return files
