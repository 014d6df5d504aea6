"""Utilities for file operations."""
import hashlib
import os
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os
from loguru import logger

# Read size for hashing
CHUNK_SIZE = 1024 * 1024


class FileError(Exception):
    """Base exception for file operations."""
    pass


@dataclass(frozen=True)
class FileSnapshot:
    """Point-in-time read of a file's size, modification time and checksum.

    Attributes:
        file_path: Absolute path of the file
        size: Byte length of the file contents
        modified_time: Last modification time in whole seconds since the epoch
        checksum: SHA-256 hex digest of the full contents
    """

    file_path: str
    size: int
    modified_time: int
    checksum: str


def normalize_path(path: str | Path) -> str:
    """Return the absolute, normalized form of ``path`` used as a record key."""
    return os.path.normpath(os.path.abspath(path))


async def compute_checksum(path: str | Path) -> str:
    """
    Compute SHA-256 checksum of a file's full contents.

    Args:
        path: File to hash

    Returns:
        SHA-256 hex digest

    Raises:
        FileError: If the file cannot be read
    """
    try:
        sha256_hash = hashlib.sha256()
        async with aiofiles.open(path, "rb") as f:
            # Read file in chunks to handle large files
            while chunk := await f.read(CHUNK_SIZE):
                sha256_hash.update(chunk)
        return sha256_hash.hexdigest()
    except OSError as e:
        logger.error(f"Failed to calculate checksum for {path}: {e}")
        raise FileError(f"Failed to calculate checksum for {path}: {e}") from e


async def file_stats(path: str | Path) -> tuple[int, int]:
    """
    Read a file's size and modification time.

    Returns:
        Tuple of (size in bytes, mtime truncated to whole seconds)

    Raises:
        FileError: If the file cannot be stat'd
    """
    try:
        stat_info = await aiofiles.os.stat(path)
    except OSError as e:
        raise FileError(f"Failed to stat {path}: {e}") from e
    return stat_info.st_size, int(stat_info.st_mtime)


async def file_snapshot(path: str | Path) -> FileSnapshot:
    """
    Build a snapshot of a file: stat first, then hash.

    The two reads are not atomic. A file modified in between may get a checksum
    that does not match the recorded size/mtime; the next event or scan
    corrects it.

    Raises:
        FileError: If the file is missing or unreadable
    """
    file_path = normalize_path(path)
    try:
        size, modified_time = await file_stats(file_path)
        checksum = await compute_checksum(file_path)
    except FileError as e:
        logger.error(f"Failed to create file record for {file_path}: {e}")
        raise

    return FileSnapshot(
        file_path=file_path,
        size=size,
        modified_time=modified_time,
        checksum=checksum,
    )
