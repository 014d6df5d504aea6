"""Decide whether a file on disk differs from its stored record."""

from typing import Protocol

from loguru import logger

from fsdb.file_utils import FileError, compute_checksum, file_stats


class StoredFileState(Protocol):
    size: int
    modified_time: int
    checksum: str


async def has_file_changed(file_path: str, record: StoredFileState) -> bool:
    """
    Check if a file has changed compared to its stored record.

    Size and mtime are compared first; the file is only hashed when both
    match, which catches same-length rewrites within the same second.

    A file that cannot be stat'd or read is reported as changed. A false
    positive costs one redundant update, a false negative leaves stale data.
    """
    try:
        size, modified_time = await file_stats(file_path)

        if size != record.size or modified_time != record.modified_time:
            return True

        current_checksum = await compute_checksum(file_path)
        return current_checksum != record.checksum

    except FileError as e:
        logger.warning(f"Failed to check if file changed for {file_path}: {e}")
        return True
