"""Tests for file utilities."""

import hashlib
import os
from pathlib import Path

import pytest

from fsdb.file_utils import (
    FileError,
    FileSnapshot,
    compute_checksum,
    file_snapshot,
    file_stats,
    normalize_path,
)


@pytest.mark.asyncio
async def test_compute_checksum(tmp_path: Path):
    """Checksum is the SHA-256 hex digest of the file contents."""
    test_file = tmp_path / "test.txt"
    test_file.write_bytes(b"test content")

    checksum = await compute_checksum(test_file)

    assert checksum == hashlib.sha256(b"test content").hexdigest()
    assert len(checksum) == 64


@pytest.mark.asyncio
async def test_compute_checksum_content_sensitive(tmp_path: Path):
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    c = tmp_path / "c.txt"
    a.write_bytes(b"AAAAA")
    b.write_bytes(b"AAAAA")
    c.write_bytes(b"BBBBB")

    assert await compute_checksum(a) == await compute_checksum(b)
    assert await compute_checksum(a) != await compute_checksum(c)


@pytest.mark.asyncio
async def test_compute_checksum_empty_file(tmp_path: Path):
    empty = tmp_path / "empty"
    empty.touch()

    assert await compute_checksum(empty) == hashlib.sha256(b"").hexdigest()


@pytest.mark.asyncio
async def test_compute_checksum_large_file(tmp_path: Path):
    """Files larger than one read chunk hash the same as a single read."""
    data = os.urandom(3 * 1024 * 1024 + 17)
    big = tmp_path / "big.bin"
    big.write_bytes(data)

    assert await compute_checksum(big) == hashlib.sha256(data).hexdigest()


@pytest.mark.asyncio
async def test_compute_checksum_missing_file(tmp_path: Path):
    with pytest.raises(FileError):
        await compute_checksum(tmp_path / "missing.txt")


@pytest.mark.asyncio
async def test_compute_checksum_directory(tmp_path: Path):
    with pytest.raises(FileError):
        await compute_checksum(tmp_path)


@pytest.mark.asyncio
async def test_compute_checksum_unreadable_file(tmp_path: Path, monkeypatch):
    test_file = tmp_path / "locked.txt"
    test_file.write_text("secret")

    def deny(*args, **kwargs):
        raise PermissionError(13, "Permission denied", str(test_file))

    monkeypatch.setattr("aiofiles.open", deny)

    with pytest.raises(FileError, match="locked.txt"):
        await compute_checksum(test_file)


@pytest.mark.asyncio
async def test_file_stats_truncates_mtime(tmp_path: Path):
    test_file = tmp_path / "test.txt"
    test_file.write_text("hello")
    os.utime(test_file, (1_700_000_000.9, 1_700_000_000.9))

    size, modified_time = await file_stats(test_file)

    assert size == 5
    assert modified_time == 1_700_000_000
    assert isinstance(modified_time, int)


@pytest.mark.asyncio
async def test_file_stats_missing_file(tmp_path: Path):
    with pytest.raises(FileError):
        await file_stats(tmp_path / "missing.txt")


@pytest.mark.asyncio
async def test_file_snapshot(tmp_path: Path):
    test_file = tmp_path / "sub" / ".." / "test.txt"
    (tmp_path / "sub").mkdir()
    test_file.write_bytes(b"snapshot me")
    os.utime(test_file, (1_600_000_000, 1_600_000_000))

    snapshot = await file_snapshot(test_file)

    assert snapshot == FileSnapshot(
        file_path=str(tmp_path / "test.txt"),
        size=len(b"snapshot me"),
        modified_time=1_600_000_000,
        checksum=hashlib.sha256(b"snapshot me").hexdigest(),
    )


@pytest.mark.asyncio
async def test_file_snapshot_missing_file(tmp_path: Path):
    with pytest.raises(FileError, match="missing.txt"):
        await file_snapshot(tmp_path / "missing.txt")


def test_normalize_path(tmp_path: Path, monkeypatch):
    assert normalize_path(tmp_path / "a" / "." / "b" / ".." / "c.txt") == str(tmp_path / "a" / "c.txt")

    monkeypatch.chdir(tmp_path)
    assert normalize_path("relative.txt") == str(tmp_path.resolve() / "relative.txt")
