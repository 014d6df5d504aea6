"""Models package for fsdb."""

from fsdb.models.base import Base
from fsdb.models.file import FileRecord

__all__ = [
    "Base",
    "FileRecord",
]
