"""Pydantic schemas for records and change notifications."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fsdb.models import FileRecord


class FileAction(str, Enum):
    """Kinds of change published on the notification stream."""

    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"


class FileRecordOut(BaseModel):
    """Read-only view of a stored file record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    file_path: str
    size: int
    modified_time: int
    checksum: str
    created_at: datetime
    updated_at: datetime


class FileEvent(BaseModel):
    """A change applied to the record store."""

    timestamp: datetime = Field(default_factory=datetime.now)
    action: FileAction
    path: str
    record: Optional[FileRecordOut] = None

    @classmethod
    def added(cls, record: FileRecord) -> "FileEvent":
        return cls(
            action=FileAction.ADDED,
            path=record.file_path,
            record=FileRecordOut.model_validate(record),
        )

    @classmethod
    def updated(cls, record: FileRecord) -> "FileEvent":
        return cls(
            action=FileAction.UPDATED,
            path=record.file_path,
            record=FileRecordOut.model_validate(record),
        )

    @classmethod
    def removed(cls, path: str) -> "FileEvent":
        return cls(action=FileAction.REMOVED, path=path)
