"""File model for tracking files in the watched folder."""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, text, Index
from sqlalchemy.orm import Mapped, mapped_column

from fsdb.models.base import Base


class FileRecord(Base):
    """
    Tracks one file in the watched folder.

    The filesystem is the source of truth for what exists right now; this table
    is the durable record between runs. One row per absolute file path.
    """

    __tablename__ = "files"
    __table_args__ = (Index("idx_modified_time", "modified_time"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Absolute, normalized path
    file_path: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)

    size: Mapped[int] = mapped_column(Integer, nullable=False)
    # Seconds since epoch, truncated
    modified_time: Mapped[int] = mapped_column(Integer, nullable=False)
    checksum: Mapped[str] = mapped_column(String, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"FileRecord(id={self.id}, file_path='{self.file_path}', size={self.size}, modified_time={self.modified_time}, checksum='{self.checksum}')"
