"""Types and utilities for file sync."""

from dataclasses import dataclass, field
from typing import Dict, Set

from fsdb.file_utils import FileSnapshot


@dataclass
class SyncReport:
    """Report of file changes found compared to database state.

    Attributes:
        total: Number of files found on disk
        new: Files that exist on disk but not in database
        modified: Files that exist in both but differ in size, mtime or checksum
        deleted: Files that exist in database but not on disk
        snapshots: Fresh snapshots for new and modified files
    """

    total: int = 0
    new: Set[str] = field(default_factory=set)
    modified: Set[str] = field(default_factory=set)
    deleted: Set[str] = field(default_factory=set)
    snapshots: Dict[str, FileSnapshot] = field(default_factory=dict)

    @property
    def checksums(self) -> Dict[str, str]:
        """Current checksums for new and modified files."""
        return {path: snapshot.checksum for path, snapshot in self.snapshots.items()}

    @property
    def total_changes(self) -> int:
        """Total number of files that need attention."""
        return len(self.new) + len(self.modified) + len(self.deleted)
