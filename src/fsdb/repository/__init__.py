from .file_repository import FileRepository
from .repository import Repository

__all__ = ["FileRepository", "Repository"]
