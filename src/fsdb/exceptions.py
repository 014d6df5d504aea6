from fsdb.file_utils import FileError


class ConfigurationError(Exception):
    """Raised when the watch folder or database path is unusable"""

    pass


class ScanError(FileError):
    """Raised when a directory in the watched tree cannot be read"""

    pass


__all__ = ["ConfigurationError", "FileError", "ScanError"]
