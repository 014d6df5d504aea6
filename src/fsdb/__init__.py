"""fsdb - keep a SQLite table in sync with a folder on the file system"""

__version__ = "0.1.0"
