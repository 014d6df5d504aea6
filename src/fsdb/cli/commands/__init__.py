"""CLI commands for fsdb."""

from . import status, sync, watch

__all__ = ["status", "sync", "watch"]
