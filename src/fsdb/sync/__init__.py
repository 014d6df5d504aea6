from .events import ChangeNotifier
from .sync_service import SyncService
from .utils import SyncReport
from .watch_service import WatchService

__all__ = ["ChangeNotifier", "SyncReport", "SyncService", "WatchService"]
