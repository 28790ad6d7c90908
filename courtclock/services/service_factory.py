"""
Service factory for the Courtside Match Clock.

Builds the persistence backend and the session with its dependencies, so the
user interfaces never construct services themselves.
"""
import os
import threading
from typing import Optional

from ..utils.constants import DATA_DIR, STORE_FILENAME
from .match_session import MatchSession
from .persistence_service import JsonFileStore, MemoryStore, PersistenceStore
from .tick_scheduler import TimerBackend


class ServiceFactory:
    """
    Factory for creating the store and session with injected dependencies.

    Args:
        data_dir: Directory holding the store file; None keeps everything
            in memory
    """

    def __init__(self, data_dir: Optional[str] = DATA_DIR):
        self.data_dir = data_dir
        self._store: Optional[PersistenceStore] = None

    def create_store(self) -> PersistenceStore:
        """Get the singleton persistence store."""
        if self._store is None:
            if self.data_dir is None:
                self._store = MemoryStore()
            else:
                self._store = JsonFileStore(os.path.join(self.data_dir, STORE_FILENAME))
        return self._store

    def create_session(
        self,
        timer_backend: Optional[TimerBackend] = None,
        lock: Optional[threading.RLock] = None,
    ) -> MatchSession:
        """
        Create a MatchSession bound to the factory's store.

        Args:
            timer_backend: Tick source for the session's scheduler
            lock: Lock the timer backend runs callbacks under

        Returns:
            Configured MatchSession instance
        """
        return MatchSession(self.create_store(), timer_backend=timer_backend, lock=lock)

    def configure_custom_store(self, store: PersistenceStore) -> None:
        """Use ``store`` instead of the file-backed default."""
        self._store = store
