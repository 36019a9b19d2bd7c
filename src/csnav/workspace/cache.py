"""Process-wide workspace cache keyed by absolute solution path."""

import logging
import os
import threading
from typing import Callable, Dict, Optional

from ..config import Config
from .loader import load_workspace
from .models import Workspace

logger = logging.getLogger(__name__)

WorkspaceLoader = Callable[[str, Config], Workspace]


class WorkspaceCache:
    """Loads each workspace once and hands the same instance back afterwards.

    The check-load-install sequence runs under a lock with a second check
    after acquisition, so two queries racing on a cold path load it once.
    """

    def __init__(self, config: Optional[Config] = None, loader: Optional[WorkspaceLoader] = None):
        self.config = config or Config.from_env()
        self._loader = loader or load_workspace
        self._workspaces: Dict[str, Workspace] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(path: str) -> str:
        return os.path.normcase(os.path.abspath(path))

    def get(self, path: str) -> Workspace:
        """Return the cached workspace for path, loading it on first access.

        Raises:
            WorkspaceLoadError: If the loader cannot load the path
        """
        key = self._key(path)
        cached = self._workspaces.get(key)
        if cached is not None:
            logger.debug("Workspace cache hit: %s", key)
            return cached

        with self._lock:
            # Another thread may have finished loading while we waited
            cached = self._workspaces.get(key)
            if cached is not None:
                logger.debug("Workspace cache hit after lock: %s", key)
                return cached
            workspace = self._loader(os.path.abspath(path), self.config)
            self._workspaces[key] = workspace
            return workspace

    def invalidate(self, path: str) -> bool:
        """Drop one workspace. Returns True if it was cached."""
        with self._lock:
            return self._workspaces.pop(self._key(path), None) is not None

    def clear(self) -> None:
        with self._lock:
            self._workspaces.clear()

    def __contains__(self, path: str) -> bool:
        return self._key(path) in self._workspaces

    def __len__(self) -> int:
        return len(self._workspaces)
