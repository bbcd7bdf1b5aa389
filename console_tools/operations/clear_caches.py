"""Clear every cache store of the application in one go."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from console_tools.config import CACHE_STORES
from console_tools.core.caches import CacheRegistry

logger = logging.getLogger(__name__)


class CacheClearer:
    """Clears the application, route, config, view and event caches in order.

    Each store is independent; a failure leaves the stores cleared so far
    cleared.
    """

    def __init__(self, registry: CacheRegistry):
        self.registry = registry
        self._progress_callback: Optional[Callable[[str], None]] = None

    def set_progress_callback(self, callback: Callable[[str], None]) -> None:
        """Set a callback for progress updates.

        Args:
            callback: Function(label) called before each store is cleared
        """
        self._progress_callback = callback

    def clear_all(self) -> List[str]:
        """Clear all stores and return their names in clearing order."""
        cleared = []
        for name, label in CACHE_STORES:
            if self._progress_callback:
                self._progress_callback(label)
            self.registry.clear(name)
            cleared.append(name)
        logger.info("All caches cleared")
        return cleared
