"""Named cache stores of the application and how to clear them."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Dict, List

from console_tools.config import CACHE_DIRECTORIES
from console_tools.errors import NotFoundError

logger = logging.getLogger(__name__)

EXTENSION_KEY = "console_caches"


class CacheRegistry:
    """Holds one clear function per named cache store."""

    def __init__(self):
        self._clearers: Dict[str, Callable[[], None]] = {}

    def register(self, name: str, clearer: Callable[[], None]) -> None:
        self._clearers[name] = clearer

    def names(self) -> List[str]:
        return list(self._clearers)

    def clear(self, name: str) -> None:
        """Clear a single cache store.

        Raises:
            NotFoundError: If no store of that name is registered
        """
        clearer = self._clearers.get(name)
        if clearer is None:
            raise NotFoundError(f"Cache store {name} is not registered.")
        clearer()
        logger.info("Cleared cache store: %s", name)


def clear_directory(path: Path) -> None:
    """Remove everything inside *path*, keeping the directory itself."""
    if not path.exists():
        return
    for entry in path.iterdir():
        if entry.is_dir():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def init_caches(app) -> CacheRegistry:
    """Create the cache registry of *app* with its default stores.

    Every store owns a directory under ``<instance>/cache``. The view store
    also drops Jinja's compiled-template cache.
    """
    cache_root = Path(app.config.get("CACHE_ROOT") or Path(app.instance_path) / "cache")
    registry = CacheRegistry()

    def directory_clearer(name: str) -> Callable[[], None]:
        def clear() -> None:
            clear_directory(cache_root / CACHE_DIRECTORIES[name])
        return clear

    def clear_views() -> None:
        if app.jinja_env.cache is not None:
            app.jinja_env.cache.clear()
        clear_directory(cache_root / CACHE_DIRECTORIES["view"])

    for name in CACHE_DIRECTORIES:
        registry.register(name, directory_clearer(name))
    registry.register("view", clear_views)

    app.config["CACHE_ROOT"] = str(cache_root)
    app.extensions[EXTENSION_KEY] = registry
    return registry
