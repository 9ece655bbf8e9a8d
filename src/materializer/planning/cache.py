"""Run-scoped deduplication of dependency writes."""

from __future__ import annotations

import threading
from pathlib import Path

from materializer.model import ComponentId


class DependencyCache:
    """Maps a dependency identity (version included) to where it is written.

    One instance per run. ``lock`` guards the whole check-decide-claim step of
    dependency placement; it is re-entrant so ``claim`` can be called while
    holding it.
    """

    def __init__(self) -> None:
        self._paths: dict[str, Path] = {}
        self.lock = threading.RLock()

    def get(self, component_id: ComponentId) -> Path | None:
        with self.lock:
            return self._paths.get(str(component_id))

    def claim(self, component_id: ComponentId, path: Path) -> tuple[Path, bool]:
        """Insert ``path`` unless the identity is already claimed.

        Returns the path the identity resolves to and whether this call claimed it.
        """
        key = str(component_id)
        with self.lock:
            existing = self._paths.get(key)
            if existing is not None:
                return existing, False
            self._paths[key] = path
            return path, True

    def __contains__(self, component_id: object) -> bool:
        if not isinstance(component_id, ComponentId):
            return False
        return self.get(component_id) is not None

    def __len__(self) -> int:
        with self.lock:
            return len(self._paths)
