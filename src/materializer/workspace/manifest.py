"""Root package manifest maintenance."""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from pathlib import Path

from materializer.model import PlacementResult
from materializer.workspace.layout import Workspace

PACKAGE_JSON = "package.json"


class WorkspaceManifestWriter:
    """Adds workspace globs and component entries to the root package.json."""

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace
        self._path = workspace.root / PACKAGE_JSON
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def add_workspace_entries(self, paths: Iterable[str]) -> tuple[str, ...]:
        """Merge ``paths`` into the ``workspaces`` array; return the new array."""
        with self._lock:
            payload = self._read()
            existing = payload.get("workspaces", [])
            if not isinstance(existing, list):
                raise ValueError(f"{PACKAGE_JSON} field 'workspaces' must be an array.")
            merged = sorted({*(str(item) for item in existing), *paths})
            payload["workspaces"] = merged
            self._atomic_write(payload)
        return tuple(merged)

    def add_components_to_root(
        self,
        placements: Iterable[PlacementResult],
        *,
        exclude_registry_prefix: bool = False,
    ) -> dict[str, str]:
        """Register placed components as ``file:`` dependencies of the workspace."""
        added: dict[str, str] = {}
        prefix = self._workspace.config.registry_prefix
        for placement in placements:
            if placement.path is None:
                continue
            relative = self._workspace.to_relative(placement.path)
            # components living at the root are the workspace itself
            if relative is None:
                continue
            name = placement.component_id.package_name(prefix, exclude_registry_prefix)
            added[name] = f"file:{relative}"
        if not added:
            return added
        with self._lock:
            payload = self._read()
            dependencies = payload.get("dependencies", {})
            if not isinstance(dependencies, dict):
                raise ValueError(f"{PACKAGE_JSON} field 'dependencies' must be an object.")
            dependencies.update(added)
            payload["dependencies"] = dict(sorted(dependencies.items()))
            self._atomic_write(payload)
        return added

    def _read(self) -> dict[str, object]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValueError(f"{PACKAGE_JSON} must contain a JSON object.")
        return payload

    def _atomic_write(self, payload: dict[str, object]) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
            handle.write("\n")
        tmp.replace(self._path)
