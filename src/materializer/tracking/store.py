"""JSON-backed tracking map of components placed in a workspace."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, replace
from pathlib import Path

from materializer.model import ComponentId, Origin
from materializer.tracking.models import TrackingRecord

TRACKING_SCHEMA_VERSION = 1
TRACKING_FILE_NAME = "tracking.json"


@dataclass(slots=True, frozen=True)
class TrackingSchemaUnsupportedError(Exception):
    """Raised when a stored tracking map does not match the supported schema."""

    found: int
    expected: int


class TrackingMap:
    """Persistent identity -> placement mapping.

    AUTHORED and IMPORTED components are version-singletons and are keyed by
    their identity without version. NESTED components are keyed by the exact
    identity, so several versions of the same dependency can coexist. Records
    are only ever added or updated here, never removed.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._lock = threading.RLock()
        self._components: dict[str, TrackingRecord] = {}
        self._nested: dict[str, TrackingRecord] = {}
        self._edges: dict[str, set[str]] = {}

    @property
    def path(self) -> Path | None:
        return self._path

    @classmethod
    def load(cls, path: Path) -> TrackingMap:
        """Load a tracking map from disk, or start an empty one bound to ``path``."""
        tracking_map = cls(path)
        if not path.exists():
            return tracking_map
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise TrackingSchemaUnsupportedError(found=-1, expected=TRACKING_SCHEMA_VERSION)
        schema = payload.get("schema_version")
        if not isinstance(schema, int):
            raise TrackingSchemaUnsupportedError(found=-1, expected=TRACKING_SCHEMA_VERSION)
        if schema != TRACKING_SCHEMA_VERSION:
            raise TrackingSchemaUnsupportedError(found=schema, expected=TRACKING_SCHEMA_VERSION)

        components = payload.get("components", [])
        if isinstance(components, list):
            for obj in components:
                record = _record_from_dict(obj)
                if record is not None:
                    tracking_map._store(record)
        edges = payload.get("edges", {})
        if isinstance(edges, dict):
            for parent, children in edges.items():
                if not isinstance(parent, str) or not isinstance(children, list):
                    continue
                tracking_map._edges[parent] = {c for c in children if isinstance(c, str)}
        return tracking_map

    def save(self, path: Path | None = None) -> Path:
        """Atomically write the map as JSON and return the file path."""
        target = path or self._path
        if target is None:
            raise ValueError("Tracking map has no path to save to.")
        payload = self.to_dict()
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_suffix(target.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, sort_keys=True, indent=2)
            handle.write("\n")
        tmp.replace(target)
        return target

    def to_dict(self) -> dict[str, object]:
        with self._lock:
            records = sorted(
                [*self._components.values(), *self._nested.values()],
                key=lambda record: (str(record.id), str(record.origin)),
            )
            return {
                "schema_version": TRACKING_SCHEMA_VERSION,
                "components": [record.to_dict() for record in records],
                "edges": {
                    parent: sorted(children) for parent, children in sorted(self._edges.items())
                },
            }

    def get_by_identity_ignoring_version(self, component_id: ComponentId) -> TrackingRecord | None:
        """Return the record for ``component_id`` regardless of version.

        Non-NESTED records win; among NESTED records the lexically last
        identity is returned.
        """
        key = component_id.to_string_without_version()
        with self._lock:
            record = self._components.get(key)
            if record is not None:
                return record
            nested = [
                candidate
                for candidate in self._nested.values()
                if candidate.id.to_string_without_version() == key
            ]
        if not nested:
            return None
        return max(nested, key=lambda candidate: str(candidate.id))

    def get_by_identity_exact(self, component_id: ComponentId) -> TrackingRecord | None:
        """Return the record whose identity matches ``component_id`` including version."""
        with self._lock:
            nested = self._nested.get(str(component_id))
            if nested is not None:
                return nested
            record = self._components.get(component_id.to_string_without_version())
        if record is not None and record.id == component_id:
            return record
        return None

    def add_component(
        self,
        component_id: ComponentId,
        origin: Origin,
        root_dir: str | None,
        config_dir: str | None = None,
    ) -> TrackingRecord:
        """Insert or replace the record for a placed component."""
        record = TrackingRecord(
            id=component_id, origin=origin, root_dir=root_dir, config_dir=config_dir
        )
        with self._lock:
            self._store(record)
        return record

    def add_dependency_edge(self, parent_id: ComponentId, child_id: ComponentId) -> None:
        """Record that ``parent_id`` depends on ``child_id``."""
        with self._lock:
            self._edges.setdefault(str(parent_id), set()).add(str(child_id))

    def dependencies_of(self, parent_id: ComponentId) -> tuple[str, ...]:
        """Return sorted dependency identities registered for ``parent_id``."""
        with self._lock:
            return tuple(sorted(self._edges.get(str(parent_id), set())))

    def dependents_of(self, child_id: ComponentId) -> tuple[str, ...]:
        """Return sorted parents that registered an edge to ``child_id``."""
        child = str(child_id)
        with self._lock:
            parents = [parent for parent, children in self._edges.items() if child in children]
        return tuple(sorted(parents))

    def update_root_dir(self, component_id: ComponentId, root_dir: str | None) -> TrackingRecord:
        """Point an existing record at a new root directory."""
        with self._lock:
            record = self.get_by_identity_exact(component_id)
            if record is None:
                record = self.get_by_identity_ignoring_version(component_id)
            if record is None:
                raise KeyError(str(component_id))
            updated = replace(record, root_dir=root_dir)
            self._store(updated)
        return updated

    def records(self) -> tuple[TrackingRecord, ...]:
        """Return all records in deterministic order."""
        with self._lock:
            records = [*self._components.values(), *self._nested.values()]
        return tuple(sorted(records, key=lambda record: (str(record.id), str(record.origin))))

    def _store(self, record: TrackingRecord) -> None:
        if record.origin == Origin.NESTED:
            self._nested[str(record.id)] = record
        else:
            self._components[record.id.to_string_without_version()] = record


def _record_from_dict(obj: object) -> TrackingRecord | None:
    if not isinstance(obj, dict):
        return None
    raw_id = obj.get("id")
    raw_origin = obj.get("origin")
    root_dir = obj.get("root_dir")
    config_dir = obj.get("config_dir")
    if not isinstance(raw_id, str):
        return None
    if raw_origin not in {origin.value for origin in Origin}:
        return None
    if root_dir is not None and not isinstance(root_dir, str):
        return None
    if config_dir is not None and not isinstance(config_dir, str):
        return None
    try:
        component_id = ComponentId.parse(raw_id)
    except ValueError:
        return None
    return TrackingRecord(
        id=component_id,
        origin=Origin(raw_origin),
        root_dir=root_dir,
        config_dir=config_dir,
    )
