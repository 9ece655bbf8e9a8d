"""Write-unit models flowing through the materialization pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from materializer.model.identity import ComponentId


class Origin(StrEnum):
    """How a component came to live in the workspace."""

    AUTHORED = "AUTHORED"
    IMPORTED = "IMPORTED"
    NESTED = "NESTED"


class PlacementAction(StrEnum):
    """Outcome of a placement decision."""

    WRITTEN = "written"
    REUSED = "reused"
    SKIPPED = "skipped"


@dataclass(slots=True, frozen=True)
class Component:
    """A component to persist: its files, dists and manifest data."""

    id: ComponentId
    files: Mapping[str, str] = field(default_factory=dict)
    dists: Mapping[str, str] = field(default_factory=dict)
    main_file: str | None = None
    package_dependencies: Mapping[str, str] = field(default_factory=dict)
    peer_dependencies: Mapping[str, str] = field(default_factory=dict)
    dependencies: tuple[ComponentId, ...] = ()
    config: Mapping[str, object] = field(default_factory=dict)

    @property
    def scope(self) -> str | None:
        return self.id.scope


@dataclass(slots=True, frozen=True)
class ComponentWithDependencies:
    """A top-level component plus its flattened dependency list."""

    component: Component
    all_dependencies: tuple[Component, ...] = ()


@dataclass(slots=True, frozen=True)
class OriginDecision:
    """Whether a top-level component's dependencies get filesystem copies."""

    component_id: ComponentId
    dependencies_saved_as_components: bool


@dataclass(slots=True, frozen=True)
class PlacementResult:
    """Where one component or dependency ended up, and why."""

    component_id: ComponentId
    path: Path | None
    origin: Origin | None
    action: PlacementAction
    reason: str
    parent_id: ComponentId | None = None


@dataclass(slots=True, frozen=True)
class WrittenComponent:
    """A component whose files are on disk at ``path``."""

    component: Component
    path: Path
    origin: Origin
    files: tuple[str, ...]
    parent_id: ComponentId | None = None

    @property
    def id(self) -> ComponentId:
        return self.component.id
