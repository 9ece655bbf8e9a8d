"""Placement planning for top-level components and their dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from materializer.config import MaterializeOptions
from materializer.model import (
    Component,
    ComponentId,
    ComponentWithDependencies,
    Origin,
    OriginDecision,
    PlacementAction,
    PlacementResult,
)
from materializer.planning.cache import DependencyCache
from materializer.safety import check_target_directory
from materializer.tracking import TrackingMap, TrackingRecord
from materializer.workspace import Workspace


@dataclass(slots=True, frozen=True)
class WritePlan:
    """Everything the component writer needs to place one component."""

    component: Component
    destination: Path
    origin: Origin
    config_dir: str | None = None
    existing_record: TrackingRecord | None = None
    write_dists: bool = False
    write_config: bool = False
    write_package_json: bool = True
    write_bit_dependencies: bool = False
    replace_existing: bool = False
    exclude_registry_prefix: bool = False
    parent_id: ComponentId | None = None


@dataclass(slots=True, frozen=True)
class DependencyResolution:
    """Placement decided for one dependency, plus a plan when it must be written."""

    placement: PlacementResult
    plan: WritePlan | None = None


def plan_component(
    graph: ComponentWithDependencies,
    decision: OriginDecision,
    options: MaterializeOptions,
    workspace: Workspace,
    tracking_map: TrackingMap,
) -> WritePlan:
    """Compute destination, origin and write switches for a top-level component.

    Raises the directory guard errors when the destination is unsafe.
    """
    component = graph.component
    write_to_path = options.resolved_write_to_path()
    destination = write_to_path or workspace.compose_component_path(component.id)

    record: TrackingRecord | None = None
    if options.isolated:
        origin = Origin.AUTHORED
        config_dir = options.config_dir
    else:
        # authored and imported components are version-singletons in the map;
        # a nested record is private to its consumer and leaves this copy untracked
        found = tracking_map.get_by_identity_ignoring_version(component.id)
        if found is not None and found.origin != Origin.NESTED:
            record = found
        origin = (
            Origin.AUTHORED
            if record is not None and record.origin == Origin.AUTHORED
            else Origin.IMPORTED
        )
        config_dir = options.config_dir or (record.config_dir if record is not None else None)

    guard = check_target_directory(
        destination,
        record,
        write_to_path=write_to_path,
        override=options.override,
        workspace=workspace,
    )
    return WritePlan(
        component=component,
        destination=destination,
        origin=origin,
        config_dir=config_dir,
        existing_record=record,
        # authored components build their own dists
        write_dists=options.write_dists and origin == Origin.IMPORTED,
        write_config=options.write_config,
        write_package_json=options.write_package_json,
        write_bit_dependencies=(
            options.write_bit_dependencies or not decision.dependencies_saved_as_components
        ),
        replace_existing=guard.replace_existing,
        exclude_registry_prefix=options.exclude_registry_prefix,
    )


def resolve_dependency(
    dependency: Component,
    owner: Component,
    decision: OriginDecision,
    *,
    cache: DependencyCache,
    workspace: Workspace,
    tracking_map: TrackingMap,
    options: MaterializeOptions,
) -> DependencyResolution:
    """Apply the dependency placement rules in order; the first match wins.

    The whole decision runs under the cache lock so that two owners sharing a
    dependency cannot both claim it. Only the returned plan's write happens
    outside the lock.
    """
    dep_id = dependency.id
    with cache.lock:
        record = tracking_map.get_by_identity_exact(dep_id)

        if not decision.dependencies_saved_as_components and record is None:
            # an existing record keeps a dependency as a component; only new ones become packages
            return DependencyResolution(
                placement=PlacementResult(
                    component_id=dep_id,
                    path=None,
                    origin=None,
                    action=PlacementAction.SKIPPED,
                    reason="installed_by_package_manager",
                    parent_id=owner.id,
                )
            )

        if record is not None and record.origin == Origin.AUTHORED:
            tracking_map.add_dependency_edge(owner.id, dep_id)
            return _reused(dep_id, owner.id, workspace.root, Origin.AUTHORED, "authored")

        if record is not None:
            tracked_path = workspace.to_absolute(record.root_dir)
            if tracked_path.exists():
                tracking_map.add_dependency_edge(owner.id, dep_id)
                return _reused(dep_id, owner.id, tracked_path, record.origin, "tracked")

        cached = cache.get(dep_id)
        if cached is not None:
            tracking_map.add_dependency_edge(owner.id, dep_id)
            return _reused(dep_id, owner.id, cached, Origin.NESTED, "cached")

        destination, _ = cache.claim(dep_id, workspace.compose_dependency_path(dep_id))
        tracking_map.add_dependency_edge(owner.id, dep_id)

    plan = WritePlan(
        component=dependency,
        destination=destination,
        origin=Origin.NESTED,
        config_dir=None,
        existing_record=record,
        write_dists=options.write_dists,
        write_config=False,
        write_package_json=options.write_package_json,
        write_bit_dependencies=options.write_bit_dependencies,
        exclude_registry_prefix=options.exclude_registry_prefix,
        parent_id=owner.id,
    )
    return DependencyResolution(
        placement=PlacementResult(
            component_id=dep_id,
            path=destination,
            origin=Origin.NESTED,
            action=PlacementAction.WRITTEN,
            reason="nested",
            parent_id=owner.id,
        ),
        plan=plan,
    )


def _reused(
    dep_id: ComponentId,
    owner_id: ComponentId,
    path: Path,
    origin: Origin,
    reason: str,
) -> DependencyResolution:
    return DependencyResolution(
        placement=PlacementResult(
            component_id=dep_id,
            path=path,
            origin=origin,
            action=PlacementAction.REUSED,
            reason=reason,
            parent_id=owner_id,
        )
    )
