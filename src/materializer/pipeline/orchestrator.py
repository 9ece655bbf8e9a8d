"""Sequencing of a full materialization run."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from materializer.config import MaterializeOptions, PersistMode
from materializer.errors import LinkError, MaterializeError, PackageInstallError
from materializer.logging import JsonlAuditLogger
from materializer.model import (
    ComponentWithDependencies,
    OriginDecision,
    PlacementAction,
    PlacementResult,
    WrittenComponent,
)
from materializer.pipeline.concurrency import run_tasks_fail_fast
from materializer.pipeline.phases import Phase, PhaseTracker
from materializer.pipeline.relocate import Relocation, relocate_components
from materializer.planning import (
    DependencyCache,
    WritePlan,
    classify_origins,
    plan_component,
    resolve_dependency,
)
from materializer.tracking import TrackingMap
from materializer.workspace import Remotes, Workspace
from materializer.writer import PreparedComponent


class ComponentWriter(Protocol):
    def prepare(self, plan: WritePlan) -> PreparedComponent: ...

    def persist(self, prepared: PreparedComponent) -> WrittenComponent: ...


class PackageInstaller(Protocol):
    def install(
        self,
        graphs: Sequence[ComponentWithDependencies],
        written_components: Sequence[WrittenComponent],
        *,
        verbose: bool,
        silent: bool,
        install_peer_dependencies: bool,
    ) -> object: ...


class Linker(Protocol):
    def link(
        self,
        graphs: Sequence[ComponentWithDependencies],
        written_components: Sequence[WrittenComponent],
        written_dependencies: Sequence[PlacementResult],
        *,
        create_link_files: bool,
        write_package_manifests: bool,
        exclude_registry_prefix: bool,
    ) -> object: ...


class ManifestWriter(Protocol):
    def add_workspace_entries(self, paths: Iterable[str]) -> object: ...

    def add_components_to_root(
        self,
        placements: Iterable[PlacementResult],
        *,
        exclude_registry_prefix: bool,
    ) -> object: ...


@dataclass(slots=True)
class MaterializeResult:
    """Everything a run placed, reused, skipped, relocated, installed and linked."""

    run_id: str
    decisions: dict[str, OriginDecision] = field(default_factory=dict)
    written_components: tuple[WrittenComponent, ...] = ()
    written_dependencies: tuple[PlacementResult, ...] = ()
    skipped_dependencies: tuple[PlacementResult, ...] = ()
    nested_writes: tuple[WrittenComponent, ...] = ()
    relocations: tuple[Relocation, ...] = ()
    install_report: object | None = None
    link_report: object | None = None
    install_error: PackageInstallError | None = None
    link_error: LinkError | None = None

    def component_placements(self) -> tuple[PlacementResult, ...]:
        """Placements of the top-level components as they ended up."""
        return tuple(
            PlacementResult(
                component_id=written.id,
                path=written.path,
                origin=written.origin,
                action=PlacementAction.WRITTEN,
                reason="top_level",
            )
            for written in self.written_components
        )


@dataclass(slots=True)
class _DependencyOutcome:
    placement: PlacementResult
    prepared: PreparedComponent | None = None
    written: WrittenComponent | None = None


class Materializer:
    """Writes top-level components and their dependencies into a workspace.

    Phases run strictly in order: classify origins, plan and write top-level
    components, plan and write dependencies, persist (deferred mode),
    relocate, update the root manifest, install packages and link.
    """

    def __init__(
        self,
        *,
        workspace: Workspace,
        tracking_map: TrackingMap,
        writer: ComponentWriter,
        installer: PackageInstaller,
        linker: Linker,
        manifest_writer: ManifestWriter,
        remotes: Remotes,
        options: MaterializeOptions | None = None,
        audit_logger: JsonlAuditLogger | None = None,
    ) -> None:
        self._workspace = workspace
        self._tracking_map = tracking_map
        self._writer = writer
        self._installer = installer
        self._linker = linker
        self._manifest_writer = manifest_writer
        self._remotes = remotes
        self._options = options or MaterializeOptions()
        self._audit_logger = audit_logger

    @property
    def options(self) -> MaterializeOptions:
        return self._options

    @property
    def tracking_map(self) -> TrackingMap:
        return self._tracking_map

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    def run(self, graphs: Sequence[ComponentWithDependencies]) -> MaterializeResult:
        """Materialize ``graphs`` and return what happened.

        Guard and write failures abort the run. Install and link failures are
        raised only after linking has been attempted; the partial result is
        attached to the raised error as ``result``.
        """
        options = self._options
        options.validate()
        graphs = tuple(graphs)
        write_to_path = options.resolved_write_to_path()
        if write_to_path is not None and len(graphs) > 1:
            raise ValueError("write_to_path accepts exactly one top-level component per run.")

        phases = PhaseTracker()
        result = MaterializeResult(run_id=f"run-{uuid.uuid4().hex[:12]}")
        max_workers = options.max_workers or self._workspace.config.max_workers
        immediate = options.persist_mode == PersistMode.IMMEDIATE

        try:
            self._enter(phases, Phase.CLASSIFY, result)
            decisions = classify_origins(
                graphs, self._remotes, options.save_dependencies_as_components
            )
            result.decisions = {str(key): value for key, value in decisions.items()}

            self._enter(phases, Phase.WRITE_COMPONENTS, result)
            plans = [
                plan_component(
                    graph,
                    decisions[graph.component.id],
                    options,
                    self._workspace,
                    self._tracking_map,
                )
                for graph in graphs
            ]
            for plan in plans:
                self._log(
                    result,
                    Phase.WRITE_COMPONENTS,
                    "planned",
                    component=str(plan.component.id),
                    reason=str(plan.origin),
                    metadata={
                        "destination": str(plan.destination),
                        "replace_existing": plan.replace_existing,
                        "write_dists": plan.write_dists,
                    },
                )
            prepared_components = run_tasks_fail_fast(
                [lambda plan=plan: self._writer.prepare(plan) for plan in plans],
                max_workers=max_workers,
            )
            written_components: list[WrittenComponent] = []
            if immediate:
                written_components = self._persist_all(phases, prepared_components, max_workers)

            self._enter(phases, Phase.WRITE_DEPENDENCIES, result)
            cache = DependencyCache()
            per_graph = run_tasks_fail_fast(
                [
                    lambda graph=graph: self._write_dependencies(
                        graph, decisions[graph.component.id], cache, immediate, result
                    )
                    for graph in graphs
                ],
                max_workers=max_workers,
            )
            outcomes = [outcome for graph_outcomes in per_graph for outcome in graph_outcomes]

            self._enter(phases, Phase.PERSIST, result)
            if not immediate:
                written_components = self._persist_all(phases, prepared_components, max_workers)
                pending = [outcome for outcome in outcomes if outcome.prepared is not None]
                written_nested = self._persist_all(
                    phases,
                    [outcome.prepared for outcome in pending if outcome.prepared is not None],
                    max_workers,
                )
                for outcome, written in zip(pending, written_nested, strict=True):
                    outcome.written = written

            result.written_components = tuple(written_components)
            result.written_dependencies = tuple(
                outcome.placement
                for outcome in outcomes
                if outcome.placement.action != PlacementAction.SKIPPED
            )
            result.skipped_dependencies = tuple(
                outcome.placement
                for outcome in outcomes
                if outcome.placement.action == PlacementAction.SKIPPED
            )
            result.nested_writes = tuple(
                outcome.written for outcome in outcomes if outcome.written is not None
            )

            self._enter(phases, Phase.RELOCATE, result)
            if write_to_path is not None:
                phases.require(Phase.PERSIST)
                result.written_components, result.relocations = relocate_components(
                    result.written_components,
                    write_to_path,
                    self._workspace,
                    self._tracking_map,
                    override=options.override,
                )
                for relocation in result.relocations:
                    self._log(
                        result,
                        Phase.RELOCATE,
                        "moved",
                        component=str(relocation.component_id),
                        metadata={"path": str(relocation.destination)},
                    )

            self._enter(phases, Phase.UPDATE_MANIFEST, result)
            if self._workspace.config.manage_workspaces:
                self._manifest_writer.add_workspace_entries(
                    self._workspace.workspace_globs(write_to_path)
                )
            if options.add_to_root_package_json:
                self._manifest_writer.add_components_to_root(
                    result.component_placements(),
                    exclude_registry_prefix=options.exclude_registry_prefix,
                )
        except MaterializeError as exc:
            self._log(result, phases.current, "failed", reason=exc.code, metadata=exc.to_dict())
            exc.result = result
            raise

        self._enter(phases, Phase.INSTALL, result)
        if options.install_npm_packages:
            try:
                result.install_report = self._installer.install(
                    graphs,
                    result.written_components,
                    verbose=options.verbose,
                    silent=options.silent_package_manager_result,
                    install_peer_dependencies=options.install_peer_dependencies,
                )
            except PackageInstallError as exc:
                result.install_error = exc
                self._log(result, Phase.INSTALL, "failed", reason=exc.code, metadata=exc.to_dict())

        self._enter(phases, Phase.LINK, result)
        try:
            result.link_report = self._linker.link(
                graphs,
                result.written_components,
                result.written_dependencies,
                create_link_files=options.create_npm_link_files,
                write_package_manifests=options.write_package_json,
                exclude_registry_prefix=options.exclude_registry_prefix,
            )
        except LinkError as exc:
            result.link_error = exc
            self._log(result, Phase.LINK, "failed", reason=exc.code, metadata=exc.to_dict())

        self._enter(phases, Phase.DONE, result)
        failure = result.link_error or result.install_error
        if failure is not None:
            failure.result = result
            raise failure
        return result

    def _write_dependencies(
        self,
        graph: ComponentWithDependencies,
        decision: OriginDecision,
        cache: DependencyCache,
        immediate: bool,
        result: MaterializeResult,
    ) -> list[_DependencyOutcome]:
        outcomes: list[_DependencyOutcome] = []
        for dependency in graph.all_dependencies:
            resolution = resolve_dependency(
                dependency,
                graph.component,
                decision,
                cache=cache,
                workspace=self._workspace,
                tracking_map=self._tracking_map,
                options=self._options,
            )
            placement = resolution.placement
            self._log(
                result,
                Phase.WRITE_DEPENDENCIES,
                str(placement.action),
                component=str(placement.component_id),
                reason=placement.reason,
                metadata={
                    "parent_present": placement.parent_id is not None,
                    "path": str(placement.path) if placement.path is not None else None,
                },
            )
            outcome = _DependencyOutcome(placement=placement)
            if resolution.plan is not None:
                outcome.prepared = self._writer.prepare(resolution.plan)
                if immediate:
                    outcome.written = self._writer.persist(outcome.prepared)
            outcomes.append(outcome)
        return outcomes

    def _persist_all(
        self,
        phases: PhaseTracker,
        prepared: Sequence[PreparedComponent],
        max_workers: int,
    ) -> list[WrittenComponent]:
        # nothing reaches the disk before every top-level component is planned
        phases.require(Phase.WRITE_COMPONENTS)
        return run_tasks_fail_fast(
            [lambda item=item: self._writer.persist(item) for item in prepared],
            max_workers=max_workers,
        )

    def _enter(self, phases: PhaseTracker, phase: Phase, result: MaterializeResult) -> None:
        phases.advance(phase)
        self._log(result, phase, "start")

    def _log(
        self,
        result: MaterializeResult,
        phase: Phase,
        action: str,
        *,
        component: str | None = None,
        reason: str | None = None,
        metadata: dict[str, object] | None = None,
    ) -> None:
        if self._audit_logger is None:
            return
        self._audit_logger.record(
            run_id=result.run_id,
            phase=phase.name.lower(),
            action=action,
            component=component,
            reason=reason,
            metadata=metadata,
        )
