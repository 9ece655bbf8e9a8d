"""Entry points wiring configuration, tracking and default collaborators."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from materializer.config import (
    MaterializeOptions,
    WorkspaceConfig,
    WorkspaceOverrides,
    load_effective_config,
)
from materializer.install import NpmInstaller
from materializer.install.npm import CommandRunner
from materializer.links import FilesystemLinker
from materializer.logging import JsonlAuditLogger
from materializer.model import ComponentWithDependencies
from materializer.pipeline import MaterializeResult, Materializer
from materializer.tracking import TRACKING_FILE_NAME, TrackingMap
from materializer.workspace import Remotes, Workspace, WorkspaceManifestWriter
from materializer.writer import FilesystemComponentWriter

AUDIT_FILE_NAME = "audit.jsonl"


def create_materializer(
    workspace_root: str | Path,
    options: MaterializeOptions | None = None,
    overrides: WorkspaceOverrides | None = None,
    runner: CommandRunner | None = None,
) -> Materializer:
    """Create a materializer for ``workspace_root`` with the filesystem collaborators."""
    config = load_effective_config(Path(workspace_root), overrides)
    return build_materializer(config, options=options, runner=runner)


def build_materializer(
    config: WorkspaceConfig,
    options: MaterializeOptions | None = None,
    runner: CommandRunner | None = None,
) -> Materializer:
    """Assemble a materializer from an already merged config."""
    workspace = Workspace(config)
    tracking_map = TrackingMap.load(config.data_dir / TRACKING_FILE_NAME)
    return Materializer(
        workspace=workspace,
        tracking_map=tracking_map,
        writer=FilesystemComponentWriter(workspace, tracking_map),
        installer=NpmInstaller(config.package_manager, runner=runner),
        linker=FilesystemLinker(workspace),
        manifest_writer=WorkspaceManifestWriter(workspace),
        remotes=Remotes.from_config(config.remotes),
        options=options,
        audit_logger=JsonlAuditLogger(config.data_dir / AUDIT_FILE_NAME),
    )


def materialize(
    workspace_root: str | Path,
    graphs: Sequence[ComponentWithDependencies],
    options: MaterializeOptions | None = None,
    overrides: WorkspaceOverrides | None = None,
    runner: CommandRunner | None = None,
) -> MaterializeResult:
    """Run one materialization and save the tracking map.

    The map is saved even when the run fails, since nothing written before
    the failure is rolled back.
    """
    materializer = create_materializer(workspace_root, options, overrides, runner)
    try:
        return materializer.run(graphs)
    finally:
        materializer.tracking_map.save()
