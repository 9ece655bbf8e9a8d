"""Make written components resolvable from the components that depend on them."""

from __future__ import annotations

import json
import os
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from materializer.errors import LinkError
from materializer.model import (
    ComponentId,
    ComponentWithDependencies,
    PlacementAction,
    PlacementResult,
    WrittenComponent,
)
from materializer.workspace import Workspace

MODULES_DIR = "node_modules"
LINK_ENTRY_FILE = "index.js"
PACKAGE_JSON = "package.json"


@dataclass(slots=True, frozen=True)
class LinkRecord:
    """One dependency made resolvable from one component directory."""

    source: Path
    package_name: str
    link_path: Path
    target: Path
    kind: str


@dataclass(slots=True, frozen=True)
class LinkReport:
    """All links created or confirmed during a run."""

    links: tuple[LinkRecord, ...]


class FilesystemLinker:
    """Creates ``node_modules`` symlinks (or require-style link files) per dependency."""

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def link(
        self,
        graphs: Sequence[ComponentWithDependencies],
        written_components: Sequence[WrittenComponent],
        written_dependencies: Sequence[PlacementResult],
        *,
        create_link_files: bool = False,
        write_package_manifests: bool = True,
        exclude_registry_prefix: bool = False,
    ) -> LinkReport:
        """Link every freshly written component to its placed dependencies."""
        locations: dict[ComponentId, Path] = {}
        for written in written_components:
            locations[written.id] = written.path
        for placement in written_dependencies:
            if placement.path is not None and placement.action != PlacementAction.SKIPPED:
                locations.setdefault(placement.component_id, placement.path)

        sources: list[tuple[Path, tuple[ComponentId, ...]]] = []
        dependencies_by_id = {
            dependency.id: dependency for graph in graphs for dependency in graph.all_dependencies
        }
        for graph in graphs:
            location = locations.get(graph.component.id)
            if location is None:
                continue
            direct = graph.component.dependencies or tuple(
                dependency.id for dependency in graph.all_dependencies
            )
            sources.append((location, direct))
        for placement in written_dependencies:
            if placement.action != PlacementAction.WRITTEN or placement.path is None:
                continue
            dependency = dependencies_by_id.get(placement.component_id)
            if dependency is None:
                continue
            sources.append((placement.path, dependency.dependencies))

        records: list[LinkRecord] = []
        seen: set[tuple[Path, ComponentId]] = set()
        prefix = self._workspace.config.registry_prefix
        for source, direct in sources:
            for dep_id in direct:
                target = locations.get(dep_id)
                if target is None or target == source or (source, dep_id) in seen:
                    continue
                seen.add((source, dep_id))
                package_name = dep_id.package_name(prefix, exclude_registry_prefix)
                link_path = source / MODULES_DIR / Path(*package_name.split("/"))
                if create_link_files:
                    self._write_link_files(link_path, target, package_name, write_package_manifests)
                    kind = "link_file"
                else:
                    self._symlink(link_path, target)
                    kind = "symlink"
                records.append(
                    LinkRecord(
                        source=source,
                        package_name=package_name,
                        link_path=link_path,
                        target=target,
                        kind=kind,
                    )
                )
        records.sort(key=lambda record: (str(record.source), record.package_name))
        return LinkReport(links=tuple(records))

    @staticmethod
    def _symlink(link_path: Path, target: Path) -> None:
        relative_target = os.path.relpath(target, link_path.parent)
        try:
            if link_path.is_symlink():
                if os.readlink(link_path) == relative_target:
                    return
                link_path.unlink()
            elif link_path.is_dir():
                shutil.rmtree(link_path)
            elif link_path.exists():
                link_path.unlink()
            link_path.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(relative_target, link_path, target_is_directory=True)
        except OSError as exc:
            raise LinkError(
                reason=f"Unable to link {link_path} to {target}: {exc.strerror or exc}.",
                hint="Check filesystem permissions or use link files instead of symlinks.",
                path=link_path,
            ) from exc

    @staticmethod
    def _write_link_files(
        link_path: Path, target: Path, package_name: str, write_package_manifest: bool
    ) -> None:
        relative_target = Path(os.path.relpath(target, link_path)).as_posix()
        files = {LINK_ENTRY_FILE: f"module.exports = require('{relative_target}');\n"}
        if write_package_manifest:
            manifest = {"name": package_name, "main": LINK_ENTRY_FILE}
            files[PACKAGE_JSON] = json.dumps(manifest, indent=2) + "\n"
        try:
            if link_path.is_symlink():
                link_path.unlink()
            link_path.mkdir(parents=True, exist_ok=True)
            for name, content in files.items():
                entry = link_path / name
                if entry.is_file() and entry.read_text(encoding="utf-8") == content:
                    continue
                entry.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise LinkError(
                reason=f"Unable to write link files in {link_path}: {exc.strerror or exc}.",
                hint="Check filesystem permissions, then re-run linking.",
                path=link_path,
            ) from exc
