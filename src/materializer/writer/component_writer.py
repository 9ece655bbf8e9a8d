"""Filesystem writer for a single component."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

from materializer.errors import ComponentWriteError
from materializer.model import Origin, WrittenComponent
from materializer.planning import WritePlan
from materializer.tracking import TrackingMap
from materializer.workspace import Workspace
from materializer.writer.models import FileToWrite, PreparedComponent

PACKAGE_JSON = "package.json"
COMPONENT_CONFIG = "component.json"
DIST_DIR = "dist"
DEFAULT_MAIN_FILE = "index.js"
UNVERSIONED_RANGE = "*"


class FilesystemComponentWriter:
    """Turns write plans into files under the workspace and registers them."""

    def __init__(self, workspace: Workspace, tracking_map: TrackingMap) -> None:
        self._workspace = workspace
        self._tracking_map = tracking_map

    def prepare(self, plan: WritePlan) -> PreparedComponent:
        """Resolve the target directory and render every file of ``plan``."""
        root = self._target_root(plan)
        component = plan.component
        files: dict[str, str] = {}
        for relative_path, content in component.files.items():
            files[_safe_relative(relative_path, root)] = content
        if plan.write_dists:
            for relative_path, content in component.dists.items():
                files[_safe_relative(f"{DIST_DIR}/{relative_path}", root)] = content
        # the root package.json belongs to the workspace manifest writer
        if plan.write_package_json and root != self._workspace.root:
            files[PACKAGE_JSON] = self._render_package_json(plan)
        if plan.write_config:
            config_name = COMPONENT_CONFIG
            if plan.config_dir:
                config_name = f"{plan.config_dir.rstrip('/')}/{COMPONENT_CONFIG}"
            files[_safe_relative(config_name, root)] = _render_config(plan)
        return PreparedComponent(
            plan=plan,
            root=root,
            files=tuple(
                FileToWrite(relative_path=path, content=files[path]) for path in sorted(files)
            ),
        )

    def persist(self, prepared: PreparedComponent) -> WrittenComponent:
        """Write prepared files, then register the component in the tracking map.

        Files whose content is already on disk are left untouched.
        """
        root = prepared.root
        try:
            if prepared.replace_existing and root.exists():
                shutil.rmtree(root)
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ComponentWriteError(
                reason=f"Unable to prepare directory {root}: {exc.strerror or exc}.",
                hint="Check permissions and free space, then re-run.",
                path=root,
            ) from exc

        for item in prepared.files:
            target = root / item.relative_path
            try:
                if target.is_file() and target.read_text(encoding="utf-8") == item.content:
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(item.content, encoding="utf-8")
            except OSError as exc:
                raise ComponentWriteError(
                    reason=f"Unable to write {target}: {exc.strerror or exc}.",
                    hint="Check permissions and free space, then re-run.",
                    path=target,
                ) from exc

        plan = prepared.plan
        self._tracking_map.add_component(
            plan.component.id,
            plan.origin,
            self._workspace.to_relative(root),
            plan.config_dir,
        )
        return WrittenComponent(
            component=plan.component,
            path=root,
            origin=plan.origin,
            files=tuple(item.relative_path for item in prepared.files),
            parent_id=plan.parent_id,
        )

    def write(self, plan: WritePlan) -> WrittenComponent:
        """Prepare and persist in one step."""
        return self.persist(self.prepare(plan))

    def _target_root(self, plan: WritePlan) -> Path:
        # a tracked top-level component is rewritten in place and relocated afterwards;
        # an authored record without a root lives at the workspace root
        record = plan.existing_record
        if plan.origin == Origin.NESTED or record is None:
            return plan.destination
        if record.origin == Origin.AUTHORED:
            return self._workspace.to_absolute(record.root_dir)
        if record.origin == Origin.IMPORTED and record.root_dir is not None:
            return self._workspace.to_absolute(record.root_dir)
        return plan.destination

    def _render_package_json(self, plan: WritePlan) -> str:
        component = plan.component
        prefix = self._workspace.config.registry_prefix
        dependencies = dict(component.package_dependencies)
        if plan.write_bit_dependencies:
            for dep_id in component.dependencies:
                name = dep_id.package_name(prefix, plan.exclude_registry_prefix)
                dependencies[name] = dep_id.version or UNVERSIONED_RANGE
        payload: dict[str, object] = {
            "name": component.id.package_name(prefix, plan.exclude_registry_prefix),
            "version": component.id.version or "0.0.0",
            "main": component.main_file or DEFAULT_MAIN_FILE,
            "dependencies": dict(sorted(dependencies.items())),
        }
        if component.peer_dependencies:
            payload["peerDependencies"] = dict(sorted(component.peer_dependencies.items()))
        return json.dumps(payload, indent=2) + "\n"


def _render_config(plan: WritePlan) -> str:
    payload: dict[str, object] = {"id": str(plan.component.id)}
    payload.update(plan.component.config)
    return json.dumps(payload, indent=2, sort_keys=True) + "\n"


def _safe_relative(candidate: str, root: Path) -> str:
    normalized = candidate.replace("\\", "/")
    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if normalized.startswith("/") or not parts or any(part == ".." for part in parts):
        raise ComponentWriteError(
            reason=f"Component file path '{candidate}' escapes the component directory.",
            hint="Component file paths must be relative and free of '..' segments.",
            path=root,
        )
    return "/".join(parts)
