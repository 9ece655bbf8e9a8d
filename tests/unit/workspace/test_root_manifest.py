from __future__ import annotations

import json
from pathlib import Path

import pytest

from materializer.config import default_config
from materializer.model import ComponentId, Origin, PlacementAction, PlacementResult
from materializer.workspace import Workspace, WorkspaceManifestWriter


def _placement(component_id: ComponentId, path: Path | None) -> PlacementResult:
    return PlacementResult(
        component_id=component_id,
        path=path,
        origin=Origin.IMPORTED,
        action=PlacementAction.WRITTEN,
        reason="top_level",
    )


def test_workspace_entries_are_merged_and_sorted(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "root", "workspaces": ["packages/*"]}), encoding="utf-8"
    )
    writer = WorkspaceManifestWriter(Workspace(default_config(tmp_path)))

    merged = writer.add_workspace_entries(["components/**/*", "packages/*"])

    payload = json.loads((tmp_path / "package.json").read_text(encoding="utf-8"))
    assert merged == ("components/**/*", "packages/*")
    assert payload == {"name": "root", "workspaces": ["components/**/*", "packages/*"]}
    assert not (tmp_path / "package.json.tmp").exists()


def test_components_are_added_as_file_dependencies(tmp_path: Path) -> None:
    workspace = Workspace(default_config(tmp_path))
    writer = WorkspaceManifestWriter(workspace)
    button = ComponentId(name="button", namespace="ui", scope="acme", version="1.0.0")
    at_root = ComponentId(name="app", scope="acme")

    added = writer.add_components_to_root(
        [
            _placement(button, workspace.root / "components/ui/button"),
            _placement(at_root, workspace.root),
        ]
    )

    payload = json.loads(writer.path.read_text(encoding="utf-8"))
    assert added == {"@bit/acme.ui.button": "file:components/ui/button"}
    assert payload["dependencies"] == {"@bit/acme.ui.button": "file:components/ui/button"}


def test_nothing_is_written_when_no_component_qualifies(tmp_path: Path) -> None:
    workspace = Workspace(default_config(tmp_path))
    writer = WorkspaceManifestWriter(workspace)

    added = writer.add_components_to_root([_placement(ComponentId(name="app"), None)])

    assert added == {}
    assert not writer.path.exists()


def test_invalid_workspaces_field_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(json.dumps({"workspaces": "x"}), encoding="utf-8")
    writer = WorkspaceManifestWriter(Workspace(default_config(tmp_path)))

    with pytest.raises(ValueError, match="workspaces"):
        writer.add_workspace_entries(["components/**/*"])
