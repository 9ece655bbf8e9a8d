from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from materializer.config import LayoutConfig, default_config
from materializer.model import ComponentId
from materializer.workspace import Workspace

BUTTON = ComponentId(name="button", namespace="ui", scope="acme", version="1.0.0")


def test_component_path_uses_layout_template(tmp_path: Path) -> None:
    workspace = Workspace(default_config(tmp_path))

    assert workspace.compose_component_path(BUTTON) == tmp_path.resolve() / "components/ui/button"


def test_component_path_template_with_scope(tmp_path: Path) -> None:
    config = replace(
        default_config(tmp_path),
        layout=LayoutConfig(
            components_directory="bits/{scope}/{name}",
            dependencies_directory="bits/.deps",
        ),
    )
    workspace = Workspace(config)

    assert workspace.compose_component_path(BUTTON) == tmp_path.resolve() / "bits/acme/button"
    assert workspace.compose_dependency_path(BUTTON) == (
        tmp_path.resolve() / "bits/.deps/ui/button/acme/1.0.0"
    )


def test_dependency_path_is_version_qualified(tmp_path: Path) -> None:
    workspace = Workspace(default_config(tmp_path))

    assert workspace.compose_dependency_path(BUTTON) == (
        tmp_path.resolve() / "components/.dependencies/ui/button/acme/1.0.0"
    )


def test_relative_and_absolute_conversions(tmp_path: Path) -> None:
    workspace = Workspace(default_config(tmp_path))
    root = tmp_path.resolve()

    assert workspace.to_absolute(None) == root
    assert workspace.to_absolute(".") == root
    assert workspace.to_absolute("components\\ui\\button") == root / "components/ui/button"
    assert workspace.to_relative(root) is None
    assert workspace.to_relative(root / "components/ui/button") == "components/ui/button"


def test_paths_outside_the_workspace_stay_absolute(tmp_path: Path) -> None:
    workspace = Workspace(default_config(tmp_path / "ws"))
    outside = tmp_path.resolve() / "elsewhere"

    assert workspace.to_relative(outside) == outside.as_posix()
    assert workspace.to_absolute(outside.as_posix()) == outside


def test_workspace_globs_cover_components_and_write_path(tmp_path: Path) -> None:
    workspace = Workspace(default_config(tmp_path))

    assert workspace.workspace_globs() == ("components/**/*", "components/.dependencies/**/*")
    assert workspace.workspace_globs(tmp_path.resolve() / "apps/button") == (
        "apps/button",
        "components/**/*",
        "components/.dependencies/**/*",
    )
