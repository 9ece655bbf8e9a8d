from __future__ import annotations

from pathlib import Path

import pytest

from materializer.config import MaterializeOptions, PersistMode, default_config
from materializer.errors import ComponentWriteError
from materializer.links import FilesystemLinker
from materializer.model import Component, ComponentId, ComponentWithDependencies
from materializer.pipeline import Materializer, Phase, PhaseTracker
from materializer.tracking import TrackingMap
from materializer.workspace import Remotes, Workspace, WorkspaceManifestWriter
from materializer.writer import FilesystemComponentWriter

BUTTON = ComponentId(name="button", namespace="ui")
UTILS = ComponentId(name="utils", version="1.0.0")


class NoopInstaller:
    def install(self, graphs, written_components, *, verbose, silent, install_peer_dependencies):
        return None


def _materializer(root: Path, mode: PersistMode) -> Materializer:
    workspace = Workspace(default_config(root))
    tracking_map = TrackingMap()
    return Materializer(
        workspace=workspace,
        tracking_map=tracking_map,
        writer=FilesystemComponentWriter(workspace, tracking_map),
        installer=NoopInstaller(),
        linker=FilesystemLinker(workspace),
        manifest_writer=WorkspaceManifestWriter(workspace),
        remotes=Remotes(),
        options=MaterializeOptions(persist_mode=mode, max_workers=1),
    )


def _graph(dependency_files: dict[str, str]) -> ComponentWithDependencies:
    utils = Component(id=UTILS, files=dependency_files)
    button = Component(id=BUTTON, files={"index.js": "x\n"}, dependencies=(UTILS,))
    return ComponentWithDependencies(component=button, all_dependencies=(utils,))


def _tree(root: Path) -> list[str]:
    return sorted(
        path.relative_to(root).as_posix()
        for path in (root / "components").rglob("*")
        if path.is_file() and "node_modules" not in path.parts
    )


def test_deferred_mode_writes_nothing_when_a_dependency_fails(tmp_path: Path) -> None:
    materializer = _materializer(tmp_path, PersistMode.DEFERRED)

    with pytest.raises(ComponentWriteError):
        materializer.run([_graph({"../escape.js": "x"})])

    assert not (tmp_path / "components").exists()
    assert materializer.tracking_map.records() == ()


def test_immediate_mode_keeps_components_written_before_a_failure(tmp_path: Path) -> None:
    materializer = _materializer(tmp_path, PersistMode.IMMEDIATE)

    with pytest.raises(ComponentWriteError) as excinfo:
        materializer.run([_graph({"../escape.js": "x"})])

    assert (tmp_path / "components/ui/button/index.js").exists()
    assert materializer.tracking_map.get_by_identity_exact(BUTTON) is not None
    assert excinfo.value.result is not None


def test_both_modes_produce_the_same_tree(tmp_path: Path) -> None:
    deferred_root = tmp_path / "deferred"
    immediate_root = tmp_path / "immediate"
    deferred_root.mkdir()
    immediate_root.mkdir()
    files = {"index.js": "module.exports = 1;\n"}

    deferred = _materializer(deferred_root, PersistMode.DEFERRED).run([_graph(files)])
    immediate = _materializer(immediate_root, PersistMode.IMMEDIATE).run([_graph(files)])

    assert _tree(deferred_root) == _tree(immediate_root)
    assert len(deferred.nested_writes) == len(immediate.nested_writes) == 1


@pytest.mark.parametrize("mode", [PersistMode.DEFERRED, PersistMode.IMMEDIATE])
def test_persisting_requires_planned_components(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, mode: PersistMode
) -> None:
    required: list[Phase] = []
    original = PhaseTracker.require

    def record(tracker: PhaseTracker, phase: Phase) -> None:
        required.append(phase)
        original(tracker, phase)

    monkeypatch.setattr(PhaseTracker, "require", record)

    _materializer(tmp_path, mode).run([_graph({"index.js": "y\n"})])

    assert required
    assert set(required) == {Phase.WRITE_COMPONENTS}
