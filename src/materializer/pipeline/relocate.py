"""Post-write relocation of top-level components to a requested output path."""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from materializer.errors import ComponentWriteError, DirectoryNotEmptyError
from materializer.model import ComponentId, WrittenComponent
from materializer.safety import is_dir_empty
from materializer.tracking import TrackingMap
from materializer.workspace import Workspace


@dataclass(slots=True, frozen=True)
class Relocation:
    """A component directory moved from ``source`` to ``destination``."""

    component_id: ComponentId
    source: Path
    destination: Path


def relocate_component(
    written: WrittenComponent,
    write_to_path: Path,
    workspace: Workspace,
    tracking_map: TrackingMap,
    *,
    override: bool = False,
) -> tuple[WrittenComponent, Relocation | None]:
    """Move one written component to ``write_to_path`` when it lives elsewhere.

    Makes no filesystem call when both paths resolve to the same location.
    Components written at the workspace root are left in place. With
    ``override`` a non-empty destination is cleared first.
    """
    source = workspace.to_absolute(written.path)
    destination = workspace.to_absolute(write_to_path)
    if source == destination or source == workspace.root:
        return written, None

    try:
        if destination.exists():
            if override and destination.is_dir():
                shutil.rmtree(destination)
            elif not destination.is_dir() or not is_dir_empty(destination):
                raise DirectoryNotEmptyError(
                    reason=f"Unable to move {written.id} to {destination}, it is not empty.",
                    hint="Choose an empty output path or remove its contents.",
                    path=destination,
                )
            else:
                destination.rmdir()
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(destination))
    except OSError as exc:
        raise ComponentWriteError(
            reason=f"Unable to move {source} to {destination}: {exc.strerror or exc}.",
            hint="Check permissions on both directories, then re-run.",
            path=destination,
        ) from exc

    tracking_map.update_root_dir(written.id, workspace.to_relative(destination))
    return (
        replace(written, path=destination),
        Relocation(component_id=written.id, source=source, destination=destination),
    )


def relocate_components(
    written_components: Sequence[WrittenComponent],
    write_to_path: Path,
    workspace: Workspace,
    tracking_map: TrackingMap,
    *,
    override: bool = False,
) -> tuple[tuple[WrittenComponent, ...], tuple[Relocation, ...]]:
    """Relocate every top-level component; dependencies keep their own paths."""
    relocated: list[WrittenComponent] = []
    relocations: list[Relocation] = []
    for written in written_components:
        updated, relocation = relocate_component(
            written, write_to_path, workspace, tracking_map, override=override
        )
        relocated.append(updated)
        if relocation is not None:
            relocations.append(relocation)
    return tuple(relocated), tuple(relocations)
