"""Pre-write checks that keep materialization from clobbering unrelated content."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from materializer.errors import DirectoryNotEmptyError, TargetNotDirectoryError
from materializer.tracking import TrackingRecord
from materializer.workspace import Workspace


@dataclass(slots=True, frozen=True)
class GuardDecision:
    """Permission to write into a target directory."""

    replace_existing: bool
    reason: str


def is_dir_empty(path: Path) -> bool:
    """Return True when ``path`` is a directory with no entries."""
    return next(path.iterdir(), None) is None


def check_target_directory(
    target: Path,
    record: TrackingRecord | None,
    *,
    write_to_path: Path | None,
    override: bool,
    workspace: Workspace,
) -> GuardDecision:
    """Permit a top-level write into ``target`` or raise.

    Tracked components may be rewritten where they are. Anything else must
    land in a missing or empty directory unless ``override`` was requested,
    in which case the existing contents are replaced.
    """
    if write_to_path is None and record is not None:
        return GuardDecision(replace_existing=False, reason="tracked")
    if write_to_path is not None and record is not None:
        if workspace.to_absolute(record.root_dir) == write_to_path.resolve():
            return GuardDecision(replace_existing=False, reason="tracked_at_write_to_path")

    if not target.exists():
        return GuardDecision(replace_existing=False, reason="missing")
    if not target.is_dir():
        raise TargetNotDirectoryError(
            reason=f"Unable to write to {target} because it is a file.",
            hint="Remove the file or choose another output path.",
            path=target,
        )
    if is_dir_empty(target):
        return GuardDecision(replace_existing=False, reason="empty")
    if not override:
        raise DirectoryNotEmptyError(
            reason=f"Unable to write to {target}, the directory is not empty.",
            hint="Retry with override to delete the directory contents before writing.",
            path=target,
        )
    return GuardDecision(replace_existing=True, reason="override")
