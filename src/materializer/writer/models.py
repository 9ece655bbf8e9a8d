"""Typed models for prepared component writes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from materializer.planning import WritePlan


@dataclass(slots=True, frozen=True)
class FileToWrite:
    """One file of a prepared component, relative to the component root."""

    relative_path: str
    content: str


@dataclass(slots=True, frozen=True)
class PreparedComponent:
    """A write plan resolved into concrete files, not yet on disk."""

    plan: WritePlan
    root: Path
    files: tuple[FileToWrite, ...]

    @property
    def replace_existing(self) -> bool:
        return self.plan.replace_existing and self.root == self.plan.destination
