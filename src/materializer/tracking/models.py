"""Typed models for the persistent tracking map."""

from __future__ import annotations

from dataclasses import dataclass

from materializer.model import ComponentId, Origin


@dataclass(slots=True, frozen=True)
class TrackingRecord:
    """Where a known component lives and how it got there."""

    id: ComponentId
    origin: Origin
    root_dir: str | None
    config_dir: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "origin": str(self.origin),
            "root_dir": self.root_dir,
            "config_dir": self.config_dir,
        }
