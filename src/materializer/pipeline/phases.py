"""Ordered phases of a materialization run."""

from __future__ import annotations

from enum import IntEnum


class Phase(IntEnum):
    """Pipeline phases; each may only start once its predecessor has completed."""

    PENDING = 0
    CLASSIFY = 1
    WRITE_COMPONENTS = 2
    WRITE_DEPENDENCIES = 3
    PERSIST = 4
    RELOCATE = 5
    UPDATE_MANIFEST = 6
    INSTALL = 7
    LINK = 8
    DONE = 9


class PhaseOrderError(RuntimeError):
    """Raised when a phase is entered out of order."""


class PhaseTracker:
    """Enforces strictly sequential phase transitions for one run."""

    def __init__(self) -> None:
        self._current = Phase.PENDING

    @property
    def current(self) -> Phase:
        return self._current

    def advance(self, phase: Phase) -> Phase:
        if phase != self._current + 1:
            raise PhaseOrderError(
                f"Cannot enter phase {phase.name} while in phase {self._current.name}."
            )
        self._current = phase
        return phase

    def require(self, phase: Phase) -> None:
        if self._current < phase:
            raise PhaseOrderError(
                f"Phase {phase.name} has not run yet (current: {self._current.name})."
            )
