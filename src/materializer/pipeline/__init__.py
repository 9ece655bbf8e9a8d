"""Run sequencing, concurrency and relocation."""

from .concurrency import run_tasks_fail_fast
from .orchestrator import (
    ComponentWriter,
    Linker,
    ManifestWriter,
    MaterializeResult,
    Materializer,
    PackageInstaller,
)
from .phases import Phase, PhaseOrderError, PhaseTracker
from .relocate import Relocation, relocate_component, relocate_components

__all__ = [
    "ComponentWriter",
    "Linker",
    "ManifestWriter",
    "MaterializeResult",
    "Materializer",
    "PackageInstaller",
    "Phase",
    "PhaseOrderError",
    "PhaseTracker",
    "Relocation",
    "relocate_component",
    "relocate_components",
    "run_tasks_fail_fast",
]
