"""Origin classification, deduplication and placement planning."""

from .cache import DependencyCache
from .origin import classify_origins
from .planner import DependencyResolution, WritePlan, plan_component, resolve_dependency

__all__ = [
    "DependencyCache",
    "DependencyResolution",
    "WritePlan",
    "classify_origins",
    "plan_component",
    "resolve_dependency",
]
