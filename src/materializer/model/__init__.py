"""Component identity and write-unit models."""

from .component import (
    Component,
    ComponentWithDependencies,
    Origin,
    OriginDecision,
    PlacementAction,
    PlacementResult,
    WrittenComponent,
)
from .identity import DEFAULT_NAMESPACE, ComponentId

__all__ = [
    "Component",
    "ComponentId",
    "ComponentWithDependencies",
    "DEFAULT_NAMESPACE",
    "Origin",
    "OriginDecision",
    "PlacementAction",
    "PlacementResult",
    "WrittenComponent",
]
