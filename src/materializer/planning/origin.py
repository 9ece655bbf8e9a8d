"""Decide whether each top-level component's dependencies become filesystem copies."""

from __future__ import annotations

from collections.abc import Sequence

from materializer.model import ComponentId, ComponentWithDependencies, OriginDecision
from materializer.workspace import Remotes


def classify_origins(
    graphs: Sequence[ComponentWithDependencies],
    remotes: Remotes,
    save_dependencies_as_components: bool,
) -> dict[ComponentId, OriginDecision]:
    """Return one decision per top-level component, keyed by its identity.

    A component whose scope is not served by the hub cannot have its
    dependencies installed as packages, so they are saved as components
    whatever the caller asked for.
    """
    decisions: dict[ComponentId, OriginDecision] = {}
    for graph in graphs:
        component_id = graph.component.id
        decisions[component_id] = OriginDecision(
            component_id=component_id,
            dependencies_saved_as_components=(
                save_dependencies_as_components or not remotes.is_hub(component_id.scope)
            ),
        )
    return decisions
