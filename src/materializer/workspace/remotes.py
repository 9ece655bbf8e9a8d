"""Remote scope classification."""

from __future__ import annotations

from collections.abc import Iterable

from materializer.config import RemotesConfig


class Remotes:
    """Known remotes; any scope not registered as self-hosted is served by the hub."""

    def __init__(self, self_hosted: Iterable[str] = ()) -> None:
        self._self_hosted = frozenset(self_hosted)

    @classmethod
    def from_config(cls, config: RemotesConfig) -> Remotes:
        return cls(config.self_hosted)

    def is_hub(self, scope: str | None) -> bool:
        """Return True when ``scope`` can distribute dependencies as packages."""
        # an unexported component has no remote at all
        if not scope:
            return False
        return scope not in self._self_hosted
