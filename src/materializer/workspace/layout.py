"""Workspace directory layout and path normalization."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

from materializer.config import WorkspaceConfig
from materializer.model import ComponentId

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")
WORKSPACE_GLOB_SUFFIX = "**/*"


def _normalize_input(candidate: str) -> tuple[str, bool]:
    """Normalize path separators and detect absolute-style inputs."""
    normalized = candidate.replace("\\", "/")
    if normalized.startswith("/"):
        return normalized, True
    if WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        return normalized, True
    return normalized, False


class Workspace:
    """Resolves where components and nested dependencies live in a workspace."""

    def __init__(self, config: WorkspaceConfig) -> None:
        self._config = config
        self._root = config.workspace_root.resolve()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config(self) -> WorkspaceConfig:
        return self._config

    def compose_component_path(self, component_id: ComponentId) -> Path:
        """Return the default absolute directory of a top-level component."""
        rendered = self._config.layout.components_directory.format(
            scope=component_id.scope or "",
            namespace=component_id.namespace,
            name=component_id.name,
        )
        parts = [part for part in rendered.replace("\\", "/").split("/") if part not in ("", ".")]
        return self._root.joinpath(*parts)

    def compose_dependency_path(self, component_id: ComponentId) -> Path:
        """Return the version-qualified absolute directory of a nested dependency."""
        base = self.to_absolute(self._config.layout.dependencies_directory)
        return base.joinpath(*component_id.to_full_path().split("/"))

    def to_absolute(self, candidate: str | Path | None) -> Path:
        """Resolve a workspace-relative (or absolute) path; ``None`` means the root."""
        if candidate is None:
            return self._root
        normalized, is_absolute_style = _normalize_input(str(candidate))
        if not normalized or normalized == ".":
            return self._root
        if is_absolute_style:
            return Path(normalized).resolve(strict=False)
        parts = [part for part in normalized.split("/") if part not in ("", ".")]
        return self._root.joinpath(*parts).resolve(strict=False)

    def to_relative(self, path: Path) -> str | None:
        """Return the POSIX path relative to the root, or ``None`` for the root itself.

        Paths outside the workspace are returned absolute.
        """
        resolved = path.resolve(strict=False)
        if resolved == self._root:
            return None
        if resolved.is_relative_to(self._root):
            return resolved.relative_to(self._root).as_posix()
        return resolved.as_posix()

    def workspace_globs(self, write_to_path: Path | None = None) -> tuple[str, ...]:
        """Return package-manager workspace globs covering materialized directories."""
        components_base = self._config.layout.components_directory.split("{", 1)[0]
        components_base = components_base.replace("\\", "/").strip("/")
        dependencies_base = self._config.layout.dependencies_directory.replace("\\", "/").strip("/")
        globs = {
            _join_glob(components_base),
            _join_glob(dependencies_base),
        }
        if write_to_path is not None:
            relative = self.to_relative(write_to_path)
            if relative is not None:
                globs.add(relative)
        return tuple(sorted(globs))


def _join_glob(base: str) -> str:
    if not base:
        return WORKSPACE_GLOB_SUFFIX
    return f"{base}/{WORKSPACE_GLOB_SUFFIX}"
