"""Workspace layout, remotes and root manifest."""

from .layout import Workspace
from .manifest import WorkspaceManifestWriter
from .remotes import Remotes

__all__ = ["Remotes", "Workspace", "WorkspaceManifestWriter"]
