"""Linking of written components."""

from .linker import FilesystemLinker, LinkRecord, LinkReport

__all__ = ["FilesystemLinker", "LinkRecord", "LinkReport"]
