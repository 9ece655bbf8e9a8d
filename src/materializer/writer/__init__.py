"""Per-component filesystem writer."""

from .component_writer import COMPONENT_CONFIG, PACKAGE_JSON, FilesystemComponentWriter
from .models import FileToWrite, PreparedComponent

__all__ = [
    "COMPONENT_CONFIG",
    "FileToWrite",
    "FilesystemComponentWriter",
    "PACKAGE_JSON",
    "PreparedComponent",
]
