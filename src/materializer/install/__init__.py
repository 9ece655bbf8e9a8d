"""Package-manager installation."""

from .npm import InstallReport, NpmInstaller

__all__ = ["InstallReport", "NpmInstaller"]
