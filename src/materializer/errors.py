"""Error taxonomy for workspace materialization."""

from __future__ import annotations

from pathlib import Path


class MaterializeError(Exception):
    """Base class for failures raised while materializing components."""

    code = "MATERIALIZE_FAILURE"

    def __init__(self, reason: str, hint: str, path: Path | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint
        self.path = path
        self.result: object | None = None

    def to_dict(self) -> dict[str, object]:
        """Return the error envelope used in results and audit events."""
        payload: dict[str, object] = {"code": self.code, "message": self.reason}
        if self.path is not None:
            payload["path"] = str(self.path)
        return payload


class TargetNotDirectoryError(MaterializeError):
    """Raised when the materialization target exists as a regular file."""

    code = "NOT_A_DIRECTORY"


class DirectoryNotEmptyError(MaterializeError):
    """Raised when the target is a non-empty, untracked directory."""

    code = "DIRECTORY_NOT_EMPTY"


class ComponentWriteError(MaterializeError):
    """Raised when persisting a component's files fails."""

    code = "WRITE_FAILURE"


class PackageInstallError(MaterializeError):
    """Raised when the package manager exits with a failure."""

    code = "INSTALL_FAILURE"

    def __init__(
        self,
        reason: str,
        hint: str,
        path: Path | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(reason, hint, path)
        self.stderr = stderr


class LinkError(MaterializeError):
    """Raised when linking written components fails."""

    code = "LINK_FAILURE"
