from __future__ import annotations

from pathlib import Path

from materializer.errors import (
    ComponentWriteError,
    DirectoryNotEmptyError,
    LinkError,
    MaterializeError,
    PackageInstallError,
    TargetNotDirectoryError,
)


def test_error_codes_are_stable() -> None:
    assert TargetNotDirectoryError.code == "NOT_A_DIRECTORY"
    assert DirectoryNotEmptyError.code == "DIRECTORY_NOT_EMPTY"
    assert ComponentWriteError.code == "WRITE_FAILURE"
    assert PackageInstallError.code == "INSTALL_FAILURE"
    assert LinkError.code == "LINK_FAILURE"


def test_error_envelope_includes_path_when_known(tmp_path: Path) -> None:
    error = DirectoryNotEmptyError(
        reason="Unable to write, the directory is not empty.",
        hint="Retry with override.",
        path=tmp_path,
    )

    assert isinstance(error, MaterializeError)
    assert str(error) == "Unable to write, the directory is not empty."
    assert error.hint == "Retry with override."
    assert error.result is None
    assert error.to_dict() == {
        "code": "DIRECTORY_NOT_EMPTY",
        "message": "Unable to write, the directory is not empty.",
        "path": str(tmp_path),
    }


def test_install_error_carries_stderr() -> None:
    error = PackageInstallError(reason="npm failed.", hint="Fix it.", stderr="ERR! 404")

    assert error.stderr == "ERR! 404"
    assert error.to_dict() == {"code": "INSTALL_FAILURE", "message": "npm failed."}
