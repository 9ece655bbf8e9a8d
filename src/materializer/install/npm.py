"""Package-manager installation of package-style dependencies."""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from materializer.errors import PackageInstallError
from materializer.model import ComponentWithDependencies, WrittenComponent

PACKAGE_JSON = "package.json"

CommandRunner = Callable[..., subprocess.CompletedProcess[str]]


@dataclass(slots=True, frozen=True)
class InstallReport:
    """Directories where the package manager ran and the commands used."""

    directories: tuple[Path, ...]
    commands: tuple[tuple[str, ...], ...]
    output: str


class NpmInstaller:
    """Runs ``<package_manager> install`` in each written component directory."""

    def __init__(self, package_manager: str = "npm", runner: CommandRunner | None = None) -> None:
        self._package_manager = package_manager
        self._runner = runner or subprocess.run

    def install(
        self,
        graphs: Sequence[ComponentWithDependencies],
        written_components: Sequence[WrittenComponent],
        *,
        verbose: bool = False,
        silent: bool = False,
        install_peer_dependencies: bool = False,
    ) -> InstallReport:
        """Install dependencies for every written top-level component with a manifest."""
        peers = {
            graph.component.id: dict(graph.component.peer_dependencies) for graph in graphs
        }
        directories: list[Path] = []
        commands: list[tuple[str, ...]] = []
        outputs: list[str] = []
        for written in sorted(written_components, key=lambda item: str(item.path)):
            if not (written.path / PACKAGE_JSON).is_file():
                continue
            planned = [self._command("install", verbose=verbose, silent=silent)]
            peer_specs = peers.get(written.id, {})
            if install_peer_dependencies and peer_specs:
                specs = [f"{name}@{version}" for name, version in sorted(peer_specs.items())]
                planned.append(self._command("install", *specs, verbose=verbose, silent=silent))
            for command in planned:
                outputs.append(self._run(command, written.path))
                commands.append(command)
            directories.append(written.path)
        return InstallReport(
            directories=tuple(directories),
            commands=tuple(commands),
            output="" if silent else "".join(outputs),
        )

    def _command(self, *args: str, verbose: bool, silent: bool) -> tuple[str, ...]:
        command = [self._package_manager, *args]
        if verbose:
            command.append("--verbose")
        if silent:
            command.append("--silent")
        return tuple(command)

    def _run(self, command: tuple[str, ...], cwd: Path) -> str:
        try:
            completed = self._runner(
                list(command),
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise PackageInstallError(
                reason=f"Unable to run {command[0]}: {exc.strerror or exc}.",
                hint="Install the package manager or configure workspace.package_manager.",
                path=cwd,
            ) from exc
        if completed.returncode != 0:
            raise PackageInstallError(
                reason=f"{' '.join(command)} exited with code {completed.returncode} in {cwd}.",
                hint="Fix the package manager error and re-run the install step.",
                path=cwd,
                stderr=completed.stderr or "",
            )
        return completed.stdout or ""
