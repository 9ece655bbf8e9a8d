"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

CONFIG_FILE_NAME = "materializer.toml"
DEFAULT_DATA_DIR_NAME = ".materializer"
DEFAULT_COMPONENTS_DIRECTORY = "components/{namespace}/{name}"
DEFAULT_DEPENDENCIES_DIRECTORY = "components/.dependencies"
DEFAULT_REGISTRY_PREFIX = "@bit"
DEFAULT_PACKAGE_MANAGER = "npm"
DEFAULT_MAX_WORKERS = 4
MAX_WORKERS_CAP = 64


class PersistMode(StrEnum):
    """When prepared component files are flushed to disk."""

    DEFERRED = "deferred"
    IMMEDIATE = "immediate"


@dataclass(slots=True, frozen=True)
class LayoutConfig:
    """Directory templates for components and nested dependencies."""

    components_directory: str
    dependencies_directory: str


@dataclass(slots=True, frozen=True)
class RemotesConfig:
    """Remote scopes that are self-hosted and therefore not hub-capable."""

    self_hosted: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class WorkspaceConfig:
    """Fully merged workspace configuration."""

    workspace_root: Path
    data_dir: Path
    layout: LayoutConfig
    remotes: RemotesConfig
    registry_prefix: str
    manage_workspaces: bool
    package_manager: str
    max_workers: int

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "workspace_root": str(self.workspace_root),
            "data_dir": str(self.data_dir),
            "layout": {
                "components_directory": self.layout.components_directory,
                "dependencies_directory": self.layout.dependencies_directory,
            },
            "remotes": {"self_hosted": list(self.remotes.self_hosted)},
            "registry_prefix": self.registry_prefix,
            "manage_workspaces": self.manage_workspaces,
            "package_manager": self.package_manager,
            "max_workers": self.max_workers,
        }


@dataclass(slots=True, frozen=True)
class WorkspaceOverrides:
    """Optional programmatic overrides applied at highest precedence."""

    data_dir: Path | None = None
    components_directory: str | None = None
    dependencies_directory: str | None = None
    self_hosted: tuple[str, ...] | None = None
    manage_workspaces: bool | None = None
    package_manager: str | None = None
    max_workers: int | None = None


@dataclass(slots=True, frozen=True)
class MaterializeOptions:
    """Per-run switches controlling placement, manifests, install and linking."""

    write_to_path: Path | None = None
    override: bool = False
    write_package_json: bool = True
    write_config: bool = False
    config_dir: str | None = None
    write_bit_dependencies: bool = False
    create_npm_link_files: bool = False
    write_dists: bool = True
    save_dependencies_as_components: bool = False
    install_npm_packages: bool = True
    install_peer_dependencies: bool = False
    add_to_root_package_json: bool = True
    verbose: bool = False
    silent_package_manager_result: bool = False
    exclude_registry_prefix: bool = False
    isolated: bool = False
    persist_mode: PersistMode = PersistMode.DEFERRED
    max_workers: int | None = None

    def validate(self) -> None:
        """Raise ValueError for unusable option combinations."""
        if self.max_workers is not None and (
            not isinstance(self.max_workers, int) or self.max_workers < 1
        ):
            raise ValueError("Option 'max_workers' must be a positive integer.")
        if self.write_to_path is not None and not str(self.write_to_path).strip():
            raise ValueError("Option 'write_to_path' must be a non-empty path.")
        if not isinstance(self.persist_mode, PersistMode):
            raise ValueError("Option 'persist_mode' must be a PersistMode value.")

    def resolved_write_to_path(self) -> Path | None:
        """Return ``write_to_path`` as an absolute path, if one was requested."""
        if self.write_to_path is None:
            return None
        return Path(self.write_to_path).resolve()


def default_config(workspace_root: Path) -> WorkspaceConfig:
    """Build default config for a given workspace root."""
    resolved_root = workspace_root.resolve()
    return WorkspaceConfig(
        workspace_root=resolved_root,
        data_dir=resolved_root / DEFAULT_DATA_DIR_NAME,
        layout=LayoutConfig(
            components_directory=DEFAULT_COMPONENTS_DIRECTORY,
            dependencies_directory=DEFAULT_DEPENDENCIES_DIRECTORY,
        ),
        remotes=RemotesConfig(self_hosted=()),
        registry_prefix=DEFAULT_REGISTRY_PREFIX,
        manage_workspaces=False,
        package_manager=DEFAULT_PACKAGE_MANAGER,
        max_workers=DEFAULT_MAX_WORKERS,
    )


def load_workspace_config_file(workspace_root: Path) -> dict[str, object]:
    """Load optional materializer.toml from the workspace root."""
    config_path = workspace_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{name}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{name}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_str(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_positive_int_with_cap(value: object, name: str, default: int, cap: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value


def _components_template(value: object, name: str, default: str) -> str:
    template = _optional_str(value, name, default)
    if "{name}" not in template:
        raise ValueError(f"Config field '{name}' must contain the '{{name}}' placeholder.")
    return template


def merge_config(
    base: WorkspaceConfig, workspace_payload: dict[str, object], overrides: WorkspaceOverrides
) -> WorkspaceConfig:
    """Merge defaults, workspace config file, then programmatic overrides."""
    workspace_table = _get_table(workspace_payload, "workspace")
    remotes_table = _get_table(workspace_payload, "remotes")
    materialize_table = _get_table(workspace_payload, "materialize")

    self_hosted = base.remotes.self_hosted
    if "self_hosted" in remotes_table:
        self_hosted = _tuple_of_strings(remotes_table["self_hosted"], "remotes", "self_hosted")

    merged = WorkspaceConfig(
        workspace_root=base.workspace_root,
        data_dir=base.data_dir,
        layout=LayoutConfig(
            components_directory=_components_template(
                workspace_table.get("components_directory"),
                "workspace.components_directory",
                base.layout.components_directory,
            ),
            dependencies_directory=_optional_str(
                workspace_table.get("dependencies_directory"),
                "workspace.dependencies_directory",
                base.layout.dependencies_directory,
            ),
        ),
        remotes=RemotesConfig(self_hosted=self_hosted),
        registry_prefix=_optional_str(
            workspace_table.get("registry_prefix"),
            "workspace.registry_prefix",
            base.registry_prefix,
        ),
        manage_workspaces=_optional_bool(
            workspace_table.get("manage_workspaces"),
            "workspace.manage_workspaces",
            base.manage_workspaces,
        ),
        package_manager=_optional_str(
            workspace_table.get("package_manager"),
            "workspace.package_manager",
            base.package_manager,
        ),
        max_workers=_optional_positive_int_with_cap(
            materialize_table.get("max_workers"),
            "materialize.max_workers",
            base.max_workers,
            MAX_WORKERS_CAP,
        ),
    )
    return apply_overrides(merged, overrides)


def apply_overrides(config: WorkspaceConfig, overrides: WorkspaceOverrides) -> WorkspaceConfig:
    """Apply programmatic overrides at highest precedence."""
    layout = LayoutConfig(
        components_directory=_components_template(
            overrides.components_directory,
            "overrides.components_directory",
            config.layout.components_directory,
        ),
        dependencies_directory=_optional_str(
            overrides.dependencies_directory,
            "overrides.dependencies_directory",
            config.layout.dependencies_directory,
        ),
    )
    remotes = RemotesConfig(
        self_hosted=(
            tuple(overrides.self_hosted)
            if overrides.self_hosted is not None
            else config.remotes.self_hosted
        )
    )
    data_dir = Path(overrides.data_dir or config.data_dir)
    if not data_dir.is_absolute():
        data_dir = config.workspace_root / data_dir
    return WorkspaceConfig(
        workspace_root=config.workspace_root,
        data_dir=data_dir.resolve(),
        layout=layout,
        remotes=remotes,
        registry_prefix=config.registry_prefix,
        manage_workspaces=_optional_bool(
            overrides.manage_workspaces,
            "overrides.manage_workspaces",
            config.manage_workspaces,
        ),
        package_manager=_optional_str(
            overrides.package_manager, "overrides.package_manager", config.package_manager
        ),
        max_workers=_optional_positive_int_with_cap(
            overrides.max_workers, "overrides.max_workers", config.max_workers, MAX_WORKERS_CAP
        ),
    )


def load_effective_config(
    workspace_root: Path, overrides: WorkspaceOverrides | None = None
) -> WorkspaceConfig:
    """Load effective config using merge order defaults -> workspace file -> overrides."""
    resolved_root = workspace_root.resolve()
    base = default_config(resolved_root)
    payload = load_workspace_config_file(resolved_root)
    return merge_config(base, payload, overrides or WorkspaceOverrides())
