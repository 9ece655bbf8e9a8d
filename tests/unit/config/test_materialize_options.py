from __future__ import annotations

from pathlib import Path

import pytest

from materializer.config import MaterializeOptions, PersistMode


def test_option_defaults() -> None:
    options = MaterializeOptions()

    assert options.override is False
    assert options.write_package_json is True
    assert options.write_config is False
    assert options.write_bit_dependencies is False
    assert options.create_npm_link_files is False
    assert options.write_dists is True
    assert options.save_dependencies_as_components is False
    assert options.install_npm_packages is True
    assert options.install_peer_dependencies is False
    assert options.add_to_root_package_json is True
    assert options.exclude_registry_prefix is False
    assert options.isolated is False
    assert options.persist_mode == PersistMode.DEFERRED
    assert options.write_to_path is None
    assert options.resolved_write_to_path() is None


@pytest.mark.parametrize("max_workers", [0, -1])
def test_validate_rejects_non_positive_workers(max_workers: int) -> None:
    with pytest.raises(ValueError, match="max_workers"):
        MaterializeOptions(max_workers=max_workers).validate()


def test_validate_rejects_blank_write_to_path() -> None:
    with pytest.raises(ValueError, match="write_to_path"):
        MaterializeOptions(write_to_path=Path("   ")).validate()


def test_resolved_write_to_path_is_absolute(tmp_path: Path) -> None:
    options = MaterializeOptions(write_to_path=tmp_path / "apps" / ".." / "button")

    assert options.resolved_write_to_path() == (tmp_path / "button").resolve()
