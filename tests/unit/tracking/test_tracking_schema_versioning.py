from __future__ import annotations

import json
from pathlib import Path

import pytest

from materializer.tracking import TrackingMap, TrackingSchemaUnsupportedError


def test_schema_version_mismatch_raises_explicit_error(tmp_path: Path) -> None:
    path = tmp_path / "tracking.json"
    path.write_text(
        json.dumps({"schema_version": 999, "components": [], "edges": {}}, sort_keys=True) + "\n",
        encoding="utf-8",
    )

    with pytest.raises(TrackingSchemaUnsupportedError) as excinfo:
        TrackingMap.load(path)

    assert excinfo.value.found == 999
    assert excinfo.value.expected == 1


def test_missing_schema_version_is_unsupported(tmp_path: Path) -> None:
    path = tmp_path / "tracking.json"
    path.write_text(json.dumps({"components": []}), encoding="utf-8")

    with pytest.raises(TrackingSchemaUnsupportedError) as excinfo:
        TrackingMap.load(path)

    assert excinfo.value.found == -1


def test_malformed_records_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "tracking.json"
    path.write_text(
        json.dumps(
            {
                "schema_version": 1,
                "components": [
                    {"id": "acme/ui/button@1.0.0", "origin": "IMPORTED", "root_dir": "b"},
                    {"id": "acme/ui/card", "origin": "UNKNOWN", "root_dir": "c"},
                    {"id": 42, "origin": "NESTED", "root_dir": "d"},
                    "not-an-object",
                ],
                "edges": {},
            }
        ),
        encoding="utf-8",
    )

    tracking_map = TrackingMap.load(path)

    assert [str(record.id) for record in tracking_map.records()] == ["acme/ui/button@1.0.0"]
