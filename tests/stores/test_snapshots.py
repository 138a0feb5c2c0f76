from __future__ import annotations

import json
from pathlib import Path

import pytest

from designsync.errors import DesignSyncError, ExitCode
from designsync.models import TokenCollection
from designsync.stores import SnapshotStore


def test_processed_snapshot_round_trip(tmp_path: Path, normalized_tokens: TokenCollection) -> None:
    store = SnapshotStore(tmp_path / "state")

    path = store.save_processed(normalized_tokens)

    assert path == tmp_path / "state" / "processed.json"
    envelope = json.loads(path.read_text(encoding="utf-8"))
    assert envelope["version"] == 1
    assert envelope["saved_at"].endswith("Z")
    loaded = store.load_processed()
    assert loaded is not None
    assert [token.name for token in loaded.tokens] == [token.name for token in normalized_tokens.tokens]
    assert loaded.tokens[0].tags == normalized_tokens.tokens[0].tags


def test_missing_snapshot_is_first_run(tmp_path: Path) -> None:
    assert SnapshotStore(tmp_path).load_processed() is None
    assert SnapshotStore(tmp_path).load_raw() is None


@pytest.mark.parametrize(
    "content",
    ["{not json", json.dumps({"version": 99, "collection": {}}), json.dumps([1, 2])],
)
def test_unusable_snapshot_is_ignored(
    tmp_path: Path, content: str, caplog: pytest.LogCaptureFixture
) -> None:
    (tmp_path / "processed.json").write_text(content, encoding="utf-8")

    with caplog.at_level("WARNING", logger="designsync"):
        assert SnapshotStore(tmp_path).load_processed() is None

    assert "Ignoring" in caplog.text


def test_write_report_sorts_keys(tmp_path: Path) -> None:
    path = SnapshotStore(tmp_path).write_report("generation-report.json", {"b": 1, "a": 2})

    assert path.read_text(encoding="utf-8") == '{\n  "a": 2,\n  "b": 1\n}\n'


def test_write_failure_maps_to_file_system_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(DesignSyncError) as excinfo:
        SnapshotStore(blocker / "state").write_report("x.json", {})

    assert excinfo.value.exit_code == ExitCode.FILE_SYSTEM_ERROR
