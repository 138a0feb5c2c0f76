"""Persisted pipeline state: token snapshots and JSON reports."""

from __future__ import annotations

from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import DesignSyncError, ExitCode
from ..logging import get_logger
from ..models import TokenCollection

_SNAPSHOT_VERSION = 1

PROCESSED_SNAPSHOT = "processed.json"
RAW_SNAPSHOT = "raw.json"
CUSTOM_SECTIONS_REPORT = "custom-sections.json"
GENERATION_REPORT = "generation-report.json"
TAG_PATTERNS_REPORT = "tag-patterns.json"


class SnapshotStore:
    """Reads and writes the JSON state kept under the output directory."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.logger = get_logger("stores.snapshots")

    @property
    def processed_path(self) -> Path:
        return self.output_dir / PROCESSED_SNAPSHOT

    @property
    def raw_path(self) -> Path:
        return self.output_dir / RAW_SNAPSHOT

    def load_processed(self) -> Optional[TokenCollection]:
        """Return the previous normalized collection, or ``None`` on first run."""
        return self._load_collection(self.processed_path)

    def load_raw(self) -> Optional[TokenCollection]:
        return self._load_collection(self.raw_path)

    def save_processed(self, collection: TokenCollection) -> Path:
        return self._write(self.processed_path, self._envelope(collection))

    def save_raw(self, collection: TokenCollection) -> Path:
        return self._write(self.raw_path, self._envelope(collection))

    def write_report(self, file_name: str, payload: Dict[str, Any]) -> Path:
        return self._write(self.output_dir / file_name, payload)

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _envelope(collection: TokenCollection) -> Dict[str, Any]:
        return {
            "version": _SNAPSHOT_VERSION,
            "saved_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "collection": collection.to_dict(),
        }

    def _load_collection(self, path: Path) -> Optional[TokenCollection]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            self.logger.warning("Ignoring unreadable snapshot %s: %s", path, exc)
            return None
        if not isinstance(data, dict) or data.get("version") != _SNAPSHOT_VERSION:
            self.logger.warning("Ignoring snapshot %s with unsupported version", path)
            return None
        payload = data.get("collection")
        if not isinstance(payload, dict):
            return None
        return TokenCollection.from_dict(payload)

    def _write(self, path: Path, payload: Dict[str, Any]) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(payload, indent=2, sort_keys=True, default=str) + "\n",
                encoding="utf-8",
            )
        except OSError as exc:
            raise DesignSyncError(
                ExitCode.FILE_SYSTEM_ERROR, f"Failed to write {path}: {exc}"
            ) from exc
        self.logger.debug("Wrote %s", path)
        return path


__all__ = [
    "CUSTOM_SECTIONS_REPORT",
    "GENERATION_REPORT",
    "PROCESSED_SNAPSHOT",
    "RAW_SNAPSHOT",
    "SnapshotStore",
    "TAG_PATTERNS_REPORT",
]
