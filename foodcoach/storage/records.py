from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..analysis.images import ImagePayload
from ..analysis.models import AnalysisResult
from ..health.records import HealthTestResult
from ..utils.time import iso_now, now_ms

logger = logging.getLogger(__name__)

FOOD_ANALYSES = "food_analyses"
HEALTH_TESTS = "health_tests"
IMAGE_BUCKET = "food-images"


@dataclass
class RecordStore:
    """Per-user JSON tables for saved analyses and health test history."""

    root: Path

    def __post_init__(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def _sanitize_id(self, user_id: str) -> str:
        safe = "".join(ch for ch in str(user_id) if ch.isalnum() or ch in ("-", "_"))
        if not safe:
            raise ValueError("Invalid user_id")
        return safe

    def _table_path(self, table: str, user_id: str) -> Path:
        out = self.root / table
        out.mkdir(parents=True, exist_ok=True)
        return out / f"{self._sanitize_id(user_id)}.json"

    def _read(self, table: str, user_id: str) -> List[Dict[str, Any]]:
        path = self._table_path(table, user_id)
        if not path.exists():
            return []
        try:
            rows = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable table file %s", path)
            return []
        if not isinstance(rows, list):
            return []
        return [row for row in rows if isinstance(row, dict)]

    def _write(self, table: str, user_id: str, rows: List[Dict[str, Any]]) -> None:
        path = self._table_path(table, user_id)
        path.write_text(json.dumps(rows, indent=2, allow_nan=False), encoding="utf-8")

    def _insert(self, table: str, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        row = {"id": uuid.uuid4().hex, "user_id": str(user_id), "created_at": iso_now()}
        row.update(payload)
        rows = self._read(table, user_id)
        rows.append(row)
        self._write(table, user_id, rows)
        return row

    def _list(self, table: str, user_id: str) -> List[Dict[str, Any]]:
        rows = self._read(table, user_id)
        # Stable sort keeps insertion order for rows created in the same second.
        indexed = list(enumerate(rows))
        indexed.sort(key=lambda pair: (str(pair[1].get("created_at", "")), pair[0]), reverse=True)
        return [row for _, row in indexed]

    def _delete(self, table: str, user_id: str, record_id: str) -> None:
        rows = self._read(table, user_id)
        kept = [row for row in rows if str(row.get("id")) != str(record_id)]
        if len(kept) == len(rows):
            raise KeyError(f"No {table} record {record_id!r} for user {user_id!r}")
        self._write(table, user_id, kept)

    def upload_image(self, payload: ImagePayload, user_id: str, timestamp_ms: Optional[int] = None) -> str:
        name = payload.storage_name(self._sanitize_id(user_id), timestamp_ms or now_ms())
        out = self.root / IMAGE_BUCKET / name
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(payload.data)
        return out.resolve().as_uri()

    def insert_analysis(self, user_id: str, image_url: str, analysis: AnalysisResult) -> Dict[str, Any]:
        return self._insert(
            FOOD_ANALYSES,
            user_id,
            {"image_url": image_url, "analysis_data": analysis.to_dict()},
        )

    def list_analyses(self, user_id: str) -> List[Dict[str, Any]]:
        return self._list(FOOD_ANALYSES, user_id)

    def delete_analysis(self, user_id: str, record_id: str) -> None:
        self._delete(FOOD_ANALYSES, user_id, record_id)

    def insert_health_test(self, user_id: str, result: HealthTestResult) -> Dict[str, Any]:
        return self._insert(HEALTH_TESTS, user_id, result.to_record())

    def list_health_tests(self, user_id: str, test_type: Optional[str] = None) -> List[Dict[str, Any]]:
        rows = self._list(HEALTH_TESTS, user_id)
        if test_type is not None:
            rows = [row for row in rows if row.get("test_type") == test_type]
        return rows

    def delete_health_test(self, user_id: str, record_id: str) -> None:
        self._delete(HEALTH_TESTS, user_id, record_id)
