from __future__ import annotations

import json
import sqlite3
from typing import Any, Mapping

import structlog
from pydantic import ValidationError

from db import Database, SnapshotRepository
from schemas import SNAPSHOT_VERSION, OperationResult, Snapshot
from tools import DateTools

logger = structlog.get_logger(__name__)


class BackupService:
    """Export and restore the whole data set as one document."""

    def __init__(self, db: Database, snapshot_repo: SnapshotRepository | None = None) -> None:
        self.db = db
        self.snapshots = snapshot_repo or SnapshotRepository(db)

    @property
    def tables(self) -> list[str]:
        return Database.managed_tables()

    def export_snapshot(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": SNAPSHOT_VERSION,
            "exportedAt": DateTools.local_timestamp(),
        }
        data.update(self.snapshots.read_tables(self.tables))
        return data

    def export_json(self) -> str:
        return json.dumps(self.export_snapshot())

    def export_to_file(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.export_snapshot(), f, indent=2)

    def _validate(self, payload: Mapping | str) -> tuple[dict[str, list[dict]], list[str]]:
        """Return rows per table plus the derived column lists.

        Raises ValueError for anything that must not reach the store.
        """
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise ValueError(f"snapshot is not valid JSON: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise ValueError("snapshot must be an object")
        try:
            snapshot = Snapshot.model_validate(dict(payload))
        except ValidationError as exc:
            raise ValueError(f"invalid snapshot: {exc}") from exc
        rows: dict[str, list[dict]] = {}
        dropped: list[str] = []
        for table in self.tables:
            table_rows = snapshot.table_rows(table)
            if not table_rows:
                continue
            known = Database.table_columns(table)
            keys = [k for k in table_rows[0].keys() if k in known]
            dropped.extend(f"{table}.{k}" for k in table_rows[0].keys() if k not in known)
            if not keys:
                raise ValueError(f"{table} rows have no known columns")
            rows[table] = [{k: row.get(k) for k in keys} for row in table_rows]
        return rows, dropped

    def import_snapshot(self, payload: Mapping | str) -> OperationResult:
        """Replace every managed table with the snapshot contents atomically."""
        try:
            rows, dropped = self._validate(payload)
        except ValueError as exc:
            logger.warning("snapshot_rejected", error=str(exc))
            return OperationResult(False, str(exc))
        if dropped:
            logger.warning("snapshot_columns_ignored", columns=dropped)
        try:
            with self.db.transaction() as conn:
                SnapshotRepository.clear(conn, self.tables)
                for table in self.tables:
                    if table in rows:
                        SnapshotRepository.bulk_insert(conn, table, rows[table])
        except (sqlite3.Error, OverflowError, ValueError) as exc:
            logger.error("snapshot_import_failed", error=str(exc))
            return OperationResult(False, f"Restore failed: {exc}")
        logger.info("snapshot_imported", tables={t: len(r) for t, r in rows.items()})
        return OperationResult(True)

    def import_from_file(self, path: str) -> OperationResult:
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as exc:
            return OperationResult(False, f"Could not read {path}: {exc}")
        return self.import_snapshot(text)

    def reset_all(self) -> OperationResult:
        try:
            with self.db.transaction() as conn:
                SnapshotRepository.clear(conn, self.tables)
        except sqlite3.Error as exc:
            logger.error("reset_failed", error=str(exc))
            return OperationResult(False, f"Reset failed: {exc}")
        logger.info("data_reset")
        return OperationResult(True)
