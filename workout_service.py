from __future__ import annotations

import sqlite3
from typing import Optional

import structlog

from db import (
    Database,
    WorkoutRepository,
    SessionExerciseRepository,
    HistoryRepository,
)
from schemas import SaveResult
from tools import ValueTools, DateTools

logger = structlog.get_logger(__name__)


class WorkoutService:
    """Coordinates daily logs, their exercise links and set archival."""

    def __init__(
        self,
        db: Database,
        workout_repo: WorkoutRepository | None = None,
        link_repo: SessionExerciseRepository | None = None,
        history_repo: HistoryRepository | None = None,
    ) -> None:
        self.db = db
        self.workouts = workout_repo or WorkoutRepository(db)
        self.links = link_repo or SessionExerciseRepository(db)
        self.history = history_repo or HistoryRepository(db)

    def ensure_link(self, exercise_id: int, date: str | None = None) -> Optional[int]:
        """Return the link id for ``exercise_id`` on ``date``, creating rows as needed.

        Returns None when the store cannot be written.
        """
        target = date or DateTools.local_date()
        try:
            with self.db.transaction() as conn:
                workout_id = WorkoutRepository.find_or_create(conn, target)
                return SessionExerciseRepository.find_or_create(
                    conn, workout_id, exercise_id
                )
        except (sqlite3.Error, OverflowError, ValueError) as exc:
            logger.error(
                "ensure_link_failed",
                exercise_id=exercise_id,
                date=target,
                error=str(exc),
            )
            return None

    def save_set(
        self,
        link_id: int,
        weight,
        reps,
        set_count,
        notes: str | None = None,
        completed: bool = False,
    ) -> SaveResult:
        w = ValueTools.to_number(weight)
        r = ValueTools.to_number(reps, integer=True)
        s = ValueTools.to_number(set_count, integer=True)
        n = ValueTools.text(notes)
        try:
            self.links.update(link_id, w, r, s, n, bool(completed))
        except (sqlite3.Error, OverflowError, ValueError) as exc:
            logger.error("save_set_failed", link_id=link_id, error=str(exc))
            return SaveResult(False, f"Could not save set: {exc}")
        if not completed:
            return SaveResult(True)
        archived, message = self._archive(link_id, w, r, s, n)
        return SaveResult(True, archived=archived, archive_message=message)

    def _archive(
        self, link_id: int, weight: float, reps: int, sets: int, notes: str
    ) -> tuple[bool, Optional[str]]:
        # The draft is already committed and stays so even if this fails.
        try:
            with self.db.transaction() as conn:
                source = self.links.fetch_archive_source(conn, link_id)
                if source is None:
                    raise LookupError("link has no exercise or session")
                HistoryRepository.replace(
                    conn,
                    source["scheduled_date"],
                    source["name"],
                    source["muscle_group"],
                    weight,
                    reps,
                    sets,
                    notes,
                )
        except (sqlite3.Error, OverflowError, ValueError, LookupError) as exc:
            logger.warning("history_mirror_failed", link_id=link_id, error=str(exc))
            return False, f"Could not save history: {exc}"
        return True, None

    def today_logs(self, date: str | None = None) -> dict[int, dict]:
        target = date or DateTools.local_date()
        try:
            rows = self.links.fetch_for_date(target)
        except sqlite3.Error as exc:
            logger.error("today_logs_failed", date=target, error=str(exc))
            return {}
        progress: dict[int, dict] = {}
        for row in rows:
            progress[row["exercise_id"]] = {
                "sets_logged": row["set_count"],
                "last_weight": row["weight"],
                "last_reps": row["reps"],
                "is_completed": row["is_completed"] == 1,
                "notes": row["notes"],
                "link_id": row["id"],
            }
        return progress

    def link_detail(self, link_id: int) -> Optional[dict]:
        try:
            row = self.links.fetch_detail(link_id)
        except sqlite3.Error as exc:
            logger.error("link_detail_failed", link_id=link_id, error=str(exc))
            return None
        return dict(row) if row else None

    def next_pending_workout(self) -> Optional[dict]:
        try:
            row = self.workouts.fetch_next_pending()
        except sqlite3.Error as exc:
            logger.error("next_workout_failed", error=str(exc))
            return None
        return dict(row) if row else None
