from __future__ import annotations

import sqlite3
from typing import Mapping, Optional

import structlog

from db import (
    Database,
    ExerciseRepository,
    HistoryRepository,
    SessionExerciseRepository,
)
from schemas import Draft
from tools import ValueTools, DateTools

logger = structlog.get_logger(__name__)


class DraftResolver:
    """Compute the suggested ("ghost") values shown for an exercise.

    Each field is resolved on its own: a positive session value wins, then
    the most recent archived record for the exercise name, then the
    exercise's default hint, then zero. Weight has no default hint.
    """

    def __init__(
        self,
        db: Database,
        exercise_repo: ExerciseRepository | None = None,
        history_repo: HistoryRepository | None = None,
        link_repo: SessionExerciseRepository | None = None,
    ) -> None:
        self.exercises = exercise_repo or ExerciseRepository(db)
        self.history = history_repo or HistoryRepository(db)
        self.links = link_repo or SessionExerciseRepository(db)

    @staticmethod
    def _get(row: Mapping | None, *keys: str):
        if row is None:
            return None
        for key in keys:
            try:
                value = row[key]
            except (KeyError, IndexError):
                continue
            if value is not None:
                return value
        return None

    def last_session_stats(self, exercise_id: int) -> Optional[dict]:
        try:
            ex = self.exercises.fetch_detail(exercise_id)
            if ex is None:
                return None
            row = self.history.fetch_latest_for_name(ex["name"])
        except sqlite3.Error as exc:
            logger.error("last_session_stats_failed", exercise_id=exercise_id, error=str(exc))
            return None
        return dict(row) if row else None

    def resolve_draft(self, exercise: Mapping, current: Mapping | None = None) -> Draft:
        last = self.history.fetch_latest_for_name(exercise["name"])
        draft = Draft()

        def pick(field: str, session_value, history_value, default_value, integer: bool):
            session_num = ValueTools.positive(session_value)
            if session_num is not None:
                value, source = session_num, "session"
            elif history_value is not None:
                value, source = ValueTools.to_number(history_value), "history"
            elif ValueTools.positive(default_value) is not None:
                value, source = ValueTools.to_number(default_value), "default"
            else:
                value, source = 0, "empty"
            setattr(draft, field, int(value) if integer else value)
            draft.sources[field] = source

        pick("weight", self._get(current, "weight"), self._get(last, "weight"), None, False)
        pick(
            "reps",
            self._get(current, "reps"),
            self._get(last, "reps"),
            self._get(exercise, "default_reps"),
            True,
        )
        pick(
            "sets",
            self._get(current, "set_count", "sets"),
            self._get(last, "sets"),
            self._get(exercise, "default_sets"),
            True,
        )

        for source, text in (
            ("session", self._get(current, "notes")),
            ("history", self._get(last, "notes")),
            ("default", self._get(exercise, "notes")),
        ):
            if text:
                draft.notes, draft.sources["notes"] = text, source
                break
        else:
            draft.notes, draft.sources["notes"] = "", "empty"
        return draft

    def resolve_for_exercise(self, exercise_id: int, date: str | None = None) -> Optional[Draft]:
        """Load the exercise and its link for ``date`` and resolve the draft."""
        target = date or DateTools.local_date()
        try:
            exercise = self.exercises.fetch_detail(exercise_id)
            if exercise is None:
                return None
            current = self.links.fetch_for_exercise_on(exercise_id, target)
            return self.resolve_draft(exercise, current)
        except sqlite3.Error as exc:
            logger.error("resolve_draft_failed", exercise_id=exercise_id, error=str(exc))
            return None
