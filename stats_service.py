from __future__ import annotations
import datetime
import sqlite3
from typing import List, Optional, Dict

import structlog

from db import (
    Database,
    ExerciseRepository,
    HistoryRepository,
    MeasurementRepository,
)
from settings_schema import TrackerSettings
from tools import DateTools

logger = structlog.get_logger(__name__)


class StatisticsService:
    """Compute read-only workout and body statistics."""

    def __init__(
        self,
        db: Database,
        settings: TrackerSettings | None = None,
        history_repo: HistoryRepository | None = None,
        measurement_repo: MeasurementRepository | None = None,
        exercise_repo: ExerciseRepository | None = None,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self.history = history_repo or HistoryRepository(db)
        self.measurements = measurement_repo or MeasurementRepository(db)
        self.exercises = exercise_repo or ExerciseRepository(db)

    @staticmethod
    def week_start(today: Optional[datetime.date] = None) -> str:
        return DateTools.start_of_week(today)

    @staticmethod
    def month_start(today: Optional[datetime.date] = None) -> str:
        return DateTools.start_of_month(today)

    def workout_count_since(self, boundary: str) -> int:
        try:
            return self.history.count_dates_since(boundary)
        except sqlite3.Error as exc:
            logger.error("workout_count_failed", boundary=boundary, error=str(exc))
            return 0

    def weekly_count(self, today: Optional[datetime.date] = None) -> int:
        return self.workout_count_since(self.week_start(today))

    def monthly_count(self, today: Optional[datetime.date] = None) -> int:
        return self.workout_count_since(self.month_start(today))

    def volume_series(self, limit: Optional[int] = None) -> Dict[str, list]:
        """Total volume for the latest distinct training dates, oldest first."""
        if limit is None:
            limit = self.settings.stats_window
        try:
            rows = list(reversed(self.history.daily_volume(limit)))
        except sqlite3.Error as exc:
            logger.error("volume_series_failed", error=str(exc))
            return {"dates": [], "labels": [], "data": []}
        dates = [r["workout_date"] for r in rows]
        return {
            "dates": dates,
            "labels": [DateTools.short_label(d) for d in dates],
            "data": [float(r["vol"] or 0) for r in rows],
        }

    def personal_records(self, limit: Optional[int] = None) -> List[Dict[str, object]]:
        """Heaviest weight ever archived per exercise name."""
        try:
            rows = self.history.max_weights(limit=limit)
        except sqlite3.Error as exc:
            logger.error("personal_records_failed", error=str(exc))
            return []
        return [{"name": r["name"], "max_weight": r["max_weight"]} for r in rows]

    def paginated_personal_records(self, limit: int = 5, offset: int = 0) -> List[Dict[str, object]]:
        try:
            rows = self.history.max_weights(order_by_name=True, limit=limit, offset=offset)
        except sqlite3.Error as exc:
            logger.error("personal_records_failed", error=str(exc))
            return []
        return [{"name": r["name"], "max_weight": r["max_weight"]} for r in rows]

    def pr_count(self) -> int:
        try:
            return self.history.count_names()
        except sqlite3.Error as exc:
            logger.error("pr_count_failed", error=str(exc))
            return 0

    def body_stat_series(
        self, types: Optional[List[str]] = None, limit: Optional[int] = None
    ) -> Dict[str, list]:
        """One value per tracked type for each of the latest measurement days.

        A type without a sample on a given day reports None. When a day holds
        several samples of a type the latest timestamp wins.
        """
        types = types or list(self.settings.tracked_measurements)
        if limit is None:
            limit = self.settings.stats_window
        try:
            days = list(reversed(self.measurements.fetch_days(limit)))
            per_day = {day: self.measurements.fetch_for_day(day) for day in days}
        except sqlite3.Error as exc:
            logger.error("body_stat_series_failed", error=str(exc))
            days, per_day = [], {}
        data: Dict[str, list] = {t: [] for t in types}
        for day in days:
            values: Dict[str, float] = {}
            for row in per_day[day]:
                values[row["type"]] = row["value"]
            for t in types:
                data[t].append(values.get(t))
        return {
            "dates": days,
            "labels": [DateTools.short_label(d) for d in days],
            "datasets": [{"type": t, "data": data[t]} for t in types],
        }

    def muscles_trained_on(self, date: Optional[str] = None) -> List[str]:
        target = date or DateTools.local_date()
        try:
            return self.history.muscle_groups_on(target)
        except sqlite3.Error as exc:
            logger.error("muscles_trained_failed", date=target, error=str(exc))
            return []

    def workout_dates(self) -> List[str]:
        try:
            return self.history.fetch_dates()
        except sqlite3.Error as exc:
            logger.error("workout_dates_failed", error=str(exc))
            return []

    def workout_history(self, limit: Optional[int] = None, offset: int = 0) -> List[Dict[str, object]]:
        if limit is None:
            limit = self.settings.history_page_size
        try:
            days = self.history.fetch_dates(limit=limit, offset=offset, descending=True)
            result = []
            for day in days:
                logs = self.history.fetch_for_date(day)
                result.append(
                    {
                        "date": day,
                        "total_sets": sum(int(l["sets"] or 0) for l in logs),
                        "exercise_count": len(logs),
                        "exercises": ", ".join(l["name"] for l in logs),
                    }
                )
            return result
        except sqlite3.Error as exc:
            logger.error("workout_history_failed", error=str(exc))
            return []

    def workout_history_count(self) -> int:
        try:
            return len(self.history.fetch_dates())
        except sqlite3.Error as exc:
            logger.error("workout_history_count_failed", error=str(exc))
            return 0

    def session_details(self, date: str) -> List[Dict[str, object]]:
        try:
            return [dict(r) for r in self.history.fetch_for_date(date)]
        except sqlite3.Error as exc:
            logger.error("session_details_failed", date=date, error=str(exc))
            return []

    def exercise_progress(self, exercise_id: int, limit: Optional[int] = None) -> List[Dict[str, object]]:
        """Per-date best weight and reps plus total sets, oldest first."""
        if limit is None:
            limit = self.settings.progress_limit
        try:
            ex = self.exercises.fetch_detail(exercise_id)
            if ex is None:
                return []
            rows = self.history.progress_for_name(ex["name"], limit)
        except sqlite3.Error as exc:
            logger.error("exercise_progress_failed", exercise_id=exercise_id, error=str(exc))
            return []
        return [dict(r) for r in rows]

    def latest_body_stats(self, types: Optional[List[str]] = None) -> Dict[str, Optional[dict]]:
        types = types or list(self.settings.tracked_measurements)
        stats: Dict[str, Optional[dict]] = {}
        for t in types:
            try:
                row = self.measurements.fetch_latest(t)
            except sqlite3.Error as exc:
                logger.error("latest_body_stats_failed", type=t, error=str(exc))
                row = None
            stats[t] = {"value": row["value"], "date": row["date"][:10]} if row else None
        return stats

    def latest_weight(self) -> float:
        latest = self.latest_body_stats(["weight"])["weight"]
        return latest["value"] if latest else 0

    def last_measurement_date(self) -> Optional[str]:
        try:
            date = self.measurements.fetch_last_date()
        except sqlite3.Error as exc:
            logger.error("last_measurement_failed", error=str(exc))
            return None
        return date[:10] if date else None

    def measurement_history_grouped(self) -> List[Dict[str, object]]:
        types = list(self.settings.tracked_measurements)
        try:
            rows = self.measurements.fetch_all()
        except sqlite3.Error as exc:
            logger.error("measurement_history_failed", error=str(exc))
            return []
        grouped: Dict[str, Dict[str, object]] = {}
        for row in rows:
            day = row["date"][:10]
            entry = grouped.setdefault(day, {"date": day, "data": {t: "-" for t in types}})
            # rows arrive newest first; keep the latest sample per type
            if row["type"] in types and entry["data"][row["type"]] == "-":
                unit = row["unit"] or self.settings.measurement_units.get(row["type"], "")
                entry["data"][row["type"]] = f"{row['value']} {unit}".strip()
        return list(grouped.values())
