import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, Body, Response

from config import YamlConfig
from db import (
    Database,
    ExerciseRepository,
    WorkoutRepository,
    SessionExerciseRepository,
    HistoryRepository,
    MeasurementRepository,
    PlanRepository,
    PlanSectionRepository,
    PlanExerciseRepository,
    SnapshotRepository,
)
from workout_service import WorkoutService
from draft_service import DraftResolver
from stats_service import StatisticsService
from planner_service import PlanService
from backup_service import BackupService
from seed_sample_data import seed_fullbody_plan
from schemas import (
    ExercisePayload,
    MeasurementPayload,
    PlanDefinition,
    SetPayload,
)
from tools import DateTools

CONFIRMATION = "Yes, I confirm"


class TrackerAPI:
    """Composition root exposing the workout engine over REST."""

    def __init__(
        self,
        db_path: str | None = None,
        yaml_path: str = "settings.yaml",
    ) -> None:
        self.config = YamlConfig(yaml_path)
        self.settings = self.config.settings()
        self.db_path = db_path or self.settings.db_path
        self.db = Database(self.db_path)
        self.exercises = ExerciseRepository(self.db)
        self.workouts = WorkoutRepository(self.db)
        self.links = SessionExerciseRepository(self.db)
        self.history = HistoryRepository(self.db)
        self.measurements = MeasurementRepository(self.db)
        self.plans = PlanRepository(self.db)
        self.plan_sections = PlanSectionRepository(self.db)
        self.plan_exercises = PlanExerciseRepository(self.db)
        self.snapshots = SnapshotRepository(self.db)
        self.sessions = WorkoutService(self.db, self.workouts, self.links, self.history)
        self.drafts = DraftResolver(self.db, self.exercises, self.history, self.links)
        self.statistics = StatisticsService(
            self.db,
            self.settings,
            self.history,
            self.measurements,
            self.exercises,
        )
        self.planner = PlanService(
            self.db, self.plans, self.plan_sections, self.plan_exercises
        )
        self.backup = BackupService(self.db, self.snapshots)
        self.app = FastAPI(
            title="Workout Tracker API",
            description="Local REST API for daily workout logging and history",
        )
        self._setup_routes()

    @staticmethod
    def _parse_today(today: Optional[str]) -> Optional[datetime.date]:
        if not today:
            return None
        try:
            return DateTools.parse_date(today)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid date")

    def _setup_routes(self) -> None:
        @self.app.get("/health")
        def health():
            return {"status": "ok", "schema_version": self.db.schema_version()}

        @self.app.post("/exercises")
        def add_exercise(payload: ExercisePayload):
            try:
                eid = self.exercises.add(
                    payload.name,
                    payload.muscle_group,
                    payload.notes,
                    payload.default_sets,
                    payload.default_reps,
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": eid}

        @self.app.get("/exercises")
        def list_exercises():
            return [dict(r) for r in self.exercises.fetch_all()]

        @self.app.get("/exercises/{exercise_id}")
        def get_exercise(exercise_id: int):
            row = self.exercises.fetch_detail(exercise_id)
            if row is None:
                raise HTTPException(status_code=404, detail="exercise not found")
            return dict(row)

        @self.app.put("/exercises/{exercise_id}/notes")
        def update_exercise_notes(exercise_id: int, notes: str = Body("", embed=True)):
            try:
                self.exercises.update_notes(exercise_id, notes)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "updated"}

        @self.app.put("/exercises/{exercise_id}/defaults")
        def update_exercise_defaults(exercise_id: int, sets: str, reps: str):
            try:
                self.exercises.update_defaults(exercise_id, sets, reps)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "updated"}

        @self.app.put("/exercises/{exercise_id}/name")
        def rename_exercise(exercise_id: int, name: str):
            try:
                self.exercises.rename(exercise_id, name)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "updated"}

        @self.app.delete("/exercises/{exercise_id}")
        def delete_exercise(exercise_id: int):
            try:
                self.exercises.delete(exercise_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "deleted"}

        @self.app.get("/exercises/{exercise_id}/draft")
        def exercise_draft(exercise_id: int, date: str = None):
            draft = self.drafts.resolve_for_exercise(exercise_id, date)
            if draft is None:
                raise HTTPException(status_code=404, detail="exercise not found")
            return draft.as_dict()

        @self.app.get("/exercises/{exercise_id}/last")
        def exercise_last(exercise_id: int):
            return self.drafts.last_session_stats(exercise_id)

        @self.app.get("/exercises/{exercise_id}/progress")
        def exercise_progress(exercise_id: int, limit: int = None):
            return self.statistics.exercise_progress(exercise_id, limit)

        @self.app.post("/sessions/link")
        def ensure_link(exercise_id: int, date: str = None):
            link_id = self.sessions.ensure_link(exercise_id, date)
            if link_id is None:
                raise HTTPException(status_code=500, detail="could not open session")
            return {"id": link_id}

        @self.app.get("/sessions/logs")
        def session_logs(date: str = None):
            logs = self.sessions.today_logs(date)
            return [{"exercise_id": k, **v} for k, v in logs.items()]

        @self.app.get("/sessions/next")
        def next_workout():
            return self.sessions.next_pending_workout()

        @self.app.get("/links/{link_id}")
        def get_link(link_id: int):
            detail = self.sessions.link_detail(link_id)
            if detail is None:
                raise HTTPException(status_code=404, detail="link not found")
            return detail

        @self.app.put("/links/{link_id}")
        def save_set(link_id: int, payload: SetPayload):
            result = self.sessions.save_set(
                link_id,
                payload.weight,
                payload.reps,
                payload.sets,
                payload.notes,
                payload.completed,
            )
            if not result:
                raise HTTPException(status_code=500, detail=result.message)
            return {
                "status": "saved",
                "archived": result.archived,
                "archive_message": result.archive_message,
            }

        @self.app.get("/history")
        def workout_history(limit: int = None, offset: int = 0):
            return {
                "items": self.statistics.workout_history(limit, offset),
                "total": self.statistics.workout_history_count(),
            }

        @self.app.get("/history/dates")
        def workout_dates():
            return self.statistics.workout_dates()

        @self.app.get("/history/{date}")
        def session_details(date: str):
            return self.statistics.session_details(date)

        @self.app.delete("/history/{date}")
        def delete_history(date: str):
            removed = self.history.delete_by_date(date)
            return {"status": "deleted", "removed": removed}

        @self.app.post("/measurements")
        def add_measurement(payload: MeasurementPayload):
            mid = self.measurements.add(
                payload.type, payload.value, payload.unit, payload.date
            )
            return {"id": mid}

        @self.app.get("/measurements")
        def measurement_history():
            return self.statistics.measurement_history_grouped()

        @self.app.get("/measurements/latest")
        def latest_measurements():
            return self.statistics.latest_body_stats()

        @self.app.delete("/measurements/{date}")
        def delete_measurements(date: str):
            removed = self.measurements.delete_by_date(date)
            return {"status": "deleted", "removed": removed}

        @self.app.get("/stats/overview")
        def stats_overview(today: str = None):
            day = self._parse_today(today)
            return {
                "weekly_count": self.statistics.weekly_count(day),
                "monthly_count": self.statistics.monthly_count(day),
                "pr_count": self.statistics.pr_count(),
                "latest_weight": self.statistics.latest_weight(),
                "last_measurement": self.statistics.last_measurement_date(),
            }

        @self.app.get("/stats/volume")
        def stats_volume(limit: int = None):
            return self.statistics.volume_series(limit)

        @self.app.get("/stats/records")
        def stats_records(limit: int = None, offset: int = None):
            if offset is not None:
                return self.statistics.paginated_personal_records(
                    self.settings.personal_record_limit if limit is None else limit, offset
                )
            return self.statistics.personal_records(
                self.settings.personal_record_limit if limit is None else limit
            )

        @self.app.get("/stats/body")
        def stats_body(limit: int = None):
            return self.statistics.body_stat_series(limit=limit)

        @self.app.get("/stats/muscles")
        def stats_muscles(date: str = None):
            return self.statistics.muscles_trained_on(date)

        @self.app.post("/plans")
        def create_plan(definition: PlanDefinition):
            plan_id = self.planner.create_from_definition(definition)
            if plan_id is None:
                raise HTTPException(status_code=500, detail="could not create plan")
            return {"id": plan_id}

        @self.app.get("/plans")
        def list_plans():
            return self.planner.fetch_plans()

        @self.app.get("/plans/{plan_id}")
        def plan_details(plan_id: int):
            if self.plans.fetch_detail(plan_id) is None:
                raise HTTPException(status_code=404, detail="plan not found")
            return self.planner.plan_details(plan_id)

        @self.app.put("/plans/{plan_id}")
        def replace_plan(plan_id: int, definition: PlanDefinition):
            if self.planner.replace_plan(plan_id, definition) is None:
                raise HTTPException(status_code=404, detail="plan not found")
            return {"id": plan_id}

        @self.app.delete("/plans/{plan_id}")
        def delete_plan(plan_id: int):
            result = self.planner.delete_plan(plan_id)
            if not result:
                raise HTTPException(status_code=404, detail=result.message)
            return {"status": "deleted"}

        @self.app.post("/plans/seed")
        def seed_plan():
            result = seed_fullbody_plan(self.db)
            if not result:
                raise HTTPException(status_code=500, detail=result.message)
            return {"status": "seeded"}

        @self.app.get("/settings/backup")
        def backup_db():
            return Response(
                content=self.backup.export_json(),
                media_type="application/json",
                headers={"Content-Disposition": "attachment; filename=backup.json"},
            )

        @self.app.post("/settings/restore")
        def restore_db(snapshot: dict = Body(...)):
            result = self.backup.import_snapshot(snapshot)
            if not result:
                raise HTTPException(status_code=400, detail=result.message)
            return {"status": "restored"}

        @self.app.post("/settings/reset")
        def reset_db(confirmation: str):
            if confirmation != CONFIRMATION:
                return {"status": "confirmation_failed"}
            result = self.backup.reset_all()
            if not result:
                raise HTTPException(status_code=500, detail=result.message)
            return {"status": "reset"}


if __name__ == "__main__":
    import uvicorn
    from logging_config import configure_logging

    api = TrackerAPI()
    configure_logging(api.settings.log_level)
    uvicorn.run(api.app)
