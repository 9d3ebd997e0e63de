import sqlite3

import structlog

from db import Database, ExerciseRepository
from planner_service import PlanService
from schemas import OperationResult, PlanDefinition, SectionDefinition

logger = structlog.get_logger(__name__)

FULLBODY_EXERCISES = [
    ("Leg Press", "Legs", "10-12 reps", "3", "11"),
    ("Leg Curl (Hamstring)", "Legs", "12-15 reps", "3", "14"),
    ("Incline Dumbbell Press", "Chest", "8-10 reps", "3", "9"),
    ("Lat Pull Down", "Back", "10-12 reps", "3", "10"),
    ("Flat Bench Press", "Chest", "8-10 reps, hold 2 seconds", "3", "8"),
    ("Seated Row Machine", "Back", "10-12 reps", "3", "11"),
    ("Shoulder Press", "Shoulders", "8-10 reps", "3", "10"),
    ("Dips", "Chest", "To failure", "3", "10"),
    ("Butterfly", "Chest", "12-15 reps", "3", "13"),
    ("Lateral Raise", "Shoulders", "12-15 reps", "3", "15"),
    ("Rear Delt Machine", "Shoulders", "15-20 reps", "3", "16"),
    ("Rope Push Down", "Arms", "12-15 reps", "3", "13"),
    ("Overhead Extension Machine", "Arms", "10-12 reps", "3", "10"),
    ("Hammer Curl", "Arms", "10-12 reps", "3", "12"),
    ("Zottman Curl", "Arms", "10-12 reps", "3", "12"),
    ("Cable Crunch", "Core", "10-15 reps", "3", "13"),
    ("Hanging Leg Raises", "Core", "8-12 reps", "3", "9"),
    ("Plank", "Core", "Hold until shaking (seconds)", "3", "60"),
    ("Russian Twist", "Core", "15-20 per side", "3", "15"),
]

FULLBODY_SECTIONS = [
    ("Legs", ["Leg Press", "Leg Curl (Hamstring)"]),
    (
        "Push & Pull",
        [
            "Incline Dumbbell Press",
            "Lat Pull Down",
            "Flat Bench Press",
            "Seated Row Machine",
            "Shoulder Press",
        ],
    ),
    ("Isolation & Detail", ["Dips", "Butterfly", "Lateral Raise", "Rear Delt Machine"]),
    ("Arms", ["Rope Push Down", "Overhead Extension Machine", "Hammer Curl", "Zottman Curl"]),
    ("Core", ["Cable Crunch", "Hanging Leg Raises", "Plank", "Russian Twist"]),
]


def seed_fullbody_plan(db: Database) -> OperationResult:
    """Insert the default exercise library and the "Fullbody" plan.

    Library entries that already exist by name are reused.
    """
    exercises = ExerciseRepository(db)
    try:
        ids: dict[str, int] = {}
        for name, muscle, notes, sets, reps in FULLBODY_EXERCISES:
            ids[name] = exercises.fetch_id_by_name(name) or exercises.add(
                name, muscle, notes, sets, reps
            )
    except sqlite3.Error as exc:
        logger.error("seed_failed", error=str(exc))
        return OperationResult(False, f"Seeding failed: {exc}")
    definition = PlanDefinition(
        name="Fullbody",
        sections=[
            SectionDefinition(title=title, exercise_ids=[ids[n] for n in names if n in ids])
            for title, names in FULLBODY_SECTIONS
        ],
    )
    plan_id = PlanService(db).create_from_definition(definition)
    if plan_id is None:
        return OperationResult(False, "Could not create the Fullbody plan")
    logger.info("seeded", exercises=len(ids), plan_id=plan_id)
    return OperationResult(True)


if __name__ == "__main__":
    result = seed_fullbody_plan(Database())
    print("Seed data inserted" if result else result.message)
