from __future__ import annotations

import sqlite3
from typing import Optional

import structlog

from db import (
    Database,
    PlanRepository,
    PlanSectionRepository,
    PlanExerciseRepository,
)
from schemas import OperationResult, PlanDefinition

logger = structlog.get_logger(__name__)


class PlanService:
    """Builds, reads and replaces named workout plans."""

    def __init__(
        self,
        db: Database,
        plan_repo: PlanRepository | None = None,
        section_repo: PlanSectionRepository | None = None,
        plan_exercise_repo: PlanExerciseRepository | None = None,
    ) -> None:
        self.db = db
        self.plans = plan_repo or PlanRepository(db)
        self.sections = section_repo or PlanSectionRepository(db)
        self.plan_exercises = plan_exercise_repo or PlanExerciseRepository(db)

    def create_plan(self, name: str) -> Optional[int]:
        try:
            return self.plans.create(name)
        except (sqlite3.Error, OverflowError, ValueError) as exc:
            logger.error("create_plan_failed", name=name, error=str(exc))
            return None

    def add_section(self, plan_id: int, title: str, order: int) -> Optional[int]:
        try:
            return self.sections.add(plan_id, title, order)
        except (sqlite3.Error, OverflowError, ValueError) as exc:
            logger.error("add_section_failed", plan_id=plan_id, error=str(exc))
            return None

    def add_exercise(self, section_id: int, exercise_id: int, order: int) -> Optional[int]:
        try:
            return self.plan_exercises.add(section_id, exercise_id, order)
        except (sqlite3.Error, OverflowError, ValueError) as exc:
            logger.error(
                "add_plan_exercise_failed", section_id=section_id, error=str(exc)
            )
            return None

    def fetch_plans(self) -> list[dict]:
        try:
            return [dict(r) for r in self.plans.fetch_all()]
        except sqlite3.Error as exc:
            logger.error("fetch_plans_failed", error=str(exc))
            return []

    def plan_details(self, plan_id: int) -> list[dict]:
        try:
            result = []
            for section in self.sections.fetch_for_plan(plan_id):
                item = dict(section)
                item["data"] = [
                    dict(r) for r in self.plan_exercises.fetch_for_section(section["id"])
                ]
                result.append(item)
            return result
        except sqlite3.Error as exc:
            logger.error("plan_details_failed", plan_id=plan_id, error=str(exc))
            return []

    def create_from_definition(self, definition: PlanDefinition) -> Optional[int]:
        try:
            with self.db.transaction() as conn:
                plan_id = PlanRepository.insert(conn, definition.name)
                self._build_children(conn, plan_id, definition)
                return plan_id
        except sqlite3.Error as exc:
            logger.error("create_plan_failed", name=definition.name, error=str(exc))
            return None

    def replace_plan(self, plan_id: int, definition: PlanDefinition) -> Optional[int]:
        """Drop the plan subtree and rebuild it from ``definition``.

        The plan keeps its id; section and plan-exercise ids are new.
        """
        try:
            with self.db.transaction() as conn:
                if PlanRepository.delete_subtree(conn, plan_id) == 0:
                    raise LookupError(f"plan {plan_id} not found")
                PlanRepository.insert(conn, definition.name, plan_id)
                self._build_children(conn, plan_id, definition)
        except (sqlite3.Error, LookupError) as exc:
            logger.error("replace_plan_failed", plan_id=plan_id, error=str(exc))
            return None
        logger.info("plan_replaced", plan_id=plan_id, sections=len(definition.sections))
        return plan_id

    @staticmethod
    def _build_children(conn: sqlite3.Connection, plan_id: int, definition: PlanDefinition) -> None:
        for s_index, section in enumerate(definition.sections):
            section_id = PlanSectionRepository.insert(conn, plan_id, section.title, s_index)
            for e_index, exercise_id in enumerate(section.exercise_ids):
                PlanExerciseRepository.insert(conn, section_id, exercise_id, e_index)

    def delete_plan(self, plan_id: int) -> OperationResult:
        try:
            with self.db.transaction() as conn:
                removed = PlanRepository.delete_subtree(conn, plan_id)
        except sqlite3.Error as exc:
            logger.error("delete_plan_failed", plan_id=plan_id, error=str(exc))
            return OperationResult(False, f"Could not delete plan: {exc}")
        if removed == 0:
            return OperationResult(False, "plan not found")
        return OperationResult(True)
