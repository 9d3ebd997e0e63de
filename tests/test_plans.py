import os
import sqlite3
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import Database, ExerciseRepository
from planner_service import PlanService
from schemas import PlanDefinition, SectionDefinition
from seed_sample_data import seed_fullbody_plan, FULLBODY_EXERCISES


class PlanServiceTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_plans.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.db = Database(self.db_path)
        self.exercises = ExerciseRepository(self.db)
        self.planner = PlanService(self.db)
        self.squat = self.exercises.add("Squat", "Legs")
        self.bench = self.exercises.add("Bench", "Chest")
        self.row = self.exercises.add("Row", "Back")

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def _count(self, table: str) -> int:
        conn = sqlite3.connect(self.db_path)
        count = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        conn.close()
        return count

    def test_manual_plan_building(self) -> None:
        plan_id = self.planner.create_plan("Upper")
        section = self.planner.add_section(plan_id, "Push", 0)
        self.planner.add_exercise(section, self.bench, 0)
        details = self.planner.plan_details(plan_id)
        self.assertEqual(details[0]["title"], "Push")
        self.assertEqual(details[0]["data"][0]["name"], "Bench")

    def test_create_from_definition_keeps_order(self) -> None:
        definition = PlanDefinition(
            name="Fullbody",
            sections=[
                SectionDefinition(title="Legs", exercise_ids=[self.squat]),
                SectionDefinition(title="Upper", exercise_ids=[self.row, self.bench]),
            ],
        )
        plan_id = self.planner.create_from_definition(definition)
        details = self.planner.plan_details(plan_id)
        self.assertEqual([s["title"] for s in details], ["Legs", "Upper"])
        self.assertEqual([e["name"] for e in details[1]["data"]], ["Row", "Bench"])
        self.assertEqual([e["order_index"] for e in details], [0, 1])
        self.assertEqual(self.planner.fetch_plans(), [{"id": plan_id, "name": "Fullbody"}])

    def test_replace_keeps_id_and_rebuilds_children(self) -> None:
        plan_id = self.planner.create_from_definition(
            PlanDefinition(
                name="A",
                sections=[
                    SectionDefinition(title="One", exercise_ids=[self.squat, self.bench]),
                    SectionDefinition(title="Two", exercise_ids=[self.row]),
                ],
            )
        )
        old_sections = [s["id"] for s in self.planner.plan_details(plan_id)]
        result = self.planner.replace_plan(
            plan_id,
            PlanDefinition(
                name="B",
                sections=[SectionDefinition(title="Only", exercise_ids=[self.row])],
            ),
        )
        self.assertEqual(result, plan_id)
        details = self.planner.plan_details(plan_id)
        self.assertEqual(len(details), 1)
        self.assertEqual(details[0]["title"], "Only")
        self.assertNotIn(details[0]["id"], old_sections)
        self.assertEqual([e["name"] for e in details[0]["data"]], ["Row"])
        self.assertEqual(self.planner.fetch_plans()[0]["name"], "B")
        self.assertEqual(self._count("plan_sections"), 1)
        self.assertEqual(self._count("plan_exercises"), 1)

    def test_replace_unknown_plan(self) -> None:
        self.assertIsNone(
            self.planner.replace_plan(42, PlanDefinition(name="Ghost", sections=[]))
        )
        self.assertEqual(self._count("workout_plans"), 0)

    def test_delete_leaves_no_orphans(self) -> None:
        plan_id = self.planner.create_from_definition(
            PlanDefinition(
                name="A",
                sections=[SectionDefinition(title="One", exercise_ids=[self.squat, self.bench])],
            )
        )
        self.assertTrue(self.planner.delete_plan(plan_id))
        self.assertEqual(self._count("workout_plans"), 0)
        self.assertEqual(self._count("plan_sections"), 0)
        self.assertEqual(self._count("plan_exercises"), 0)
        self.assertEqual(self.planner.delete_plan(plan_id).message, "plan not found")

    def test_blank_plan_name_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PlanDefinition(name="  ", sections=[])
        self.assertIsNone(self.planner.create_plan(""))
        self.assertEqual(self._count("workout_plans"), 0)

    def test_builders_report_storage_errors(self) -> None:
        plan_id = self.planner.create_plan("Upper")
        section = self.planner.add_section(plan_id, "Push", 0)
        self.assertIsNone(self.planner.add_exercise(section, 2**70, 0))
        conn = sqlite3.connect(self.db_path)
        conn.execute("DROP TABLE plan_sections")
        conn.execute("DROP TABLE plan_exercises")
        conn.commit()
        conn.close()
        self.assertIsNone(self.planner.add_section(plan_id, "Pull", 1))
        self.assertIsNone(self.planner.add_exercise(section, self.bench, 0))

    def test_seed_reuses_library_entries(self) -> None:
        self.exercises.add("Leg Press", "Legs")
        existing = self.exercises.fetch_id_by_name("Leg Press")
        self.assertTrue(seed_fullbody_plan(self.db))
        self.assertTrue(seed_fullbody_plan(self.db))
        self.assertEqual(self.exercises.fetch_id_by_name("Leg Press"), existing)
        self.assertIsNone(self.exercises.fetch_id_by_name("Deadlift"))
        self.assertEqual(len(self.exercises.fetch_all()), 3 + len(FULLBODY_EXERCISES) - 1)
        plans = self.planner.fetch_plans()
        self.assertEqual(len(plans), 2)
        first = self.planner.plan_details(plans[0]["id"])[0]["data"][0]
        self.assertEqual(first["id"], existing)

    def test_seed_fullbody_plan(self) -> None:
        self.assertTrue(seed_fullbody_plan(self.db))
        plans = self.planner.fetch_plans()
        self.assertEqual(plans[0]["name"], "Fullbody")
        details = self.planner.plan_details(plans[0]["id"])
        self.assertEqual(len(details), 5)
        total = sum(len(s["data"]) for s in details)
        self.assertEqual(total, len(FULLBODY_EXERCISES))
        self.assertEqual(details[0]["data"][0]["name"], "Leg Press")


if __name__ == "__main__":
    unittest.main()
