import os
import sys
import unittest

from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from rest_api import TrackerAPI, CONFIRMATION


class APITestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_workout.db"
        self.yaml_path = "test_settings.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        self.api = TrackerAPI(db_path=self.db_path, yaml_path=self.yaml_path)
        self.client = TestClient(self.api.app)

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def _add_exercise(self, name: str = "Bench Press", **extra) -> int:
        payload = {"name": name, "muscle_group": "Chest", "default_sets": "3", "default_reps": "10"}
        payload.update(extra)
        response = self.client.post("/exercises", json=payload)
        self.assertEqual(response.status_code, 200)
        return response.json()["id"]

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.json(), {"status": "ok", "schema_version": 11})

    def test_exercise_library(self) -> None:
        eid = self._add_exercise(notes="Arch")
        self.assertEqual(self.client.get("/exercises").json()[0]["name"], "Bench Press")

        response = self.client.put(f"/exercises/{eid}/notes", json={"notes": "Pause"})
        self.assertEqual(response.json(), {"status": "updated"})
        response = self.client.put(f"/exercises/{eid}/defaults", params={"sets": "4", "reps": "6"})
        self.assertEqual(response.status_code, 200)
        response = self.client.put(f"/exercises/{eid}/name", params={"name": "Paused Bench"})
        self.assertEqual(response.status_code, 200)

        detail = self.client.get(f"/exercises/{eid}").json()
        self.assertEqual(detail["name"], "Paused Bench")
        self.assertEqual(detail["notes"], "Pause")
        self.assertEqual(detail["default_sets"], "4")

        self.assertEqual(self.client.post("/exercises", json={"name": " "}).status_code, 400)
        self.assertEqual(self.client.delete(f"/exercises/{eid}").status_code, 200)
        self.assertEqual(self.client.get(f"/exercises/{eid}").status_code, 404)
        self.assertEqual(self.client.delete(f"/exercises/{eid}").status_code, 404)

    def test_full_logging_workflow(self) -> None:
        eid = self._add_exercise()

        draft = self.client.get(f"/exercises/{eid}/draft", params={"date": "2024-03-04"}).json()
        self.assertEqual(draft["reps"], 10)
        self.assertEqual(draft["sets"], 3)
        self.assertEqual(draft["weight"], 0)

        link = self.client.post(
            "/sessions/link", params={"exercise_id": eid, "date": "2024-03-04"}
        ).json()["id"]
        again = self.client.post(
            "/sessions/link", params={"exercise_id": eid, "date": "2024-03-04"}
        ).json()["id"]
        self.assertEqual(link, again)

        response = self.client.put(
            f"/links/{link}",
            json={"weight": 80, "reps": 8, "sets": 3, "notes": "easy", "completed": True},
        )
        self.assertEqual(
            response.json(), {"status": "saved", "archived": True, "archive_message": None}
        )
        response = self.client.put(
            f"/links/{link}",
            json={"weight": "85", "reps": 8, "sets": 3, "notes": "easy", "completed": True},
        )
        self.assertEqual(response.status_code, 200)

        logs = self.client.get("/sessions/logs", params={"date": "2024-03-04"}).json()
        self.assertEqual(logs[0]["exercise_id"], eid)
        self.assertEqual(logs[0]["last_weight"], 85)
        self.assertTrue(logs[0]["is_completed"])

        history = self.client.get("/history").json()
        self.assertEqual(history["total"], 1)
        self.assertEqual(history["items"][0]["exercises"], "Bench Press")
        details = self.client.get("/history/2024-03-04").json()
        self.assertEqual(len(details), 1)
        self.assertEqual(details[0]["weight"], 85)

        draft = self.client.get(f"/exercises/{eid}/draft", params={"date": "2024-03-05"}).json()
        self.assertEqual(draft["weight"], 85)
        self.assertEqual(draft["reps"], 8)
        self.assertEqual(self.client.get(f"/exercises/{eid}/last").json()["weight"], 85)
        progress = self.client.get(f"/exercises/{eid}/progress").json()
        self.assertEqual(progress[0]["workout_date"], "2024-03-04")

        records = self.client.get("/stats/records").json()
        self.assertEqual(records, [{"name": "Bench Press", "max_weight": 85}])
        self.assertEqual(
            self.client.get("/stats/muscles", params={"date": "2024-03-04"}).json(), ["Chest"]
        )
        overview = self.client.get("/stats/overview", params={"today": "2024-03-06"}).json()
        self.assertEqual(overview["weekly_count"], 1)
        self.assertEqual(overview["pr_count"], 1)
        volume = self.client.get("/stats/volume").json()
        self.assertEqual(volume["data"], [85 * 8 * 3])

        response = self.client.delete("/history/2024-03-04")
        self.assertEqual(response.json(), {"status": "deleted", "removed": 1})
        self.assertEqual(self.client.get("/history/dates").json(), [])

    def test_unknown_link_and_bad_date(self) -> None:
        response = self.client.put("/links/99", json={"weight": 1, "completed": True})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(self.client.get("/links/99").status_code, 404)
        response = self.client.get("/stats/overview", params={"today": "yesterday"})
        self.assertEqual(response.status_code, 400)

    def test_measurements(self) -> None:
        response = self.client.post(
            "/measurements", json={"type": "weight", "value": 80.5, "date": "2024-03-04"}
        )
        self.assertEqual(response.status_code, 200)
        latest = self.client.get("/measurements/latest").json()
        self.assertEqual(latest["weight"]["value"], 80.5)
        self.assertIsNone(latest["arm"])
        grouped = self.client.get("/measurements").json()
        self.assertEqual(grouped[0]["data"]["weight"], "80.5 kg")
        body = self.client.get("/stats/body").json()
        self.assertEqual(body["dates"], ["2024-03-04"])
        response = self.client.delete("/measurements/2024-03-04")
        self.assertEqual(response.json()["removed"], 1)

    def test_plans(self) -> None:
        a = self._add_exercise("Squat")
        b = self._add_exercise("Row")
        plan = {"name": "Full", "sections": [{"title": "Main", "exercise_ids": [a, b]}]}
        plan_id = self.client.post("/plans", json=plan).json()["id"]
        self.assertEqual(self.client.get("/plans").json(), [{"id": plan_id, "name": "Full"}])
        details = self.client.get(f"/plans/{plan_id}").json()
        self.assertEqual([e["name"] for e in details[0]["data"]], ["Squat", "Row"])

        plan["sections"] = [{"title": "Only", "exercise_ids": [b]}]
        self.assertEqual(self.client.put(f"/plans/{plan_id}", json=plan).json(), {"id": plan_id})
        details = self.client.get(f"/plans/{plan_id}").json()
        self.assertEqual(details[0]["title"], "Only")

        self.assertEqual(self.client.put("/plans/99", json=plan).status_code, 404)
        self.assertEqual(self.client.post("/plans", json={"name": ""}).status_code, 422)
        self.assertEqual(self.client.delete(f"/plans/{plan_id}").status_code, 200)
        self.assertEqual(self.client.get(f"/plans/{plan_id}").status_code, 404)

    def test_seed_plan(self) -> None:
        self.assertEqual(self.client.post("/plans/seed").json(), {"status": "seeded"})
        self.assertEqual(self.client.get("/plans").json()[0]["name"], "Fullbody")

    def test_backup_restore_reset(self) -> None:
        eid = self._add_exercise()
        snapshot = self.client.get("/settings/backup").json()
        self.assertEqual(snapshot["exercises"][0]["id"], eid)

        response = self.client.post("/settings/reset", params={"confirmation": "no"})
        self.assertEqual(response.json(), {"status": "confirmation_failed"})
        self.assertEqual(len(self.client.get("/exercises").json()), 1)

        response = self.client.post("/settings/reset", params={"confirmation": CONFIRMATION})
        self.assertEqual(response.json(), {"status": "reset"})
        self.assertEqual(self.client.get("/exercises").json(), [])

        response = self.client.post("/settings/restore", json={"exercises": []})
        self.assertEqual(response.status_code, 400)
        response = self.client.post("/settings/restore", json=snapshot)
        self.assertEqual(response.json(), {"status": "restored"})
        self.assertEqual(self.client.get("/exercises").json()[0]["name"], "Bench Press")


if __name__ == "__main__":
    unittest.main()
