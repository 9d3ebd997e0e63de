import os
import sqlite3
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import Database, Migration
from migrate import migrate


class TestSchemaMigration:
    def test_fresh_database_creates_all_tables(self, tmp_path):
        db = Database(str(tmp_path / "fresh.db"))
        conn = sqlite3.connect(db.path)
        names = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        conn.close()
        for table in Database.managed_tables():
            assert table in names
        assert db.applied_migrations == []
        assert db.schema_version() == 11

    def test_legacy_tables_gain_missing_columns(self, tmp_path):
        db_file = tmp_path / "legacy.db"
        conn = sqlite3.connect(str(db_file))
        conn.execute(
            "CREATE TABLE workout_exercises (id INTEGER PRIMARY KEY AUTOINCREMENT, workout_id INTEGER, exercise_id INTEGER, order_index INTEGER, notes TEXT, weight REAL DEFAULT 0, reps INTEGER DEFAULT 0)"
        )
        conn.execute(
            "INSERT INTO workout_exercises (workout_id, exercise_id, weight, reps) VALUES (1, 2, 50, 8)"
        )
        conn.execute("CREATE TABLE history (id INTEGER PRIMARY KEY AUTOINCREMENT)")
        conn.commit()
        conn.close()

        db = Database(str(db_file))

        conn = sqlite3.connect(str(db_file))
        cols = [row[1] for row in conn.execute("PRAGMA table_info(workout_exercises)")]
        assert "set_count" in cols
        assert "is_completed" in cols
        hist_cols = [row[1] for row in conn.execute("PRAGMA table_info(history)")]
        for col in ("workout_date", "exercise_name", "muscle_group", "weight", "reps", "sets", "notes"):
            assert col in hist_cols
        row = conn.execute(
            "SELECT weight, reps, set_count, is_completed FROM workout_exercises"
        ).fetchone()
        conn.close()
        assert row == (50, 8, 0, 0)
        assert "003_workout_exercises_set_count" in db.applied_migrations
        assert db.failed_migrations == []

    def test_schema_upkeep_is_idempotent(self, tmp_path):
        path = str(tmp_path / "again.db")
        Database(path)
        db = Database(path)
        assert db.ensure_schema() == []
        assert migrate(path) == []

    def test_failed_step_does_not_block_later_steps(self, tmp_path):
        class BrokenDatabase(Database):
            _MIGRATIONS = (
                Migration(1, "history", "extra_a", "TEXT"),
                Migration(2, "history", "broken", "TEXT CHECK("),
                Migration(3, "history", "extra_b", "TEXT"),
            )

        db = BrokenDatabase(str(tmp_path / "broken.db"))
        assert db.failed_migrations == ["002_history_broken"]
        assert db.applied_migrations == ["001_history_extra_a", "003_history_extra_b"]
        assert db.schema_version() == 1
