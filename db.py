import sqlite3
import datetime
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import List, Tuple, Optional, Iterable

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Migration:
    """Single additive schema step."""

    version: int
    table: str
    column: str
    ddl: str

    @property
    def name(self) -> str:
        return f"{self.version:03d}_{self.table}_{self.column}"


class Database:
    """Store handle providing SQLite connection management and schema upkeep."""

    _TABLE_DEFINITIONS = {
        "exercises": (
            """CREATE TABLE exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    muscle_group TEXT,
                    notes TEXT,
                    default_sets TEXT,
                    default_reps TEXT
                );""",
            ["id", "name", "muscle_group", "notes", "default_sets", "default_reps"],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    scheduled_date TEXT,
                    status TEXT DEFAULT 'pending'
                );""",
            ["id", "name", "scheduled_date", "status"],
        ),
        "workout_exercises": (
            """CREATE TABLE workout_exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id INTEGER,
                    exercise_id INTEGER,
                    order_index INTEGER,
                    notes TEXT,
                    weight REAL DEFAULT 0,
                    reps INTEGER DEFAULT 0,
                    set_count INTEGER DEFAULT 0,
                    is_completed INTEGER DEFAULT 0,
                    FOREIGN KEY(workout_id) REFERENCES workouts(id),
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id)
                );""",
            [
                "id",
                "workout_id",
                "exercise_id",
                "order_index",
                "notes",
                "weight",
                "reps",
                "set_count",
                "is_completed",
            ],
        ),
        "history": (
            """CREATE TABLE history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_date TEXT,
                    exercise_name TEXT,
                    muscle_group TEXT,
                    weight REAL,
                    reps INTEGER,
                    sets INTEGER,
                    notes TEXT
                );""",
            [
                "id",
                "workout_date",
                "exercise_name",
                "muscle_group",
                "weight",
                "reps",
                "sets",
                "notes",
            ],
        ),
        "measurements": (
            """CREATE TABLE measurements (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    type TEXT NOT NULL,
                    value REAL NOT NULL,
                    unit TEXT DEFAULT 'kg',
                    date TEXT NOT NULL
                );""",
            ["id", "type", "value", "unit", "date"],
        ),
        "workout_plans": (
            """CREATE TABLE workout_plans (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL
                );""",
            ["id", "name"],
        ),
        "plan_sections": (
            """CREATE TABLE plan_sections (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    plan_id INTEGER,
                    title TEXT,
                    order_index INTEGER
                );""",
            ["id", "plan_id", "title", "order_index"],
        ),
        "plan_exercises": (
            """CREATE TABLE plan_exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    section_id INTEGER,
                    exercise_id INTEGER,
                    order_index INTEGER
                );""",
            ["id", "section_id", "exercise_id", "order_index"],
        ),
    }

    # Columns added after the first release. Fresh tables already carry them.
    _MIGRATIONS: Tuple[Migration, ...] = (
        Migration(1, "workouts", "scheduled_date", "TEXT"),
        Migration(2, "workouts", "status", "TEXT DEFAULT 'pending'"),
        Migration(3, "workout_exercises", "set_count", "INTEGER DEFAULT 0"),
        Migration(4, "workout_exercises", "is_completed", "INTEGER DEFAULT 0"),
        Migration(5, "history", "workout_date", "TEXT"),
        Migration(6, "history", "exercise_name", "TEXT"),
        Migration(7, "history", "muscle_group", "TEXT"),
        Migration(8, "history", "weight", "REAL"),
        Migration(9, "history", "reps", "INTEGER"),
        Migration(10, "history", "sets", "INTEGER"),
        Migration(11, "history", "notes", "TEXT"),
    )

    _lock = threading.RLock()

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self.failed_migrations: list[str] = []
        self.applied_migrations = self.ensure_schema()

    @property
    def path(self) -> str:
        return self._db_path

    @classmethod
    def managed_tables(cls) -> List[str]:
        return list(cls._TABLE_DEFINITIONS.keys())

    @classmethod
    def table_columns(cls, table: str) -> List[str]:
        return list(cls._TABLE_DEFINITIONS[table][1])

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        try:
            yield connection
            connection.commit()
        except BaseException:
            connection.rollback()
            raise
        finally:
            connection.close()

    @contextmanager
    def transaction(self):
        """Run a multi-statement unit of work under an immediate write lock."""
        with self._lock:
            with self._connection() as conn:
                conn.execute("BEGIN IMMEDIATE;")
                yield conn

    def ensure_schema(self) -> List[str]:
        """Create missing tables and apply pending column migrations.

        Every migration step is checked and committed on its own so a
        failing step never prevents the remaining ones from running.
        Returns the names of the steps that changed the schema.
        """
        applied: List[str] = []
        self.failed_migrations = []
        with self._lock:
            with self._connection() as conn:
                for table, (sql, _columns) in self._TABLE_DEFINITIONS.items():
                    if not self._table_exists(conn, table):
                        conn.execute(sql)
                        logger.debug("table_created", table=table)
            version = 0
            contiguous = True
            for step in self._MIGRATIONS:
                try:
                    with self._connection() as conn:
                        if self._apply_migration(conn, step):
                            applied.append(step.name)
                except sqlite3.Error as exc:
                    contiguous = False
                    self.failed_migrations.append(step.name)
                    logger.error("migration_failed", step=step.name, error=str(exc))
                    continue
                if contiguous:
                    version = step.version
            with self._connection() as conn:
                current = conn.execute("PRAGMA user_version;").fetchone()[0]
                if version > current:
                    conn.execute(f"PRAGMA user_version = {int(version)};")
        if applied:
            logger.info("schema_migrated", steps=applied)
        return applied

    def schema_version(self) -> int:
        with self._connection() as conn:
            return int(conn.execute("PRAGMA user_version;").fetchone()[0])

    @staticmethod
    def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        return cur.fetchone() is not None

    @staticmethod
    def _columns(conn: sqlite3.Connection, table: str) -> List[str]:
        cur = conn.execute(f"PRAGMA table_info({table});")
        return [row[1] for row in cur.fetchall()]

    def _apply_migration(self, conn: sqlite3.Connection, step: Migration) -> bool:
        if not self._table_exists(conn, step.table):
            raise sqlite3.OperationalError(f"no such table: {step.table}")
        if step.column in self._columns(conn, step.table):
            return False
        conn.execute(f"ALTER TABLE {step.table} ADD COLUMN {step.column} {step.ddl};")
        return True


class BaseRepository:
    """Base repository providing helper methods over an injected store."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self.db._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[sqlite3.Row]:
        with self.db._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def fetch_one(self, query: str, params: Tuple = ()) -> Optional[sqlite3.Row]:
        rows = self.fetch_all(query, params)
        return rows[0] if rows else None


class ExerciseRepository(BaseRepository):
    """Repository for the exercise library."""

    def add(
        self,
        name: str,
        muscle_group: Optional[str] = None,
        notes: Optional[str] = None,
        default_sets: Optional[str] = None,
        default_reps: Optional[str] = None,
    ) -> int:
        if not name or not name.strip():
            raise ValueError("name must not be empty")
        return self.execute(
            "INSERT INTO exercises (name, muscle_group, notes, default_sets, default_reps) VALUES (?, ?, ?, ?, ?);",
            (
                name.strip(),
                muscle_group,
                notes,
                None if default_sets is None else str(default_sets),
                None if default_reps is None else str(default_reps),
            ),
        )

    def fetch_all(self) -> List[sqlite3.Row]:
        return super().fetch_all("SELECT * FROM exercises ORDER BY name ASC;")

    def fetch_detail(self, exercise_id: int) -> Optional[sqlite3.Row]:
        return self.fetch_one("SELECT * FROM exercises WHERE id = ?;", (exercise_id,))

    def fetch_id_by_name(self, name: str) -> Optional[int]:
        row = self.fetch_one(
            "SELECT id FROM exercises WHERE name = ? ORDER BY id LIMIT 1;", (name,)
        )
        return int(row["id"]) if row else None

    def _require(self, exercise_id: int) -> None:
        if self.fetch_detail(exercise_id) is None:
            raise ValueError("exercise not found")

    def update_notes(self, exercise_id: int, notes: Optional[str]) -> None:
        self._require(exercise_id)
        self.execute(
            "UPDATE exercises SET notes = ? WHERE id = ?;", (notes, exercise_id)
        )

    def update_defaults(self, exercise_id: int, sets, reps) -> None:
        self._require(exercise_id)
        self.execute(
            "UPDATE exercises SET default_sets = ?, default_reps = ? WHERE id = ?;",
            (str(sets), str(reps), exercise_id),
        )

    def rename(self, exercise_id: int, name: str) -> None:
        """Rename a library entry. Archived history keeps the old name."""
        if not name or not name.strip():
            raise ValueError("name must not be empty")
        self._require(exercise_id)
        self.execute(
            "UPDATE exercises SET name = ? WHERE id = ?;", (name.strip(), exercise_id)
        )

    def delete(self, exercise_id: int) -> None:
        self._require(exercise_id)
        self.execute("DELETE FROM exercises WHERE id = ?;", (exercise_id,))


class WorkoutRepository(BaseRepository):
    """Repository for daily log sessions."""

    DAILY_LOG = "Daily Log"

    @staticmethod
    def find_or_create(conn: sqlite3.Connection, date: str) -> int:
        row = conn.execute(
            "SELECT id FROM workouts WHERE scheduled_date = ? ORDER BY id LIMIT 1;",
            (date,),
        ).fetchone()
        if row is not None:
            return int(row["id"])
        cur = conn.execute(
            "INSERT INTO workouts (name, scheduled_date) VALUES (?, ?);",
            (WorkoutRepository.DAILY_LOG, date),
        )
        return int(cur.lastrowid)

    def fetch_by_date(self, date: str) -> Optional[sqlite3.Row]:
        return self.fetch_one(
            "SELECT * FROM workouts WHERE scheduled_date = ? ORDER BY id LIMIT 1;",
            (date,),
        )

    def fetch_next_pending(self) -> Optional[sqlite3.Row]:
        return self.fetch_one(
            "SELECT * FROM workouts WHERE status = 'pending' ORDER BY scheduled_date ASC LIMIT 1;"
        )

    def count_for_date(self, date: str) -> int:
        row = self.fetch_one(
            "SELECT COUNT(*) AS c FROM workouts WHERE scheduled_date = ?;", (date,)
        )
        return int(row["c"])


class SessionExerciseRepository(BaseRepository):
    """Repository for the mutable session-exercise links."""

    @staticmethod
    def find_or_create(conn: sqlite3.Connection, workout_id: int, exercise_id: int) -> int:
        row = conn.execute(
            "SELECT id FROM workout_exercises WHERE workout_id = ? AND exercise_id = ? ORDER BY id LIMIT 1;",
            (workout_id, exercise_id),
        ).fetchone()
        if row is not None:
            return int(row["id"])
        pos = conn.execute(
            "SELECT COALESCE(MAX(order_index), -1) + 1 FROM workout_exercises WHERE workout_id = ?;",
            (workout_id,),
        ).fetchone()[0]
        cur = conn.execute(
            "INSERT INTO workout_exercises (workout_id, exercise_id, order_index, weight, reps, set_count, is_completed) "
            "VALUES (?, ?, ?, 0, 0, 0, 0);",
            (workout_id, exercise_id, int(pos)),
        )
        return int(cur.lastrowid)

    def update(
        self,
        link_id: int,
        weight: float,
        reps: int,
        set_count: int,
        notes: str,
        completed: bool,
    ) -> None:
        with self.db.transaction() as conn:
            cur = conn.execute(
                "UPDATE workout_exercises SET weight = ?, reps = ?, set_count = ?, notes = ?, is_completed = ? WHERE id = ?;",
                (weight, reps, set_count, notes, int(completed), link_id),
            )
            if cur.rowcount == 0:
                raise ValueError("link not found")

    def fetch_detail(self, link_id: int) -> Optional[sqlite3.Row]:
        return self.fetch_one("SELECT * FROM workout_exercises WHERE id = ?;", (link_id,))

    def fetch_archive_source(self, conn: sqlite3.Connection, link_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT e.name, e.muscle_group, w.scheduled_date FROM workout_exercises we "
            "JOIN workouts w ON we.workout_id = w.id "
            "JOIN exercises e ON we.exercise_id = e.id WHERE we.id = ?;",
            (link_id,),
        ).fetchone()

    def fetch_for_date(self, date: str) -> List[sqlite3.Row]:
        return self.fetch_all(
            "SELECT we.id, we.exercise_id, we.weight, we.reps, we.set_count, we.is_completed, we.notes "
            "FROM workout_exercises we JOIN workouts w ON we.workout_id = w.id "
            "WHERE w.scheduled_date = ? ORDER BY we.id ASC;",
            (date,),
        )

    def fetch_for_exercise_on(self, exercise_id: int, date: str) -> Optional[sqlite3.Row]:
        return self.fetch_one(
            "SELECT we.* FROM workout_exercises we JOIN workouts w ON we.workout_id = w.id "
            "WHERE w.scheduled_date = ? AND we.exercise_id = ? ORDER BY we.id LIMIT 1;",
            (date, exercise_id),
        )

    def count_for(self, workout_id: int, exercise_id: int) -> int:
        row = self.fetch_one(
            "SELECT COUNT(*) AS c FROM workout_exercises WHERE workout_id = ? AND exercise_id = ?;",
            (workout_id, exercise_id),
        )
        return int(row["c"])


class HistoryRepository(BaseRepository):
    """Repository for the archived history ledger."""

    @staticmethod
    def replace(
        conn: sqlite3.Connection,
        workout_date: str,
        exercise_name: str,
        muscle_group: Optional[str],
        weight: float,
        reps: int,
        sets: int,
        notes: str,
    ) -> int:
        conn.execute(
            "DELETE FROM history WHERE workout_date = ? AND exercise_name = ?;",
            (workout_date, exercise_name),
        )
        cur = conn.execute(
            "INSERT INTO history (workout_date, exercise_name, muscle_group, weight, reps, sets, notes) "
            "VALUES (?, ?, ?, ?, ?, ?, ?);",
            (workout_date, exercise_name, muscle_group, weight, reps, sets, notes),
        )
        return int(cur.lastrowid)

    def fetch_latest_for_name(self, exercise_name: str) -> Optional[sqlite3.Row]:
        return self.fetch_one(
            "SELECT reps, weight, sets, notes, workout_date FROM history WHERE exercise_name = ? "
            "ORDER BY workout_date DESC, id DESC LIMIT 1;",
            (exercise_name,),
        )

    def fetch_for(self, workout_date: str, exercise_name: str) -> List[sqlite3.Row]:
        return self.fetch_all(
            "SELECT * FROM history WHERE workout_date = ? AND exercise_name = ?;",
            (workout_date, exercise_name),
        )

    def fetch_for_date(self, workout_date: str) -> List[sqlite3.Row]:
        return self.fetch_all(
            "SELECT exercise_name AS name, weight, reps, sets, notes FROM history WHERE workout_date = ? ORDER BY id ASC;",
            (workout_date,),
        )

    def fetch_dates(self, limit: Optional[int] = None, offset: int = 0, descending: bool = False) -> List[str]:
        order = "DESC" if descending else "ASC"
        query = f"SELECT DISTINCT workout_date AS day FROM history ORDER BY day {order}"
        params: Tuple = ()
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params = (limit, offset)
        return [r["day"] for r in self.fetch_all(query + ";", params)]

    def count_dates_since(self, boundary: str) -> int:
        row = self.fetch_one(
            "SELECT COUNT(DISTINCT workout_date) AS c FROM history WHERE workout_date >= ?;",
            (boundary,),
        )
        return int(row["c"]) if row else 0

    def daily_volume(self, limit: int) -> List[sqlite3.Row]:
        return self.fetch_all(
            "SELECT workout_date, SUM(weight * reps * sets) AS vol FROM history "
            "GROUP BY workout_date ORDER BY workout_date DESC LIMIT ?;",
            (limit,),
        )

    def max_weights(self, order_by_name: bool = False, limit: Optional[int] = None, offset: int = 0) -> List[sqlite3.Row]:
        order = "name ASC" if order_by_name else "max_weight DESC, name ASC"
        query = (
            "SELECT exercise_name AS name, MAX(weight) AS max_weight FROM history "
            f"GROUP BY exercise_name ORDER BY {order}"
        )
        params: Tuple = ()
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params = (limit, offset)
        return self.fetch_all(query + ";", params)

    def count_names(self) -> int:
        row = self.fetch_one("SELECT COUNT(DISTINCT exercise_name) AS c FROM history;")
        return int(row["c"]) if row else 0

    def muscle_groups_on(self, workout_date: str) -> List[str]:
        rows = self.fetch_all(
            "SELECT DISTINCT muscle_group FROM history WHERE workout_date = ? AND muscle_group IS NOT NULL ORDER BY muscle_group;",
            (workout_date,),
        )
        return [r["muscle_group"] for r in rows]

    def progress_for_name(self, exercise_name: str, limit: int) -> List[sqlite3.Row]:
        rows = self.fetch_all(
            "SELECT workout_date, MAX(weight) AS weight, MAX(reps) AS reps, SUM(sets) AS sets "
            "FROM history WHERE exercise_name = ? GROUP BY workout_date "
            "ORDER BY workout_date DESC LIMIT ?;",
            (exercise_name, limit),
        )
        return list(reversed(rows))

    def delete_by_date(self, workout_date: str) -> int:
        with self.db.transaction() as conn:
            cur = conn.execute("DELETE FROM history WHERE workout_date = ?;", (workout_date,))
            return cur.rowcount


class MeasurementRepository(BaseRepository):
    """Repository for body measurement samples."""

    def add(
        self,
        mtype: str,
        value: float,
        unit: str = "kg",
        date: Optional[str] = None,
    ) -> int:
        now = datetime.datetime.now()
        if not date:
            stamp = now.strftime("%Y-%m-%dT%H:%M:%S")
        elif "T" in date:
            stamp = date
        else:
            stamp = f"{date}T{now.strftime('%H:%M:%S')}"
        return self.execute(
            "INSERT INTO measurements (type, value, unit, date) VALUES (?, ?, ?, ?);",
            (mtype, float(value), unit, stamp),
        )

    def fetch_all(self) -> List[sqlite3.Row]:
        return super().fetch_all(
            "SELECT id, type, value, unit, date FROM measurements ORDER BY date DESC, id DESC;"
        )

    def fetch_latest(self, mtype: str) -> Optional[sqlite3.Row]:
        return self.fetch_one(
            "SELECT value, unit, date FROM measurements WHERE type = ? ORDER BY date DESC, id DESC LIMIT 1;",
            (mtype,),
        )

    def fetch_last_date(self) -> Optional[str]:
        row = self.fetch_one("SELECT date FROM measurements ORDER BY date DESC LIMIT 1;")
        return row["date"] if row else None

    def fetch_days(self, limit: int) -> List[str]:
        rows = super().fetch_all(
            "SELECT DISTINCT substr(date, 1, 10) AS day FROM measurements ORDER BY day DESC LIMIT ?;",
            (limit,),
        )
        return [r["day"] for r in rows]

    def fetch_for_day(self, day: str) -> List[sqlite3.Row]:
        return super().fetch_all(
            "SELECT type, value, unit, date FROM measurements WHERE substr(date, 1, 10) = ? ORDER BY date ASC, id ASC;",
            (day,),
        )

    def delete_by_date(self, day: str) -> int:
        with self.db.transaction() as conn:
            cur = conn.execute(
                "DELETE FROM measurements WHERE substr(date, 1, 10) = ?;", (day,)
            )
            return cur.rowcount


class PlanRepository(BaseRepository):
    """Repository for workout plans and their section subtree."""

    def create(self, name: str) -> int:
        with self.db._connection() as conn:
            return self.insert(conn, name)

    @staticmethod
    def insert(conn: sqlite3.Connection, name: str, plan_id: Optional[int] = None) -> int:
        if not name or not name.strip():
            raise ValueError("name must not be empty")
        cur = conn.execute(
            "INSERT INTO workout_plans (id, name) VALUES (?, ?);", (plan_id, name.strip())
        )
        return int(cur.lastrowid)

    def fetch_all(self) -> List[sqlite3.Row]:
        return super().fetch_all("SELECT * FROM workout_plans ORDER BY id;")

    def fetch_detail(self, plan_id: int) -> Optional[sqlite3.Row]:
        return self.fetch_one("SELECT * FROM workout_plans WHERE id = ?;", (plan_id,))

    @staticmethod
    def delete_subtree(conn: sqlite3.Connection, plan_id: int) -> int:
        """Remove plan exercises, then sections, then the plan row."""
        conn.execute(
            "DELETE FROM plan_exercises WHERE section_id IN (SELECT id FROM plan_sections WHERE plan_id = ?);",
            (plan_id,),
        )
        conn.execute("DELETE FROM plan_sections WHERE plan_id = ?;", (plan_id,))
        cur = conn.execute("DELETE FROM workout_plans WHERE id = ?;", (plan_id,))
        return cur.rowcount


class PlanSectionRepository(BaseRepository):
    """Repository for plan sections."""

    def add(self, plan_id: int, title: str, order_index: int) -> int:
        with self.db._connection() as conn:
            return self.insert(conn, plan_id, title, order_index)

    @staticmethod
    def insert(conn: sqlite3.Connection, plan_id: int, title: str, order_index: int) -> int:
        cur = conn.execute(
            "INSERT INTO plan_sections (plan_id, title, order_index) VALUES (?, ?, ?);",
            (plan_id, title, order_index),
        )
        return int(cur.lastrowid)

    def fetch_for_plan(self, plan_id: int) -> List[sqlite3.Row]:
        return self.fetch_all(
            "SELECT * FROM plan_sections WHERE plan_id = ? ORDER BY order_index ASC, id ASC;",
            (plan_id,),
        )


class PlanExerciseRepository(BaseRepository):
    """Repository for exercises referenced by plan sections."""

    def add(self, section_id: int, exercise_id: int, order_index: int) -> int:
        with self.db._connection() as conn:
            return self.insert(conn, section_id, exercise_id, order_index)

    @staticmethod
    def insert(conn: sqlite3.Connection, section_id: int, exercise_id: int, order_index: int) -> int:
        cur = conn.execute(
            "INSERT INTO plan_exercises (section_id, exercise_id, order_index) VALUES (?, ?, ?);",
            (section_id, exercise_id, order_index),
        )
        return int(cur.lastrowid)

    def fetch_for_section(self, section_id: int) -> List[sqlite3.Row]:
        return self.fetch_all(
            "SELECT e.*, pe.id AS plan_exercise_id FROM plan_exercises pe "
            "JOIN exercises e ON pe.exercise_id = e.id "
            "WHERE pe.section_id = ? ORDER BY pe.order_index ASC, pe.id ASC;",
            (section_id,),
        )


class SnapshotRepository(BaseRepository):
    """Whole-table reads and writes used by backup and restore."""

    def read_tables(self, tables: Iterable[str]) -> dict[str, list[dict]]:
        out: dict[str, list[dict]] = {}
        with self.db.transaction() as conn:
            for table in tables:
                rows = conn.execute(f"SELECT * FROM {table} ORDER BY id;").fetchall()
                out[table] = [dict(r) for r in rows]
        return out

    @staticmethod
    def clear(conn: sqlite3.Connection, tables: Iterable[str]) -> None:
        for table in tables:
            conn.execute(f"DELETE FROM {table};")

    @staticmethod
    def bulk_insert(conn: sqlite3.Connection, table: str, rows: list[dict]) -> int:
        if not rows:
            return 0
        keys = list(rows[0].keys())
        placeholders = ", ".join("?" for _ in keys)
        sql = f"INSERT INTO {table} ({', '.join(keys)}) VALUES ({placeholders});"
        conn.executemany(sql, [tuple(row.get(k) for k in keys) for row in rows])
        return len(rows)

    def count(self, table: str) -> int:
        row = self.fetch_one(f"SELECT COUNT(*) AS c FROM {table};")
        return int(row["c"])
