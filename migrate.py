import sys

from db import Database


def migrate(db_path: str = "workout.db") -> list[str]:
    """Bring ``db_path`` up to the current schema and return applied steps."""
    db = Database(db_path)
    if db.failed_migrations:
        raise RuntimeError("migrations failed: " + ", ".join(db.failed_migrations))
    return db.applied_migrations


if __name__ == '__main__':
    path = sys.argv[1] if len(sys.argv) > 1 else 'workout.db'
    steps = migrate(path)
    for step in steps:
        print(f"applied {step}")
    print(f"{path} is at schema version {Database(path).schema_version()}")
