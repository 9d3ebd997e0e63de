import argparse
import sys

from backup_service import BackupService
from db import Database, ExerciseRepository
from logging_config import configure_logging
from migrate import migrate
from seed_sample_data import seed_fullbody_plan

CONFIRMATION = "Yes, I confirm"


def export_snapshot(db_path: str, out_path: str) -> None:
    BackupService(Database(db_path)).export_to_file(out_path)


def import_snapshot(in_path: str, db_path: str) -> bool:
    result = BackupService(Database(db_path)).import_from_file(in_path)
    if not result:
        print(f"Restore failed: {result.message}", file=sys.stderr)
    return result.ok


def reset_data(db_path: str) -> bool:
    result = BackupService(Database(db_path)).reset_all()
    if not result:
        print(result.message, file=sys.stderr)
    return result.ok


def seed_data(db_path: str) -> bool:
    db = Database(db_path)
    if ExerciseRepository(db).fetch_all():
        print("Database already contains exercises")
        return False
    result = seed_fullbody_plan(db)
    if not result:
        print(result.message, file=sys.stderr)
        return False
    print("Seed data inserted")
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Workout tracker utility commands")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--db", default="workout.db")
    exp.add_argument("--out", default="backup.json")

    imp = sub.add_parser("import")
    imp.add_argument("--in", dest="src", default="backup.json")
    imp.add_argument("--db", default="workout.db")

    rst = sub.add_parser("reset")
    rst.add_argument("--db", default="workout.db")
    rst.add_argument("--confirm", default="")

    seed = sub.add_parser("seed")
    seed.add_argument("--db", default="workout.db")

    mig = sub.add_parser("migrate")
    mig.add_argument("--db", default="workout.db")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.cmd == "export":
        export_snapshot(args.db, args.out)
    elif args.cmd == "import":
        return 0 if import_snapshot(args.src, args.db) else 1
    elif args.cmd == "reset":
        if args.confirm != CONFIRMATION:
            print(f'Pass --confirm "{CONFIRMATION}" to delete all data', file=sys.stderr)
            return 1
        return 0 if reset_data(args.db) else 1
    elif args.cmd == "seed":
        return 0 if seed_data(args.db) else 1
    elif args.cmd == "migrate":
        for step in migrate(args.db):
            print(f"applied {step}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
