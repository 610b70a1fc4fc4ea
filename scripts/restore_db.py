"""Restore the database from a `mysqldump` backup (MySQL client tools must be installed).

The dump drops and recreates `employees` and `attendance_records`, so every
current row is replaced. Run scripts/verify_backup.py first if unsure.

Usage: python scripts/restore_db.py backups/qrchek_20240313_200000.sql [--yes]
"""

from __future__ import annotations

import argparse
import importlib
import os
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from scripts.verify_backup import TABLES, read_dump


def main() -> None:
    parser = argparse.ArgumentParser(description="Restore the database from a mysqldump file.")
    parser.add_argument("backup_file", type=Path)
    parser.add_argument("--yes", action="store_true", help="do not ask for confirmation")
    args = parser.parse_args()

    summary = read_dump(args.backup_file)
    problems = summary.problems()
    if problems:
        raise SystemExit("Refusing to restore: " + "; ".join(problems))

    settings = importlib.import_module(get_settings_module())
    db = settings.DB_CONFIG

    print(f"Backup: {args.backup_file}")
    for table in TABLES:
        print(f"  {table:<20} {summary.rows.get(table, 0):>8} rows")
    print(f"Target: {db['user']}@{db['host']}:{db.get('port', 3306)}/{db['database']}")

    if not args.yes:
        answer = input("This replaces ALL current data. Continue? (y/N): ").strip().lower()
        if answer not in {"y", "yes"}:
            print("Restore cancelled")
            return

    cmd = [
        "mysql",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        db["database"],
    ]
    env = dict(os.environ, MYSQL_PWD=str(db["password"]))

    try:
        with args.backup_file.open("rb") as f:
            subprocess.run(cmd, stdin=f, stderr=subprocess.PIPE, check=True, env=env)
    except FileNotFoundError:
        raise SystemExit("`mysql` not found. Install the MySQL client tools.")
    except subprocess.CalledProcessError as exc:
        raise SystemExit(f"Restore failed: {exc.stderr.decode(errors='replace').strip()}")
    print(f"OK: Restored {db['database']} from {args.backup_file}")


if __name__ == "__main__":
    main()
