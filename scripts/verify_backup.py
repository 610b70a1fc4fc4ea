"""Check a `mysqldump` backup file and compare its row counts with the live database.

Usage: python scripts/verify_backup.py backups/qrchek_20240313_200000.sql
"""

from __future__ import annotations

import argparse
import importlib
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import mysql.connector

from config import get_settings_module

TABLES = ("employees", "attendance_records")

_CREATE_RE = re.compile(r"^CREATE TABLE `(?P<table>\w+)`", re.MULTILINE)
_INSERT_RE = re.compile(r"^INSERT INTO `(?P<table>\w+)` VALUES ", re.MULTILINE)


@dataclass
class DumpSummary:
    tables: set = field(default_factory=set)
    rows: dict = field(default_factory=dict)
    completed: bool = False

    def problems(self) -> list:
        out = [f"missing CREATE TABLE for {t}" for t in TABLES if t not in self.tables]
        if not self.completed:
            out.append("no 'Dump completed' trailer (file is truncated or the dump failed)")
        return out


def _count_tuples(text: str, start: int) -> int:
    """Count the top-level ``(...)`` groups of one extended INSERT, up to its ``;``."""
    count = depth = 0
    quote = None
    i = start
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "(":
            if depth == 0:
                count += 1
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == ";" and depth == 0:
            break
        i += 1
    return count


def summarize_dump(text: str) -> DumpSummary:
    summary = DumpSummary(completed="-- Dump completed" in text)
    summary.tables.update(m.group("table") for m in _CREATE_RE.finditer(text))
    for m in _INSERT_RE.finditer(text):
        table = m.group("table")
        summary.rows[table] = summary.rows.get(table, 0) + _count_tuples(text, m.end())
    for table in summary.tables:
        summary.rows.setdefault(table, 0)
    return summary


def read_dump(path: Path) -> DumpSummary:
    if not path.is_file():
        raise SystemExit(f"Backup file not found: {path}")
    if path.stat().st_size == 0:
        raise SystemExit(f"Backup file is empty: {path}")
    return summarize_dump(path.read_text(encoding="utf-8", errors="replace"))


def database_counts(db: dict) -> dict:
    conn = mysql.connector.connect(
        host=db["host"],
        port=int(db.get("port", 3306)),
        user=db["user"],
        password=db["password"],
        database=db["database"],
    )
    try:
        cur = conn.cursor()
        counts = {}
        for table in TABLES:
            cur.execute(f"SELECT COUNT(*) FROM `{table}`")
            counts[table] = int(cur.fetchone()[0])
        cur.close()
        return counts
    finally:
        conn.close()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("backup_file", type=Path)
    parser.add_argument("--offline", action="store_true", help="only check the file, skip the database")
    args = parser.parse_args()

    summary = read_dump(args.backup_file)
    problems = summary.problems()

    print(f"Backup: {args.backup_file}")
    if args.offline:
        for table in TABLES:
            print(f"  {table:<20} {summary.rows.get(table, 0):>8}")
    else:
        settings = importlib.import_module(get_settings_module())
        live = database_counts(settings.DB_CONFIG)
        print(f"  {'table':<20} {'backup':>8} {'database':>9}")
        for table in TABLES:
            print(f"  {table:<20} {summary.rows.get(table, 0):>8} {live[table]:>9}")
            diff = live[table] - summary.rows.get(table, 0)
            if diff:
                print(f"    {diff:+d} rows since backup")

    if problems:
        for p in problems:
            print(f"ERROR: {p}")
        raise SystemExit(1)
    print("OK: Backup file is complete")


if __name__ == "__main__":
    main()
