#!/usr/bin/env python3
"""Create the database schema and seed the shared categories."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finsight import db


def main() -> None:
    print("🌱 Seeding categories...")
    db.init_db()
    for category in db.fetch_categories():
        print(f"  {category.icon} {category.name}")
    print(f"✅ Seed completed ({db.DB_PATH_STR})")


if __name__ == '__main__':
    main()
