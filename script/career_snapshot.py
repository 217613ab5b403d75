#!/usr/bin/env python3
"""
Export or import the career data store as a JSON snapshot.

Usage
  python script/career_snapshot.py export data/career_snapshot.json
  python script/career_snapshot.py import data/career_snapshot.json [--replace]

Notes
- The database comes from DATABASE_URL (or the user settings file), same as the API.
- Import goes through the normal validation, so a bad record stops the run.
- Without --replace, imported experiences, skills, projects and educations are
  added next to the existing ones. The profile is always overwritten.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from career_data_api.db.repository import get_career_store
from career_data_api.db.session import dispose_engine, init_db
from career_data_api.db.sync import (
    export_career_data,
    import_career_data,
    read_career_json,
    write_career_json,
)
from career_data_api.errors import CareerDataError

logger = logging.getLogger(__name__)


def main() -> int:
    """Main.

    Returns:
        Process exit code.
    """
    p = argparse.ArgumentParser()
    p.add_argument("command", choices=["export", "import"])
    p.add_argument("path", type=str, help="Snapshot JSON file")
    p.add_argument("--replace", action="store_true", help="Delete existing records before import")
    args = p.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    init_db()
    store = get_career_store()
    try:
        if args.command == "export":
            data = write_career_json(args.path, export_career_data(store))
            logger.info(
                "Exported %s experiences, %s skills, %s projects, %s educations to %s",
                len(data["experiences"]),
                len(data["skills"]),
                len(data["projects"]),
                len(data["educations"]),
                args.path,
            )
        else:
            in_path = Path(args.path)
            if not in_path.exists():
                raise SystemExit(f"Input file not found: {in_path}")
            import_career_data(store, read_career_json(in_path), replace=args.replace)
    except CareerDataError as exc:
        print(f"{exc.kind.value}: {exc.message}", file=sys.stderr)
        return 1
    finally:
        dispose_engine()
    return 0


if __name__ == "__main__":
    sys.exit(main())
