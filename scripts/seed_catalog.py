#!/usr/bin/env python3
"""
Seed the milestone catalog from a YAML fixture.

Creates the schema if needed, then inserts every catalog entry that is not
already present (same name and project type).  Existing entries are left
untouched, so the script can be re-run after adding milestones to the file.

Usage:
  python3 scripts/seed_catalog.py [--catalog PATH] [--settings PATH]
                                  [--db-url URL] [--actor ACTOR] [--dry-run]
"""

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from sqlalchemy import select

from progress_config import DEFAULT_CATALOG_PATH, get_settings
from progress_config.bridges import build_access_policy
from progress_config.loader import compute_checksum, load_catalog_file, load_yaml_file
from progress_kernel.db.access_control import bind_access_policy, register_access_listeners
from progress_kernel.db.engine import create_tables, init_engine_from_url, session_scope
from progress_kernel.logging_config import configure_logging
from progress_kernel.models.milestone import Milestone
from progress_kernel.services.catalog_service import CatalogService


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Load a milestone catalog fixture into the database")
    p.add_argument(
        "--catalog",
        type=Path,
        default=DEFAULT_CATALOG_PATH,
        help=f"Catalog YAML (default: {DEFAULT_CATALOG_PATH})",
    )
    p.add_argument("--settings", type=Path, default=None, help="Settings YAML")
    p.add_argument("--db-url", default=None, help="Database URL (overrides settings)")
    p.add_argument("--actor", default="admin", help="Actor id the writes are made as")
    p.add_argument("--dry-run", action="store_true", help="List what would be inserted")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings(args.settings)
    configure_logging(level=getattr(logging, settings.log_level, logging.INFO))

    entries = load_catalog_file(args.catalog)
    checksum = compute_checksum(load_yaml_file(args.catalog))
    print(f"Catalog: {args.catalog} ({len(entries)} entries, sha256 {checksum[:16]}...)")

    init_engine_from_url(args.db_url or settings.database_url, echo=settings.echo)
    create_tables()
    register_access_listeners()

    inserted = skipped = failed = 0
    with session_scope() as session:
        bind_access_policy(session, build_access_policy(settings), actor_id=args.actor)
        service = CatalogService(session)
        existing = {
            (m.project_type, m.name) for m in session.scalars(select(Milestone))
        }
        for entry in entries:
            if (entry.project_type, entry.name) in existing:
                skipped += 1
                continue
            if args.dry_run:
                print(f"  would insert: [{entry.project_type}] {entry.name}")
                inserted += 1
                continue
            result = service.create_milestone(
                entry.name, entry.description, entry.project_type, actor_id=args.actor
            )
            if result.is_success:
                inserted += 1
                print(f"  inserted: [{entry.project_type}] {entry.name}")
            else:
                failed += 1
                print(
                    f"  FAILED ({result.status.value}): [{entry.project_type}] {entry.name}"
                    f" {result.message or result.field_errors}",
                    file=sys.stderr,
                )

    print(f"Done. inserted={inserted} skipped={skipped} failed={failed}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
