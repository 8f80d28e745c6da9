#!/usr/bin/env python3
"""One-shot migration of the local fallback store into MongoDB."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from clientdesk.core.config import AppConfig
from clientdesk.core.local_migration import MIGRATION_PLAN, migrate_local_store
from clientdesk.core.local_store import LocalKeyValueStore
from clientdesk.core.logging import setup_logging
from clientdesk.core.mongo import connect_database


def _parse_args(config: AppConfig) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Copy local fallback arrays into their MongoDB collections.",
    )
    parser.add_argument(
        "--local-store-dir",
        type=Path,
        default=Path(config.store.local_store_dir),
        help="Directory holding the local fallback JSON arrays.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Count records per collection without writing.",
    )
    return parser.parse_args()


def main() -> int:
    """Run the migration and print per-collection counts."""
    load_dotenv()
    config = AppConfig.from_env()
    setup_logging(config.logging.level)
    args = _parse_args(config)

    if not args.local_store_dir.exists():
        print(f"ERROR: local store dir not found: {args.local_store_dir}", file=sys.stderr)
        return 1
    kv = LocalKeyValueStore(args.local_store_dir)

    collections: dict[str, Any] = {}
    if not args.dry_run:
        db = connect_database(config.store)
        if db is None:
            print("ERROR: MongoDB is not reachable. Check MONGODB_URI.", file=sys.stderr)
            return 1
        collections = {name: db[name] for _, name, _ in MIGRATION_PLAN}

    counts = migrate_local_store(kv, collections, dry_run=args.dry_run)
    print(f"Local store dir: {args.local_store_dir}")
    print(f"Mode: {'dry-run' if args.dry_run else 'write'}")
    print("Inserted:" if not args.dry_run else "Would insert:")
    for name, count in counts.items():
        print(f"  {name}: {count}")
    print("Migration completed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
