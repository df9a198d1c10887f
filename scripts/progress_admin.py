#!/usr/bin/env python3
"""
progress_admin.py - Inspect, reset, export or import stored progress.

Operates on the progress slot configured in settings (PHASENAV_PROGRESS_DB,
PHASENAV_STORAGE_KEY, or phasenav.yaml).

Usage:
  python scripts/progress_admin.py show
  python scripts/progress_admin.py reset
  python scripts/progress_admin.py export --output progress.json
  python scripts/progress_admin.py import progress.json
  python scripts/progress_admin.py complete brd overview
"""

import argparse
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError

from phasenav.classroom import ProgressStore, load_curriculum
from phasenav.config import load_settings
from phasenav.schemas import ProgressState

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def open_store(db_path: Path = None, storage_key: str = None) -> ProgressStore:
    settings = load_settings()
    return ProgressStore(
        db_path=db_path or settings.progress_db,
        storage_key=storage_key or settings.storage_key,
        curriculum=load_curriculum(settings.curriculum_file),
    )


def cmd_show(store: ProgressStore, args) -> int:
    stats = store.get_completion_stats()
    logger.info(f"Slot: {store.storage_key} ({store.db_path})")
    logger.info(f"Current phase: {stats['current_phase']}")
    logger.info(
        f"Completed: {stats['completed']}/{stats['total_modules']} modules "
        f"({stats['completion_percent']}%)"
    )
    for phase in stats["phases"]:
        marker = "unlocked" if phase["unlocked"] else "locked"
        logger.info(f"  {phase['label']:<14} {phase['completed']}/{phase['total']} ({marker})")
    return 0


def cmd_reset(store: ProgressStore, args) -> int:
    store.reset()
    logger.info(f"Reset progress in slot '{store.storage_key}'")
    return 0


def cmd_export(store: ProgressStore, args) -> int:
    data = json.loads(store.get_progress().to_json())
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Exported progress to: {args.output}")
    else:
        print(json.dumps(data, indent=2))
    return 0


def cmd_import(store: ProgressStore, args) -> int:
    try:
        state = ProgressState.model_validate_json(Path(args.input).read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.error(f"Cannot import {args.input}: {e}")
        return 1
    store.progress = state
    store.save()
    logger.info(f"Imported progress from: {args.input}")
    return 0


def cmd_complete(store: ProgressStore, args) -> int:
    result = store.complete_module(args.phase, args.module)
    if not result.completed:
        logger.warning(f"Nothing changed: {args.phase}/{args.module} is locked or already completed")
        return 1
    logger.info(f"Completed {result.phase}/{result.module}")
    if result.unlocked_module:
        logger.info(f"  Unlocked module: {result.unlocked_module}")
    if result.unlocked_phases:
        logger.info(f"  Unlocked phases: {', '.join(result.unlocked_phases)}")
    return 0


COMMANDS = {
    "show": cmd_show,
    "reset": cmd_reset,
    "export": cmd_export,
    "import": cmd_import,
    "complete": cmd_complete,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect and manage stored project progress",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Progress database (default: from settings)"
    )
    parser.add_argument(
        "--key",
        default=None,
        help="Storage key (default: from settings)"
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("show", help="Print unlock and completion summary")
    sub.add_parser("reset", help="Reset progress to the initial state")

    export = sub.add_parser("export", help="Write the stored record as JSON")
    export.add_argument("--output", type=Path, default=None, help="Output file (default: stdout)")

    imp = sub.add_parser("import", help="Replace the stored record from a JSON file")
    imp.add_argument("input", type=Path)

    complete = sub.add_parser("complete", help="Mark an unlocked module completed")
    complete.add_argument("phase")
    complete.add_argument("module")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    store = open_store(args.db, args.key)
    return COMMANDS[args.command](store, args)


if __name__ == "__main__":
    sys.exit(main())
