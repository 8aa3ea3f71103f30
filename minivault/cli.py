"""
Command-line interface for Minivault.
Manage a miniature collection with undo/redo, CSV interchange and backups.
"""

import argparse
import locale
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .inventory.collection import InventoryCollection
from .inventory.errors import MinivaultError
from .inventory.history import HistoryStore
from .inventory.models import ALL_CATEGORIES, SORTABLE_KEYS, STATUSES, Entry, FilterSpec, SortConfig
from .inventory.registry import CategoryRegistry
from .inventory.stats import collection_summary, progress_segments
from .inventory.view import derive_view
from .utils.backup import read_backup, write_backup
from .utils.config import Config
from .utils.project_constants import PROJECT_NAME, PROJECT_VERSION
from .utils.storage import create_storage


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="minivault",
        description="Track a miniature collection with undo/redo and CSV import/export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Add a unit
  minivault add "Intercessors" --category "Warhammer 40,000" --group "Ultramarines" --status Primed -q 5

  # Show painted-or-not for one faction, largest units first
  minivault list --group ultramarines --sort quantity --desc

  # Replace the collection from a spreadsheet export, then change your mind
  minivault import-csv collection.csv
  minivault undo

Environment Variables:
  MINIVAULT_STORAGE_BACKEND  - memory, json or sql
  MINIVAULT_STORAGE_PATH     - JSON history file
  MINIVAULT_DB_URL           - SQLAlchemy database URL
  MINIVAULT_HISTORY_KEY      - key the history is stored under
        """,
    )
    parser.add_argument("--version", action="version", version=f"{PROJECT_NAME} {PROJECT_VERSION}")
    parser.add_argument("--config-dir", help="Directory holding config.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List entries")
    list_parser.add_argument("--category", default=ALL_CATEGORIES, help="Exact category name (default: all)")
    list_parser.add_argument("--group", default="", help="Group name contains this text")
    list_parser.add_argument("--search", "-s", default="", help="Free-text search")
    list_parser.add_argument("--sort", choices=SORTABLE_KEYS, help="Sort key")
    list_parser.add_argument("--desc", action="store_true", help="Sort descending")

    add_parser = subparsers.add_parser("add", help="Add an entry")
    add_parser.add_argument("name")
    add_parser.add_argument("--category", "-c", required=True)
    add_parser.add_argument("--group", "-g", default="")
    add_parser.add_argument("--status", default=STATUSES[0].value,
                            help=f"One of: {', '.join(s.value for s in STATUSES)}")
    add_parser.add_argument("--quantity", "-q", type=int, default=1)
    add_parser.add_argument("--notes", "-n")

    update_parser = subparsers.add_parser("update", help="Change fields on one or more entries")
    update_parser.add_argument("ids", nargs="+")
    update_parser.add_argument("--name")
    update_parser.add_argument("--category")
    update_parser.add_argument("--group")
    update_parser.add_argument("--status")
    update_parser.add_argument("--quantity", type=int)
    update_parser.add_argument("--notes")

    delete_parser = subparsers.add_parser("delete", help="Delete entries")
    delete_parser.add_argument("ids", nargs="+")

    subparsers.add_parser("undo", help="Undo the last change")
    subparsers.add_parser("redo", help="Redo the last undone change")

    import_parser = subparsers.add_parser("import-csv", help="Replace the collection from a CSV file")
    import_parser.add_argument("file")

    export_parser = subparsers.add_parser("export-csv", help="Write the collection as CSV")
    export_parser.add_argument("--output", "-o", help="Output file (default: stdout)")

    backup_parser = subparsers.add_parser("backup", help="Save the full history, including undo/redo")
    backup_parser.add_argument("file")
    backup_parser.add_argument("--format", choices=["json", "yaml"], help="Default: from file suffix")

    restore_parser = subparsers.add_parser("restore", help="Load a full history backup")
    restore_parser.add_argument("file")
    restore_parser.add_argument("--format", choices=["json", "yaml"], help="Default: from file suffix")

    categories_parser = subparsers.add_parser("categories", help="List or register categories")
    categories_parser.add_argument("--add", help="Register a new category")

    subparsers.add_parser("stats", help="Show painting progress")

    return parser


class AppContext:
    """Config, store and collection wired together for one CLI run."""

    def __init__(self, config: Config):
        self.config = config
        storage_config = config.get_storage_config()
        self.storage = create_storage(storage_config)
        self.store = HistoryStore(self.storage, key=storage_config["key"])
        self.collection = InventoryCollection(self.store)
        self.registry = CategoryRegistry(config.get_categories(), on_change=config.set_categories)


def format_entry(entry: Entry) -> str:
    line = f"{entry.id}  {entry.name} [{entry.category} / {entry.group}] {entry.status.value} x{entry.quantity}"
    if entry.notes:
        line += f" - {entry.notes}"
    return line


def _warn_if_not_durable(ctx: AppContext):
    if not ctx.store.last_save_ok:
        print("⚠️  Change applied but could not be saved; see log for details")


def run_list_command(ctx: AppContext, args) -> int:
    view_config = ctx.config.get_view_config()
    if args.sort:
        key, direction = args.sort, "asc"
    else:
        key = view_config.get("sort_key", "name")
        direction = view_config.get("sort_direction", "asc")
    if args.desc:
        direction = "desc"
    entries = derive_view(
        ctx.collection.entries,
        FilterSpec(category=args.category, group=args.group),
        args.search,
        SortConfig(key=key, direction=direction),
    )
    for entry in entries:
        print(format_entry(entry))
    print(f"📋 {len(entries)} of {len(ctx.collection.entries)} entries")
    return 0


def run_add_command(ctx: AppContext, args) -> int:
    entry = ctx.collection.add_entry(Entry(
        name=args.name,
        category=args.category,
        group=args.group,
        status=args.status,
        quantity=args.quantity,
        notes=args.notes,
    ))
    if not ctx.registry.contains(entry.category):
        print(f"ℹ️  '{entry.category}' is not a registered category")
    print(f"✅ Added {entry.name} ({entry.id})")
    _warn_if_not_durable(ctx)
    return 0


def run_update_command(ctx: AppContext, args) -> int:
    updates = {
        field: getattr(args, field)
        for field in ("name", "category", "group", "status", "quantity", "notes")
        if getattr(args, field) is not None
    }
    if not updates:
        print("❌ Nothing to update; pass at least one field option")
        return 1
    missing = [entry_id for entry_id in args.ids if ctx.collection.get(entry_id) is None]
    if missing:
        print(f"❌ Unknown entry id(s): {', '.join(missing)}")
        return 1
    if ctx.collection.bulk_update(args.ids, updates):
        print(f"✅ Updated {len(args.ids)} entr{'y' if len(args.ids) == 1 else 'ies'}")
        _warn_if_not_durable(ctx)
    else:
        print("ℹ️  No changes")
    return 0


def run_delete_command(ctx: AppContext, args) -> int:
    if ctx.collection.bulk_delete(args.ids):
        print(f"🗑️  Deleted {len(ctx.store.past[-1]) - len(ctx.collection.entries)} entries")
        _warn_if_not_durable(ctx)
    else:
        print("ℹ️  No matching entries")
    return 0


def run_undo_command(ctx: AppContext, args) -> int:
    if not ctx.store.undo():
        print("ℹ️  Nothing to undo")
        return 0
    print(f"↩️  Undone ({len(ctx.store.past)} more available)")
    _warn_if_not_durable(ctx)
    return 0


def run_redo_command(ctx: AppContext, args) -> int:
    if not ctx.store.redo():
        print("ℹ️  Nothing to redo")
        return 0
    print(f"↪️  Redone ({len(ctx.store.future)} more available)")
    _warn_if_not_durable(ctx)
    return 0


def run_import_command(ctx: AppContext, args) -> int:
    text = Path(args.file).read_text(encoding="utf-8")
    result = ctx.collection.import_csv(text)
    print(f"✅ Imported {result.accepted_count} entries")
    if result.skipped_count:
        print(f"⚠️  Skipped {result.skipped_count} malformed row(s):")
        for problem in result.skipped:
            print(f"   {problem}")
    _warn_if_not_durable(ctx)
    return 0


def run_export_command(ctx: AppContext, args) -> int:
    text = ctx.collection.export_csv()
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"📄 Exported {len(ctx.collection.entries)} entries to {args.output}")
    else:
        print(text)
    return 0


def run_backup_command(ctx: AppContext, args) -> int:
    path = write_backup(args.file, ctx.store.history, args.format)
    print(f"💾 History saved to {path}")
    return 0


def run_restore_command(ctx: AppContext, args) -> int:
    history = read_backup(args.file, args.format)
    ctx.store.restore(history)
    print(f"✅ Restored {len(history.present)} entries "
          f"({len(history.past)} undo / {len(history.future)} redo steps)")
    _warn_if_not_durable(ctx)
    return 0


def run_categories_command(ctx: AppContext, args) -> int:
    if args.add:
        if ctx.registry.add(args.add):
            print(f"✅ Registered category {args.add.strip()}")
        else:
            print(f"❌ Category already exists: {args.add.strip()}")
            return 1
        return 0
    for name in ctx.registry.names():
        print(name)
    return 0


def run_stats_command(ctx: AppContext, args) -> int:
    summary = collection_summary(ctx.collection.entries)
    print(f"Units: {summary.total_units}")
    print(f"Models: {summary.total_models} ({summary.painted_models} painted, "
          f"{summary.unpainted_models} unpainted)")
    for status in sorted(summary.models_by_status, key=lambda s: s.progress):
        print(f"  {status.progress}. {status.value}: {summary.models_by_status[status]}")
    for segment in progress_segments(ctx.collection.entries):
        print(f"  [{segment.label}] {segment.count} ({segment.percentage:.1f}%)")
    return 0


COMMANDS = {
    "list": run_list_command,
    "add": run_add_command,
    "update": run_update_command,
    "delete": run_delete_command,
    "undo": run_undo_command,
    "redo": run_redo_command,
    "import-csv": run_import_command,
    "export-csv": run_export_command,
    "backup": run_backup_command,
    "restore": run_restore_command,
    "categories": run_categories_command,
    "stats": run_stats_command,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logging.getLogger("minivault.cli").warning("Using default collation: %s", e)

    try:
        ctx = AppContext(Config(args.config_dir))
        return COMMANDS[args.command](ctx, args)
    except MinivaultError as e:
        print(f"❌ {e}")
        return 1
    except (OSError, ValueError) as e:
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n❌ Operation cancelled by user")
        return 1


def cli_entry_point():
    """Entry point for console script."""
    sys.exit(main())


if __name__ == "__main__":
    sys.exit(main())
