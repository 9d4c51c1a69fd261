#!/usr/bin/env python3
"""
Main entry point for mood-journal.

Command-line interface for CSV import/export, external-source sync and
journal summaries.
"""
from typing import List, Optional
import argparse
import asyncio
import dataclasses
import os
import sys
import logging
from pathlib import Path

from mood_journal.analysis import find_unused_tags, summarize_records
from mood_journal.backup import cleanup_old_backups, create_timestamped_backup
from mood_journal.config import DEFAULT_ACTIVITY_TAGS, DEFAULT_MOOD_TAGS, Config, get_config
from mood_journal.csvio.engine import export_all, import_with_duplicate_check
from mood_journal.logger_config import setup_logging
from mood_journal.models import now_local
from mood_journal.store import JournalStore, RecordNotFoundError
from mood_journal.sync.reconcile import delete_with_external, pull_from_source, push_to_source
from mood_journal.sync.source import JsonFileMoodSource
from mood_journal.utils import Colors, format_duration, format_record_count
from mood_journal.visualization import plot_mood_distribution, plot_mood_timeline


def print_section(title: str) -> None:
    """Print a formatted section title."""
    print(f"\n{Colors.BOLD}{Colors.HEADER}{'=' * 60}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.HEADER}{title}{Colors.ENDC}")
    print(f"{Colors.BOLD}{Colors.HEADER}{'=' * 60}{Colors.ENDC}\n")


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Local mood journal: CSV import/export and sync.")
    parser.add_argument(
        "--db-path",
        default=None,
        help="Path to the journal database (defaults to $MOOD_JOURNAL_DB_PATH "
        "or ~/.mood_journal/journal.db).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export every record as CSV.")
    export_parser.add_argument(
        "--output", "-o", default=None, help="File to write (default: stdout)."
    )
    export_parser.add_argument(
        "--oldest-first", action="store_true", help="Write records in chronological order."
    )

    import_parser = subparsers.add_parser("import", help="Import a CSV file, skipping duplicates.")
    import_parser.add_argument("file", help="CSV file to import.")
    import_parser.add_argument(
        "--loose", action="store_true", help="Also apply the loose (5 minute) duplicate tier."
    )
    import_parser.add_argument("--dry-run", action="store_true", help="Report without inserting.")
    import_parser.add_argument(
        "--no-backup", action="store_true", help="Skip the store backup taken before importing."
    )
    import_parser.add_argument(
        "--keep-backups", type=int, default=5, help="Backups to keep (default: 5)."
    )

    pull_parser = subparsers.add_parser("pull", help="Pull records from a JSON mood source.")
    pull_parser.add_argument("source", help="Path to the JSON sample file.")
    pull_parser.add_argument(
        "--days", type=int, default=None, help="How many days back to look (default: 30)."
    )

    push_parser = subparsers.add_parser("push", help="Push unlinked records to a JSON mood source.")
    push_parser.add_argument("source", help="Path to the JSON sample file.")

    delete_parser = subparsers.add_parser("delete", help="Delete a record (and its linked sample).")
    delete_parser.add_argument("record_id", help="Id of the record to delete.")
    delete_parser.add_argument("--source", default=None, help="JSON mood source holding the link.")

    subparsers.add_parser("summary", help="Print journal statistics.")

    chart_parser = subparsers.add_parser("chart", help="Write a plotly chart as HTML.")
    chart_parser.add_argument(
        "--kind", choices=("distribution", "timeline"), default="distribution"
    )
    chart_parser.add_argument("--output", "-o", default="mood_chart.html")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser.parse_args(argv)


def _cmd_export(args: argparse.Namespace, config: Config) -> int:
    with JournalStore(config.store_path) as store:
        content = export_all(store.all_records(newest_first=not args.oldest_first))

    if args.output:
        Path(args.output).write_text(content, encoding="utf-8")
        print(f"{Colors.OKGREEN}Exported to {args.output}{Colors.ENDC}")
    else:
        sys.stdout.write(content)
    return 0


def _cmd_import(args: argparse.Namespace, config: Config) -> int:
    text = Path(args.file).read_text(encoding="utf-8-sig")
    if not text.strip():
        print(f"{Colors.WARNING}File is empty, nothing to import.{Colors.ENDC}")
        return 0

    policy = config.duplicate_policy
    if args.loose:
        policy = dataclasses.replace(policy, loose_tier_enabled=True)

    if not args.dry_run and not args.no_backup and config.store_path.exists():
        backup = create_timestamped_backup(config.store_path, config.backups_dir)
        cleanup_old_backups(config.backups_dir, keep_count=args.keep_backups)
        print(f"Backup written: {backup.path}")

    with JournalStore(config.store_path) as store:
        result = import_with_duplicate_check(text, store.all_records(), policy)
        if not args.dry_run:
            store.insert_many(result.imported)
            store.set_state("last_import", now_local().isoformat(sep=" "))

    color = Colors.OKGREEN if result.imported else Colors.WARNING
    prefix = "[dry run] " if args.dry_run else ""
    print(f"{color}{prefix}{result}{Colors.ENDC}")
    return 0


def _cmd_pull(args: argparse.Namespace, config: Config) -> int:
    source = JsonFileMoodSource(Path(args.source))
    with JournalStore(config.store_path) as store:
        new_records = asyncio.run(
            pull_from_source(
                source,
                store.all_records(),
                activity_placeholder=config.sync_activity_placeholder,
                window_seconds=config.sync_window_seconds,
                lookback_days=args.days or config.sync_lookback_days,
            )
        )
        store.insert_many(new_records)
        store.set_state("last_pull", now_local().isoformat(sep=" "))

    print(f"{Colors.OKGREEN}Pulled {len(new_records)} new records{Colors.ENDC}")
    return 0


def _cmd_push(args: argparse.Namespace, config: Config) -> int:
    source = JsonFileMoodSource(Path(args.source))
    with JournalStore(config.store_path) as store:
        result = asyncio.run(push_to_source(source, store.all_records()))
        store.link_external_refs(result.linked)

    color = Colors.OKGREEN if result.failed == 0 else Colors.WARNING
    print(f"{color}{result}{Colors.ENDC}")
    return 0


def _cmd_delete(args: argparse.Namespace, config: Config) -> int:
    source = JsonFileMoodSource(Path(args.source)) if args.source else None
    with JournalStore(config.store_path) as store:
        try:
            record = store.get(args.record_id)
        except RecordNotFoundError:
            print(f"{Colors.FAIL}No record with id {args.record_id}{Colors.ENDC}")
            return 1
        external_deleted = asyncio.run(delete_with_external(store, record, source))

    print(f"{Colors.OKGREEN}Deleted {record.id}{Colors.ENDC}")
    if record.external_ref:
        state = "deleted" if external_deleted else "left in place"
        print(f"Linked sample {record.external_ref}: {state}")
    return 0


def _cmd_summary(args: argparse.Namespace, config: Config) -> int:
    with JournalStore(config.store_path) as store:
        records = store.all_records()

    summary = summarize_records(records)

    print_section("Journal Summary")
    print(f"Total records: {format_record_count(summary['total_records'])}")
    print(f"Records with a time range: {summary['records_with_time_range']}")
    print(f"Total recorded time: {format_duration(summary['total_duration_seconds'])}")
    print(f"Linked to an external source: {summary['linked_records']}")
    if summary["first_event"]:
        print(f"First entry: {summary['first_event']}")
        print(f"Latest entry: {summary['last_event']}")

    print_section("Moods")
    for mood, count in summary["mood_counts"].items():
        print(f"  {mood:20s}: {count:>6,}")

    print_section("Activities")
    for activity, count in summary["activity_counts"].items():
        print(f"  {activity or '(none)':20s}: {count:>6,}")

    unused_moods, unused_activities = find_unused_tags(
        records,
        config.mood_tags,
        config.activity_tags,
        default_mood_tags=DEFAULT_MOOD_TAGS,
        default_activity_tags=DEFAULT_ACTIVITY_TAGS,
    )
    if unused_moods or unused_activities:
        print_section("Unused Tags")
        print(f"  Moods: {', '.join(unused_moods) or '-'}")
        print(f"  Activities: {', '.join(unused_activities) or '-'}")
    return 0


def _cmd_chart(args: argparse.Namespace, config: Config) -> int:
    with JournalStore(config.store_path) as store:
        records = store.all_records()

    if args.kind == "timeline":
        fig = plot_mood_timeline(records, output_file=args.output)
    else:
        mood_counts = summarize_records(records)["mood_counts"]
        fig = plot_mood_distribution(mood_counts, output_file=args.output)

    if fig is None:
        print(f"{Colors.FAIL}Plotly is not installed.{Colors.ENDC}")
        return 1
    print(f"{Colors.OKGREEN}Chart written to {args.output}{Colors.ENDC}")
    return 0


def _cmd_serve(args: argparse.Namespace, config: Config) -> int:
    import uvicorn

    # The API resolves the store from the environment
    os.environ["MOOD_JOURNAL_DB_PATH"] = config.store_path_str
    uvicorn.run("mood_journal.api:app", host=args.host, port=args.port)
    return 0


COMMANDS = {
    "export": _cmd_export,
    "import": _cmd_import,
    "pull": _cmd_pull,
    "push": _cmd_push,
    "delete": _cmd_delete,
    "summary": _cmd_summary,
    "chart": _cmd_chart,
    "serve": _cmd_serve,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    setup_logging()
    config = get_config(store_path=args.db_path)

    try:
        return COMMANDS[args.command](args, config)
    except Exception as e:
        print(f"{Colors.FAIL}Error: {e}{Colors.ENDC}")
        logging.exception("Error during execution")
        return 1


if __name__ == "__main__":
    sys.exit(main())
