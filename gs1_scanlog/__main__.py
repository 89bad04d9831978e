"""
CLI interface for the GS1 scan log.

Usage:
    gs1-scanlog scan "<scan text>" [--json] [--now DATE] [--provider NAME] [--dry-run]
    gs1-scanlog list [--json]
    gs1-scanlog remove INDEX
    gs1-scanlog export {csv,xlsx,pdf} [--columns 01,10,17] [--output-dir DIR]

Common options:
    --settings PATH     JSON settings file
    --store PATH        Scan log file (overrides settings)
    --rules PATH        Provider rules file (overrides settings)
    --log-level LEVEL   Logging level
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

from .core.classifier import load_rules
from .core.decoder import PLAIN_TEXT_KEY
from .formatters.json_formatter import format_outcome_json
from .pipeline import ScanOutcome, handle_scan, process_scan
from .reports import export_csv, export_excel, export_pdf, records_to_dataframe
from .settings import configure_logging, load_settings
from .storage import ScanStore
from .utils import timestamp_slug


EXIT_OK = 0
EXIT_EMPTY = 1
EXIT_DUPLICATE = 2


def format_outcome(outcome: ScanOutcome) -> str:
    """Format a scan outcome for display."""
    decoded = outcome.decoded
    lines = [
        "=" * 60,
        "GS1 Scan",
        "=" * 60,
        f"Raw Input: {decoded.raw!r}",
    ]
    if decoded.symbology_identifier:
        lines.append(f"Symbology: {decoded.symbology_identifier}")
    lines.extend([
        f"GS Separators Found: {decoded.gs_seen}",
        f"Provider: {outcome.provider_label}",
        "",
        "Fields:",
        "-" * 40,
    ])

    for item in outcome.interpreted:
        line = f"  {item.label}: {item.display}"
        if item.code != PLAIN_TEXT_KEY and item.display != item.raw:
            line += f"  [{item.raw}]"
        lines.append(line)
        for error in item.errors:
            lines.append(f"    ! {error}")

    if decoded.warnings:
        lines.extend(["", "Warnings:", "-" * 40])
        for warning in decoded.warnings:
            lines.append(f"  [{warning.code}] {warning.message}")

    lines.append("")
    if outcome.record is None:
        lines.append("Nothing to log.")
    elif outcome.duplicate:
        lines.append("Duplicate: this item is already in the log.")
    elif outcome.accepted:
        lines.append("Logged.")
    return '\n'.join(lines)


def _parse_now(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    try:
        return date_parser.isoparse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid --now value: {value!r}") from e


def _columns(value: Optional[str], settings: Dict[str, Any]) -> List[str]:
    if value:
        return [part.strip() for part in value.split(",") if part.strip()]
    return list(settings["export_columns"])


def cmd_scan(args: argparse.Namespace, settings: Dict[str, Any]) -> int:
    rules = load_rules(args.rules or settings["rules_path"] or None)
    store = ScanStore(args.store or settings["store_path"])
    now = _parse_now(args.now)
    override = args.provider or settings["provider_override"] or None

    if args.dry_run:
        outcome = process_scan(
            args.text, now=now, rules=rules, existing=store.list(), provider_override=override,
        )
    else:
        outcome = handle_scan(store, args.text, rules=rules, now=now, provider_override=override)

    if args.json:
        print(format_outcome_json(outcome, include_warnings=True))
    else:
        print(format_outcome(outcome))

    if outcome.record is None:
        return EXIT_EMPTY
    if outcome.duplicate:
        return EXIT_DUPLICATE
    return EXIT_OK


def cmd_list(args: argparse.Namespace, settings: Dict[str, Any]) -> int:
    store = ScanStore(args.store or settings["store_path"])
    records = store.list()
    if args.json:
        print(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))
        return EXIT_OK

    if not records:
        print("No scans logged.")
        return EXIT_OK
    for index, record in enumerate(records):
        fields = " ".join(f"({ai}){value}" for ai, value in record.fields.items())
        print(f"{index:>4}  {record.scanned_at}  {record.provider:<15} {fields}")
    return EXIT_OK


def cmd_remove(args: argparse.Namespace, settings: Dict[str, Any]) -> int:
    store = ScanStore(args.store or settings["store_path"])
    try:
        record = store.remove(args.index)
    except IndexError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_EMPTY
    print(f"Removed scan {args.index}: {record.raw_text!r}")
    return EXIT_OK


def cmd_export(args: argparse.Namespace, settings: Dict[str, Any]) -> int:
    store = ScanStore(args.store or settings["store_path"])
    df = records_to_dataframe(store.list(), _columns(args.columns, settings))
    out_dir = args.output_dir or settings["export_dir"]
    filename = f"scans_{timestamp_slug()}.{args.format}"

    if args.format == "csv":
        path = export_csv(df, filename, out_dir)
    elif args.format == "xlsx":
        path = export_excel(df, filename, out_dir)
    else:
        path = export_pdf("GS1 Scan Log", df, filename, out_dir, metadata={"Scans": str(len(df))})
    print(str(path))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gs1-scanlog',
        description='Decode GS1 scans and keep a log of unique items'
    )
    parser.add_argument('--settings', default=None, help='JSON settings file')
    parser.add_argument('--store', default=None, help='Scan log JSON file')
    parser.add_argument('--rules', default=None, help='Provider rules JSON file')
    parser.add_argument('--log-level', default=None, help='Logging level (DEBUG, INFO, WARNING, ...)')

    sub = parser.add_subparsers(dest='command', required=True)

    scan = sub.add_parser('scan', help='Decode a scan and log it')
    scan.add_argument('text', help='Scanned text')
    scan.add_argument('--json', action='store_true', help='Output result as JSON')
    scan.add_argument('--now', default=None, help='Reference time (ISO-8601) for expiry checks')
    scan.add_argument('--provider', default=None, help='Provider to record instead of classifying')
    scan.add_argument('--dry-run', action='store_true', help='Decode only, do not log')
    scan.set_defaults(func=cmd_scan)

    lst = sub.add_parser('list', help='List logged scans')
    lst.add_argument('--json', action='store_true', help='Output records as JSON')
    lst.set_defaults(func=cmd_list)

    remove = sub.add_parser('remove', help='Delete a logged scan by index')
    remove.add_argument('index', type=int, help='Index shown by "list"')
    remove.set_defaults(func=cmd_remove)

    export = sub.add_parser('export', help='Export the scan log')
    export.add_argument('format', choices=['csv', 'xlsx', 'pdf'])
    export.add_argument('--columns', default=None, help='Comma separated AIs, e.g. 01,10,17')
    export.add_argument('--output-dir', default=None, help='Directory for the export file')
    export.set_defaults(func=cmd_export)

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.settings)
    configure_logging(args.log_level or settings["log_level"])

    try:
        return args.func(args, settings)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    return EXIT_EMPTY


if __name__ == '__main__':
    sys.exit(main())
