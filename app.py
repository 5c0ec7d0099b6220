import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from wallet_browser.codec.options import IncludeOptions
from wallet_browser.config import load_config
from wallet_browser.core.exceptions import ValidationError
from wallet_browser.core.store import RecordStore
from wallet_browser.logging_config import configure_logging
from wallet_browser.services.analytics import compare, summarize
from wallet_browser.services.export_service import ExportService, StorageFileSink
from wallet_browser.services.import_service import import_csv, import_json
from wallet_browser.services.record_source import JsonFileRecordSource
from wallet_browser.services.snapshot_service import SnapshotService
from wallet_browser.services.storage import LocalFileSystemStorage

logger = logging.getLogger("wallet_browser.app")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Filter, compare and export wallet profiles.")
    parser.add_argument("--config", type=Path, help="JSON config file")
    parser.add_argument("--catalog", type=Path, help="Record catalog (overrides config)")
    parser.add_argument("--import", dest="import_file", type=Path, help="Load records from a CSV/JSON export instead")

    parser.add_argument("--search", default="")
    parser.add_argument("--platform", action="append", default=[])
    parser.add_argument("--custody", action="append", default=[])
    parser.add_argument("--category", action="append", default=[])
    parser.add_argument("--feature", action="append", default=[], metavar="KEY=VALUE",
                        help="e.g. staking=yes or paymentQR=full")
    parser.add_argument("--sort-by", default="name", choices=["name", "lastTested", "securityRank", "uptime"])
    parser.add_argument("--desc", action="store_true")

    parser.add_argument("--compare", action="append", default=[], metavar="ID", help="Toggle a record in the comparison")
    parser.add_argument("--clear-comparison", action="store_true")

    parser.add_argument("--format", help="Export format tag (csv, json)")
    parser.add_argument("--scope", default="view", choices=["view", "comparison"])
    parser.add_argument("--include-links", action="store_true")
    parser.add_argument("--summary", action="store_true", help="Print derived aggregates as JSON")
    return parser


def _parse_features(pairs):
    features = {}
    for pair in pairs:
        key, _, value = pair.partition("=")
        value = value.strip().lower()
        if value in ("yes", "true", "1"):
            features[key] = True
        elif value in ("no", "false", "0"):
            features[key] = False
        else:
            features[key] = value
    return features


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    configure_logging(config)
    logger.info("Starting wallet browser", extra={"state_dir": str(config.state_dir)})

    storage = LocalFileSystemStorage(config.state_dir)
    store = RecordStore(snapshot=SnapshotService(storage), max_selection=config.max_selection)

    if args.import_file:
        text = args.import_file.read_text(encoding="utf-8")
        importer = import_json if args.import_file.suffix.lower() == ".json" else import_csv
        result = importer(store, text)
    else:
        result = store.load_from(JsonFileRecordSource(args.catalog or config.catalog_path))

    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    if not result.ok:
        print(f"error: {result.error}", file=sys.stderr)
        return 1

    try:
        store.set_filters(
            search=args.search,
            platforms=args.platform,
            custody_models=args.custody,
            categories=args.category,
            features=_parse_features(args.feature),
            sort_key=args.sort_by,
            sort_direction="desc" if args.desc else "asc",
        )
    except ValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.clear_comparison:
        store.clear_comparison()
    for record_id in args.compare:
        store.toggle_comparison(record_id)

    for record in store.view:
        marker = "*" if record.id in store.comparison else " "
        print(f"{marker} {record.id:<24} {record.name}")

    if args.summary:
        print(json.dumps(asdict(summarize(store.view)), indent=2))
        compared = store.comparison_records()
        if compared:
            print(json.dumps(asdict(compare(compared)), indent=2))

    if args.format:
        options = IncludeOptions(links=args.include_links)
        exporter = ExportService(StorageFileSink(storage))
        export = exporter.export_store(store, args.format, options, scope=args.scope)
        if not export.ok:
            print(f"error: {export.error}", file=sys.stderr)
            return 1
        print(f"exported {export.value.record_count} records to {config.state_dir / 'exports' / export.value.filename}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
