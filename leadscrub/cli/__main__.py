from __future__ import annotations

import argparse
import sys
from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

from leadscrub.config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, default_config, load_config
from leadscrub.csvio.reader import CsvReadError, read_csv_file
from leadscrub.db.row_store import RowStore, StoreError
from leadscrub.logging.audit_log import AuditLogBuffer
from leadscrub.logging.init import log_summary, setup_logging
from leadscrub.models.row import Row
from leadscrub.services.columns import resolve_columns
from leadscrub.services.orchestrator import (
    ProcessingError,
    build_pipeline,
    cleanup_list,
    enrich_list,
    export_csv,
    import_csv,
    open_store,
)
from leadscrub.services.planner import analyze_needs
from leadscrub.services.progress import EnrichmentProgressBar
from leadscrub.services.summary import render_cleanup_summary_line, render_enrichment_summary_line

"""CLI entrypoint.

    leadscrub [--config PATH] [--env-file PATH] [--debug] <command> ...

Commands:
    inspect <csv>                      resolved columns, sample rows, planned work
    import <csv> [--name N]            store a CSV as a new list (prints list id)
    cleanup <list_id>                  run the cleanup stages
    enrich <list_id> [--rerun]         run the enrichment pipeline
    export <list_id> <out.csv>         write a stored list back to CSV
    run <csv> -o <out.csv>             import -> cleanup -> enrich -> export

import/cleanup/enrich/export address a stored list and need a persistent
backend (storage.backend: postgres); `run` works with either backend.

Exit codes: 0 success, 2 completed with enrichment errors, 1 fatal
(configuration, CSV, storage).
"""

EXIT_SUCCESS = 0
EXIT_ENRICHMENT_ERRORS = 2
EXIT_FATAL = 1

SAMPLE_ROWS = 3

_FATAL_ERRORS = (ConfigError, CsvReadError, StoreError, ProcessingError)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load credentials (API keys, DATABASE_URL) from a .env file if present."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="leadscrub", description="Contact list cleanup and enrichment")
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--env-file", type=Path, default=Path(".env"), help="dotenv file with API credentials")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    inspect = sub.add_parser("inspect", help="Show resolved columns, sample rows and planned work")
    inspect.add_argument("csv", type=Path)

    imp = sub.add_parser("import", help="Import a CSV file as a new list")
    imp.add_argument("csv", type=Path)
    imp.add_argument("--name", default=None, help="List name (default: file stem)")

    cleanup = sub.add_parser("cleanup", help="Run the cleanup stages on a stored list")
    cleanup.add_argument("list_id")

    enrich = sub.add_parser("enrich", help="Enrich a stored list")
    enrich.add_argument("list_id")
    enrich.add_argument("--rerun", action="store_true", help="Clear enrichment flags first so every row is retried")

    export = sub.add_parser("export", help="Export a stored list to CSV")
    export.add_argument("list_id")
    export.add_argument("out", type=Path)
    export.add_argument("--exclude-duplicates", action="store_true", help="Leave rows marked duplicate out")

    run = sub.add_parser("run", help="Import, clean, enrich and export in one go")
    run.add_argument("csv", type=Path)
    run.add_argument("-o", "--out", type=Path, required=True)
    run.add_argument("--name", default=None)
    run.add_argument("--skip-enrich", action="store_true", help="Stop after cleanup")
    run.add_argument("--exclude-duplicates", action="store_true", help="Leave rows marked duplicate out")
    return p


def _resolve_config(path: Path | None) -> AppConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


@contextmanager
def _store_session(cfg: AppConfig) -> Iterator[RowStore]:
    store = open_store(cfg)
    try:
        yield store
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            close()


def _require_persistent(cfg: AppConfig, command: str) -> None:
    if cfg.storage.backend != "postgres":
        raise ProcessingError(f"'{command}' needs a persistent backend (storage.backend: postgres); use 'run' instead")


def _inspect(path: Path) -> int:
    table = read_csv_file(path)
    resolved = resolve_columns(table.columns)
    print(f"FILE: {path.name} rows={len(table.records)}")
    print(f"  columns={table.columns}")
    print(f"  resolved: {resolved.describe()}")
    for record in table.records[:SAMPLE_ROWS]:
        print("    sample_row=", record)
    rows = [Row(id=str(i), list_id="", row_index=i, data=dict(r)) for i, r in enumerate(table.records)]
    needs = Counter(plan.need.value for plan in analyze_needs(rows, table.columns, resolved))
    print("  planned=" + " ".join(f"{need}={count}" for need, count in sorted(needs.items())))
    return EXIT_SUCCESS


def _cleanup(store: RowStore, list_id: str) -> None:
    summary = cleanup_list(store, list_id)
    log_summary(render_cleanup_summary_line(summary)[len("SUMMARY "):])


def _enrich(store: RowStore, cfg: AppConfig, list_id: str, rerun: bool) -> int:
    pipeline = build_pipeline(cfg, store)
    audit = AuditLogBuffer(cfg.logs_directory)
    with EnrichmentProgressBar() as bar:
        summary = enrich_list(store, list_id, pipeline, rerun=rerun, on_progress=bar)
    audit.extend(summary.log)
    log_path = audit.flush()
    if log_path is not None:
        setup_logging().info(f"enrichment log written: {log_path}")
    log_summary(render_enrichment_summary_line(summary)[len("SUMMARY "):])
    return EXIT_ENRICHMENT_ERRORS if summary.errors else EXIT_SUCCESS


def _dispatch(args: argparse.Namespace, cfg: AppConfig) -> int:
    logger = setup_logging()
    if args.command == "inspect":
        return _inspect(args.csv)

    if args.command in ("import", "cleanup", "enrich", "export"):
        _require_persistent(cfg, args.command)

    with _store_session(cfg) as store:
        if args.command == "import":
            record = import_csv(store, args.csv, args.name)
            print(record.id)
            return EXIT_SUCCESS
        if args.command == "cleanup":
            _cleanup(store, args.list_id)
            return EXIT_SUCCESS
        if args.command == "enrich":
            return _enrich(store, cfg, args.list_id, args.rerun)
        if args.command == "export":
            export_csv(store, args.list_id, args.out, exclude_duplicates=args.exclude_duplicates)
            return EXIT_SUCCESS

        # run
        record = import_csv(store, args.csv, args.name)
        _cleanup(store, record.id)
        code = EXIT_SUCCESS
        if args.skip_enrich:
            logger.info("enrichment skipped (--skip-enrich)")
        else:
            code = _enrich(store, cfg, record.id, rerun=False)
        export_csv(store, record.id, args.out, exclude_duplicates=args.exclude_duplicates)
        return code


def main(argv: list[str] | None = None) -> int:
    # argv=[] must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(argv)

    logger = setup_logging(debug=args.debug)
    _load_env_file(args.env_file, override=True)

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        return _dispatch(args, cfg)
    except _FATAL_ERRORS as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
