from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from survey_sync.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from survey_sync.logging.init import log_summary, setup_logging
from survey_sync.services.orchestrator import ProcessingError, load_records, upload_records
from survey_sync.services.progress import ConsoleListener, ProgressTracker
from survey_sync.services.summary import render_failure_table, render_preview, render_summary_line

"""CLI entrypoint.

    survey-sync FILE [--config PATH] [--sheet NAME] [--preview] [--debug]

Flow:
- Load .env (overrides the process environment) and the YAML config
- Decode + extract records from FILE
- --preview: print the first records and exit without contacting the store
- Otherwise reconcile every record and print the SUMMARY line + failure table
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv. Failure only warns."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="survey-sync", description="Spreadsheet -> remote record response uploader")
    p.add_argument("file", type=Path, help="Spreadsheet (.xlsx) with ID / Response / Notes columns")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--sheet", default=None, help="Worksheet name (default: first visible sheet)")
    p.add_argument("--preview", action="store_true", help="Print the first parsed records then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    # None -> read sys.argv; an explicit [] must not pick up pytest's own arguments
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    path: Path = args.file
    if not path.exists():
        logger.error(f"file not found: {path}")
        return EXIT_FATAL

    logger.info(f"Parsing {path.name} ...")
    try:
        records = load_records(path, sheet_name=args.sheet or cfg.sheet_name)
    except ProcessingError as e:
        logger.error(f"parse: {e}")
        return EXIT_FATAL

    if args.preview:
        for line in render_preview(records):
            print(line)
        return EXIT_SUCCESS_ALL

    logger.info(f"backend={cfg.backend} collection={cfg.mapping.primary_collection}")
    try:
        with ProgressTracker(description="Updating records") as tracker:
            listener = ConsoleListener(tracker, logger)
            result = upload_records(records, cfg, file_name=path.name, listener=listener)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    summary = result.summary
    for line in render_failure_table(summary):
        print(line)
    if result.error_log_path:
        logger.info(f"failure log: {result.error_log_path}")

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if summary.failure_count > 0 or summary.success_count == 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
