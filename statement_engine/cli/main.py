from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ..config.loader import DEFAULT_CONFIG_PATH, load_definitions, load_report_config
from ..exceptions import ConfigurationError, ProcessingError
from ..logging.init import get_logger, log_summary, setup_logging
from ..models.processing_result import ProcessingResult
from ..services.orchestrator import process_all
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow: load config/report.yml, load statement definitions, validate every
workbook in the source directory, print one SUMMARY line.

Exit codes:
    0  every workbook passed (or none found)
    2  at least one workbook failed or was unreadable
    1  fatal: bad configuration or missing source directory
"""

__all__ = [
    "EXIT_SUCCESS_ALL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_FATAL",
    "main",
]

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="statement-engine", description="Resolve and cross-check MSP2 regulatory returns"
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--report", action="store_true", help="Print every rule result per workbook")
    p.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Run configuration (default: {DEFAULT_CONFIG_PATH})",
    )
    return p.parse_args(argv)


def _print_report(result: ProcessingResult) -> None:
    logger = get_logger()
    for stat in result.workbook_stats or []:
        if stat.report is None:
            logger.info(f"{stat.file_name}: {stat.status.value} ({stat.error})")
            continue
        for r in stat.report.results:
            mark = "PASS" if r.passed else "FAIL"
            if r.skipped:
                mark += " (skipped)"
            line = f"{stat.file_name} {r.id} {mark} {r.description}"
            if r.error:
                line += f": {r.error}"
            logger.info(line)


def main(argv: list[str] | None = None) -> int:
    # [] from tests must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    try:
        cfg = load_report_config(args.config)
        book = load_definitions(cfg.definitions, tolerance=cfg.tolerance)
    except ConfigurationError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    logger.info(f"Validating reports from: {directory}")
    try:
        result = process_all(cfg, book)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if args.report:
        _print_report(result)

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
