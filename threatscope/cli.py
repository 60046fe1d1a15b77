"""
ThreatScope PE Analyzer - command line entry point.

Usage:
    # Analyze a single file
    threatscope-pe sample.exe

    # Analyze several files, JSON output
    threatscope-pe a.exe b.dll --format json

    # Analyze every .exe/.dll in a folder tree
    threatscope-pe --folder /path/to/samples --recursive

Exit status is 0 when every file was analyzed, 1 when any file failed and
2 when there was nothing to analyze or the configuration is invalid.
"""

from __future__ import annotations

import argparse
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from .core.dll_analyzer import DllAnalyzer, FileReport, StatusUpdate
from .core.report_generator import render_json, render_text
from .utils.config import init_config
from .utils.exceptions import ConfigurationError
from .utils.helpers import iter_files
from .utils.logger import get_logger, setup_logging

MAX_BATCH_FILES = 1000

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_USAGE = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="threatscope-pe",
        description="Flag suspicious DLL references in Windows executables",
        epilog="Examples:\n"
               "  threatscope-pe malware.exe          # Analyze single file\n"
               "  threatscope-pe file1.exe file2.dll  # Analyze multiple files\n"
               "  threatscope-pe --folder /samples/   # Analyze all files in folder\n",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        'files',
        nargs='*',
        type=str,
        help='File(s) to analyze'
    )
    parser.add_argument(
        '--folder', '-f',
        type=str,
        help='Folder containing files to analyze (batch mode)'
    )
    parser.add_argument(
        '--recursive', '-r',
        action='store_true',
        help='Recursively scan folder (use with --folder)'
    )
    parser.add_argument(
        '--max-files',
        type=int,
        default=MAX_BATCH_FILES,
        help=f'Maximum files to take from --folder (default: {MAX_BATCH_FILES})'
    )
    parser.add_argument(
        '--min-length',
        type=int,
        default=None,
        help='Minimum printable run length for string extraction (default: from config, 5)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=None,
        help='Files analyzed in parallel (default: from config, 4)'
    )
    parser.add_argument(
        '--format',
        choices=['text', 'json'],
        default='text',
        help='Report format (default: text)'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to a YAML configuration file'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Logging level (default: from config, INFO)'
    )

    return parser.parse_args(argv)


def collect_files_from_args(args: argparse.Namespace, allowed_extensions: List[str]) -> List[Path]:
    """
    Collect files named on the command line and found in --folder.

    Missing paths are logged and skipped. Folder entries are limited to the
    allowed extensions; explicitly named files are passed through so that
    validation can report why they were refused.
    """
    logger = get_logger("cli")
    files_to_analyze: List[Path] = []

    for file_arg in args.files:
        file_path = Path(file_arg).resolve()
        if file_path.is_file():
            files_to_analyze.append(file_path)
        else:
            logger.warning(f"File not found or invalid: {file_arg}")

    if args.folder:
        folder_path = Path(args.folder).resolve()
        if folder_path.is_dir():
            file_count = 0
            for file_path in iter_files(folder_path, args.recursive, allowed_extensions):
                if file_count >= args.max_files:
                    logger.warning(
                        f"Reached maximum file limit ({args.max_files}). "
                        f"Use --max-files to increase."
                    )
                    break
                files_to_analyze.append(file_path)
                file_count += 1
            logger.info(f"Found {file_count} files in folder: {args.folder}")
        else:
            logger.error(f"Folder not found: {args.folder}")

    return files_to_analyze


def _log_status(update: StatusUpdate) -> None:
    get_logger("cli").debug(
        update.message,
        extra_data={"stage": update.stage, "status": update.type.value},
    )


def run(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit status."""
    args = parse_arguments(argv)

    try:
        config = init_config(Path(args.config) if args.config else None)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(
        level=args.log_level or config.get("logging.level"),
        log_file=config.get("logging.file"),
        format_type=config.get("logging.format"),
    )
    logger = get_logger("cli")

    for option, value in (
        ("--min-length", args.min_length),
        ("--workers", args.workers),
        ("--max-files", args.max_files),
    ):
        if value is not None and value < 1:
            logger.error(f"{option} must be at least 1")
            return EXIT_USAGE

    files = collect_files_from_args(args, config.get("analysis.allowed_extensions"))
    if not files:
        logger.error("No files to analyze")
        return EXIT_USAGE

    analyzer = DllAnalyzer(min_length=args.min_length)
    workers = args.workers if args.workers is not None else config.get("analysis.workers")

    logger.info(f"Analyzing {len(files)} file(s)", extra_data={"workers": workers})

    def scan(path: Path) -> FileReport:
        return analyzer.scan(path, status_callback=_log_status)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        reports = list(executor.map(scan, files))

    if args.format == "json":
        print(render_json(reports))
    else:
        print(render_text(reports))

    return EXIT_OK if all(r.ok for r in reports) else EXIT_FAILURES


def main() -> None:
    """Console script entry point."""
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        get_logger("cli").info("Interrupted, shutting down")
        sys.exit(130)


if __name__ == "__main__":
    main()
