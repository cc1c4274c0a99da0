# src/main.py
"""CLI entry point.

Usage:
    pdfdiff <pdf-file-1> <pdf-file-2> [--color HEX] [--data-dir DIR]
    pdfdiff --status <hash1>-<hash2>
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from pdfdiff.config.settings import ConfigurationError, Settings, load_settings
from pdfdiff.core.errors import PdfDiffError
from pdfdiff.jobs.models import ComparisonResult
from pdfdiff.logging.logger import setup_logging
from pdfdiff.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.status is None and len(args.files) < 2:
        parser.print_help(sys.stderr)
        return 1

    try:
        settings = load_settings(**_overrides(args))
    except (ConfigurationError, ValidationError) as exc:
        print(f"pdfdiff: invalid configuration: {exc}", file=sys.stderr)
        return 1

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )

    if args.status is not None:
        return _cmd_status(args.status, settings)

    if len(args.files) > 2:
        logger.warning("Ignoring extra arguments: %s", " ".join(map(str, args.files[2:])))

    try:
        return asyncio.run(_cmd_compare(args.files[0], args.files[1], settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except PdfDiffError as exc:
        logger.error("%s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdfdiff",
        description="pdfdiff: highlights the differences between two pdf files.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "files", nargs="*", type=Path, metavar="pdf-file",
        help="The two PDF files to compare (baseline first)",
    )
    parser.add_argument(
        "--color", default=None,
        help="Hex value of the highlight color (default: ff2010)",
    )
    parser.add_argument(
        "--data-dir", type=Path, default=None,
        help="Cache and result directory (default: ./data)",
    )
    parser.add_argument(
        "--workers", type=int, default=None,
        help="Parallel page diffs (default: one per CPU core)",
    )
    parser.add_argument(
        "--status", metavar="JOB_ID", default=None,
        help="Show the state of a previous comparison and exit",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if args.color is not None:
        overrides["highlight_color"] = args.color
    if args.data_dir is not None:
        overrides["data_root"] = args.data_dir
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    return overrides


async def _cmd_compare(pdf_a: Path, pdf_b: Path, settings: Settings) -> int:
    """Run one comparison and print where the overlays went."""
    from pdfdiff.jobs.orchestrator import JobOrchestrator

    for path in (pdf_a, pdf_b):
        if not path.is_file():
            logger.error("File not found: %s", path)
            return 1

    logger.info("Color chosen: %s", settings.highlight.to_hex())
    orchestrator = JobOrchestrator(settings)
    result = await orchestrator.compare(pdf_a, pdf_b)
    _print_result_summary(result)
    return 0


def _cmd_status(job_id: str, settings: Settings) -> int:
    """Print the state of a comparison job."""
    from pdfdiff.jobs.orchestrator import JobOrchestrator

    try:
        result = JobOrchestrator(settings).inspect(job_id)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    _print_result_summary(result)
    return 0 if result.status in ("done", "pending") else 1


def _print_result_summary(result: ComparisonResult) -> None:
    print(f"\nJob:     {result.job_id}")
    print(f"  Status:  {result.status}{' (reused)' if result.reused else ''}")
    print(f"  Output:  {result.result_dir}")
    if result.status == "done":
        print(f"  Pages:   {result.page_count}")
        for name in result.images:
            print(f"    {name}")
    if result.error is not None:
        print(f"  Error:   [{result.error.kind}] {result.error.message}")


if __name__ == "__main__":
    sys.exit(main())
