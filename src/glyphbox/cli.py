# SPDX-License-Identifier: Apache-2.0
"""
glyphbox - Fit Check CLI

Checks whether translated script blocks fit their in-game text box when
rendered with a bitmap font, and whether they stay within the byte size of
the original text.

Usage:
    glyphbox-check <script.txt> --profile <profile.json> [options]

Examples:
    glyphbox-check script_en.txt -p font.json
    glyphbox-check script_en.txt -p font.json -r script_jp.txt --byte-map table.tbl
    glyphbox-check script_en.txt -p font.json --mode character --max-chars 28
    glyphbox-check script_en.txt -p font.json --render-dir ./previews
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import re
import sys
from pathlib import Path
from typing import NoReturn

from glyphbox.core.models import OverflowMode
from glyphbox.output.check_report import CheckReport
from glyphbox.output.preview_exporter import ExportConfig, PreviewExporter
from glyphbox.pipeline.preview_pipeline import BlockReport, PreviewConfig, PreviewPipeline

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_DOES_NOT_FIT = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument Namespace.
    """
    parser = argparse.ArgumentParser(
        prog="glyphbox-check",
        description="Check that translated text fits a game's text box and byte budget",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s script.txt -p font.json                         # Pixel overflow check
  %(prog)s script.txt -p font.json -r original.txt -B      # Enforce byte budget
  %(prog)s script.txt -p font.json --mode character        # Character limit check
  %(prog)s script.txt -p font.json --json report.json      # Save JSON report

Exit status:
  0  every block fits
  1  error (missing file, invalid profile)
  2  at least one block overflows or exceeds its byte budget
""",
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Script file to check",
    )
    parser.add_argument(
        "-p",
        "--profile",
        type=Path,
        help="JSON profile with font, box and tag settings (default: built-in defaults)",
    )
    parser.add_argument(
        "-r",
        "--reference",
        type=Path,
        help="Original script whose blocks define the byte budget",
    )

    block_group = parser.add_argument_group("Block options")
    block_group.add_argument(
        "--separator",
        action="append",
        metavar="TEXT",
        help="Block separator string (repeatable; default: empty lines)",
    )
    block_group.add_argument(
        "--line-blocks",
        action="store_true",
        help="Treat every line as its own block",
    )

    check_group = parser.add_argument_group("Check options")
    check_group.add_argument(
        "--mode",
        choices=[mode.value for mode in OverflowMode],
        help="Overflow detection mode (default: from profile)",
    )
    check_group.add_argument(
        "--max-chars",
        type=int,
        help="Maximum characters per line in character mode",
    )
    check_group.add_argument(
        "--byte-map",
        type=Path,
        help="Encoding table file (key=bytes per line)",
    )
    check_group.add_argument(
        "--default-bytes",
        type=int,
        help="Byte cost of characters missing from the table",
    )
    check_group.add_argument(
        "-B",
        "--enforce-byte-budget",
        action="store_true",
        help="Fail blocks whose lines exceed the reference's bytes",
    )

    out_group = parser.add_argument_group("Output options")
    out_group.add_argument(
        "--json",
        type=Path,
        metavar="PATH",
        help="Write a JSON report",
    )
    out_group.add_argument(
        "--render-dir",
        type=Path,
        help="Write a PNG preview per block (pixel mode)",
    )
    out_group.add_argument(
        "--guides",
        action="store_true",
        help="Draw box limit or margin guides in PNG previews",
    )
    out_group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only print blocks that do not fit",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging",
    )

    return parser.parse_args(argv)


def split_blocks(
    text: str,
    separators: list[str] | None = None,
    line_blocks: bool = False,
) -> list[str]:
    """Split a script into blocks.

    Args:
        text: Script text.
        separators: Literal block separators; empty lines when omitted.
        line_blocks: Every line is a block.

    Returns:
        Non-empty blocks with surrounding line breaks trimmed.
    """
    text = text.replace("\r\n", "\n")
    if line_blocks:
        parts = text.split("\n")
    elif separators:
        pattern = "|".join(re.escape(sep) for sep in separators if sep)
        parts = re.split(pattern, text) if pattern else [text]
    else:
        parts = re.split(r"\n(?:[ \t]*\n)+", text)
    return [part.strip("\n") for part in parts if part.strip()]


def build_config(args: argparse.Namespace) -> PreviewConfig:
    """Load the profile and apply command line overrides.

    Raises:
        OSError: If a file cannot be read.
        ValueError: If the profile is invalid.
    """
    config = PreviewConfig.load(args.profile) if args.profile else PreviewConfig()

    overflow = config.overflow
    if args.mode:
        overflow = dataclasses.replace(overflow, mode=OverflowMode(args.mode))
    if args.max_chars is not None:
        overflow = dataclasses.replace(overflow, max_characters=args.max_chars)

    changes: dict[str, object] = {"overflow": overflow}
    if args.byte_map:
        changes["byte_map"] = args.byte_map.read_text(encoding="utf-8")
    if args.default_bytes is not None:
        changes["default_byte_value"] = args.default_bytes
    if args.enforce_byte_budget:
        changes["enforce_byte_budget"] = True
    return dataclasses.replace(config, **changes)


def format_report(report: BlockReport) -> str:
    """One summary line for a block."""
    status = "OK  " if report.fits else "FAIL"
    details = [
        f"{report.metrics.total_chars} chars",
        f"{report.metrics.total_bytes} bytes",
    ]
    if report.overflow.bounds is not None:
        bounds = report.overflow.bounds
        details.append(f"{bounds.width:g}x{bounds.height:g}px")
    details.extend(report.overflow.reasons)
    if report.over_byte_budget and report.line_budgets is not None:
        over = [
            str(number)
            for number, budget in enumerate(report.line_budgets, start=1)
            if budget.is_over_limit
        ]
        details.append(f"over byte budget on line(s) {', '.join(over)}")
    return f"[{status}] Block {report.index + 1}: " + "; ".join(details)


async def run(args: argparse.Namespace) -> int:
    """Execute the fit check.

    Args:
        args: Command line arguments.

    Returns:
        Exit code.
    """
    input_path: Path = args.input
    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return EXIT_ERROR
    if args.reference and not args.reference.exists():
        print(f"Error: File not found: {args.reference}", file=sys.stderr)
        return EXIT_ERROR

    try:
        config = build_config(args)
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    pipeline = PreviewPipeline(config)
    for warning in pipeline.byte_map.warnings:
        print(
            f"Warning: byte map line {warning.line_number} skipped: {warning.reason}",
            file=sys.stderr,
        )

    if config.overflow.mode == OverflowMode.PIXEL:
        result = await pipeline.load_font()
        if result.error is not None:
            print(f"Warning: {result.error}", file=sys.stderr)

    separators = args.separator
    blocks = split_blocks(
        input_path.read_text(encoding="utf-8"), separators, args.line_blocks
    )
    references = None
    if args.reference:
        references = split_blocks(
            args.reference.read_text(encoding="utf-8"), separators, args.line_blocks
        )
        if len(references) != len(blocks):
            print(
                f"Warning: {len(blocks)} blocks but {len(references)} reference blocks",
                file=sys.stderr,
            )

    reports = pipeline.check_blocks(blocks, references)
    for report in reports:
        if not args.quiet or not report.fits:
            print(format_report(report))

    check_report = CheckReport(
        source_file=str(input_path),
        blocks=reports,
        reference_file=str(args.reference) if args.reference else None,
    )
    print()
    print(
        f"{len(reports)} blocks, {check_report.overflow_count} overflowing, "
        f"{check_report.over_budget_count} over byte budget"
    )

    if args.json:
        check_report.save(args.json)
        print(f"Report: {args.json}")

    if args.render_dir and config.overflow.mode == OverflowMode.PIXEL:
        exporter = PreviewExporter(pipeline.compositor, ExportConfig(draw_guides=args.guides))
        for report in reports:
            rendered = pipeline.render_block(report.text)
            exporter.generate_to_file(
                rendered,
                config.overflow,
                config.transform,
                args.render_dir / f"{input_path.stem}_{report.index + 1:04d}.png",
            )
        print(f"Previews: {args.render_dir}")

    return EXIT_OK if check_report.all_fit else EXIT_DOES_NOT_FIT


def main() -> NoReturn:
    """Main entry point."""
    args = parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    exit_code = asyncio.run(run(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
