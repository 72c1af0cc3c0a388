#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

cli.py

Convert Storyline-style packages into native activity documents on disk.

Each input produces one file named <package>.<template>.<ext> in the
output directory. Failures are reported per file and do not stop the
rest of the batch.

Usage:
    storyimport <package.story> [<package.zip> ...] [--output PATH]
                [--format json|yaml|xml|csv] [--config PATH]
                [--workers N] [--strict] [--dry-run]

Options:
    --output    Output directory (default: current directory)
    --format    Export format (default: from config, else json)
    --config    YAML settings file (default: $STORYIMPORT_CONFIG or ./storyimport.yaml)
    --workers   Convert this many packages in parallel
    --strict    Treat validation problems as failures
    --dry-run   Show what would be converted without writing files
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from storyimport.config import load_config
from storyimport.errors import StoryImportError, ValidationError
from storyimport.exporters import EXPORT_FORMATS
from storyimport.icons import ERROR, SUCCESS, WARNING
from storyimport.integration import ConversionService, get_conversion_summary
from storyimport.models import InputFile, ProcessedFile
from storyimport.text_utils import sanitize_filename
from storyimport.validation import ensure_valid


DEFAULT_OUTPUT_DIR = Path.cwd()


def output_name(processed: ProcessedFile, fmt: str) -> str:
    stem = sanitize_filename(Path(processed.original_file_name).stem)
    return f"{stem}.{processed.template_type.value}.{fmt}"


def write_processed_file(
    service: ConversionService,
    processed: ProcessedFile,
    output_dir: Path,
    fmt: str,
    dry_run: bool = False,
) -> Path:
    target = output_dir / output_name(processed, fmt)
    if dry_run:
        print(f"[storyimport] [dry-run] Would write {target}")
        return target

    target.write_text(service.export_processed_file(processed.id, fmt), encoding="utf-8")
    print(f"[storyimport] {SUCCESS} Wrote {target}")
    return target


def report(processed: ProcessedFile) -> None:
    summary = get_conversion_summary(processed)
    print(f"[storyimport]   {summary['originalFile']}: {summary['templateType']} "
          f"({summary['slideCount']} slides, {summary['questionCount']} items, "
          f"{summary['mediaCount']} media)")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert Storyline packages to native activity documents"
    )
    parser.add_argument(
        "packages",
        type=Path,
        nargs="+",
        help="Path(s) to .story or .zip package files"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help="Output directory (default: current directory)"
    )
    parser.add_argument(
        "--format", "-f",
        choices=EXPORT_FORMATS,
        default=None,
        help="Export format (default: from config, else json)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of packages to convert in parallel (default: 1)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail packages whose converted document does not validate"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be converted without writing files"
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)
    fmt = args.format or config.export_format
    if fmt not in EXPORT_FORMATS:
        print(f"{WARNING} Unknown export format '{fmt}' in config, using json")
        fmt = "json"

    inputs: List[InputFile] = []
    failures = 0
    for path in args.packages:
        if not path.is_file():
            print(f"{ERROR} Package file not found: {path}")
            failures += 1
            continue
        inputs.append(InputFile.from_path(path))

    if not args.dry_run:
        args.output.mkdir(parents=True, exist_ok=True)

    service = ConversionService(config=config)
    result = service.batch_process_files(inputs, max_workers=max(1, args.workers))
    failures += len(result.failed)

    for processed in result.successful:
        report(processed)
        try:
            if args.strict:
                ensure_valid(processed.converted_data, processed.template_type)
            write_processed_file(service, processed, args.output, fmt, dry_run=args.dry_run)
        except ValidationError as e:
            print(f"[storyimport:err] {ERROR} {processed.original_file_name}: {e}")
            for message in e.errors:
                print(f"[storyimport:err]   {message}")
            failures += 1
        except (StoryImportError, OSError) as e:
            print(f"[storyimport:err] {ERROR} Could not write {processed.original_file_name}: {e}")
            failures += 1

    if failures:
        print(f"\n{ERROR} {failures} package(s) failed")
        return 1

    print(f"\n{SUCCESS} Converted {len(result.successful)} package(s)")
    return 0


if __name__ == "__main__":
    exit(main())
