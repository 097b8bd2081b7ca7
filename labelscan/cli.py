"""Command-line interface for extracting receiving fields from OCR text.

Provides subcommands for extracting a single label text (file or stdin)
and for processing a folder of OCR text files into a JSON report.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from labelscan.extraction.field_extractor import FieldExtractor
from labelscan.utils.config import AppConfig, load_config
from labelscan.utils.logger import get_logger, make_match_logger, setup_logging
from labelscan.validation.rules_engine import RulesEngine

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.txt",)


def _find_texts(input_dir: Path) -> list[Path]:
    """Find all OCR text files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of text file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def _build_extractor(
    config: AppConfig,
    strict_items: bool = False,
    no_fallback: bool = False,
    verbose: bool = False,
) -> FieldExtractor:
    """Build an extractor from config, with command-line overrides applied."""
    extraction = config.extraction.model_copy(
        update={
            "loose_item_pattern": config.extraction.loose_item_pattern
            and not strict_items,
            "fallback_enabled": config.extraction.fallback_enabled and not no_fallback,
        }
    )
    on_match = make_match_logger(logger, level=logging.INFO) if verbose else None
    return FieldExtractor.from_config(extraction, on_match=on_match)


def extract_text(
    text: str,
    extractor: FieldExtractor,
    rules_engine: RulesEngine,
    profile: str = "receiving",
) -> dict[str, object]:
    """Extract and review fields from one OCR text.

    Args:
        text: Raw OCR output.
        extractor: Field extractor instance.
        rules_engine: Review rules instance.
        profile: Rules profile to apply.

    Returns:
        Dictionary with fields, missing fields and review results.
    """
    fields = extractor.extract(text)
    report = rules_engine.review(fields, profile)
    return {
        "fields": fields.to_dict(),
        "missing_fields": report.missing_fields,
        "review": {
            "all_valid": report.all_valid,
            "failures": [r.message for r in report.results if not r.is_valid],
            "warnings": report.warnings,
        },
    }


def process_folder(
    input_dir: Path,
    output_json: Path,
    config: AppConfig,
    extractor: FieldExtractor,
    verbose: bool = False,
) -> dict[str, int]:
    """Extract fields from every text file in a folder.

    Args:
        input_dir: Directory containing OCR ``.txt`` files.
        output_json: Path for the JSON report.
        config: Application configuration.
        extractor: Field extractor instance.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, complete, partial, empty and failed counts.
    """
    rules_engine = RulesEngine(Path(config.validation.rules_path))

    files = _find_texts(input_dir)
    summary = {
        "total": len(files),
        "complete": 0,
        "partial": 0,
        "empty": 0,
        "failed": 0,
    }
    if not files:
        logger.warning("No text files found in %s", input_dir)
        return summary

    logger.info("Found %d text files to process", len(files))

    results: list[dict[str, object]] = []
    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read %s: %s", file_path.name, exc)
            results.append(
                {"filename": file_path.name, "status": "failed", "error": str(exc)}
            )
            summary["failed"] += 1
            continue

        result = extract_text(
            text, extractor, rules_engine, config.validation.profile
        )
        if not result["fields"]:
            status = "empty"
        elif result["missing_fields"]:
            status = "partial"
        else:
            status = "complete"
        summary[status] += 1
        results.append({"filename": file_path.name, "status": status, **result})

    output_json.parent.mkdir(parents=True, exist_ok=True)
    output_json.write_text(json.dumps(results, indent=2))
    logger.info("Results written to %s", output_json)

    _print_summary(summary, output_json)
    return summary


def _print_summary(summary: dict[str, int], output_json: Path) -> None:
    """Print batch processing summary to stdout.

    Args:
        summary: Per-status counts.
        output_json: Path to the JSON report.
    """
    print(f"\n{'=' * 50}")
    print("Batch Extraction Complete")
    print(f"{'=' * 50}")
    print(f"Total:    {summary['total']}")
    print(f"Complete: {summary['complete']}")
    print(f"Partial:  {summary['partial']}")
    print(f"Empty:    {summary['empty']}")
    print(f"Failed:   {summary['failed']}")
    print(f"Output:   {output_json}")


def _add_extraction_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--strict-items",
        action="store_true",
        help="Only accept 'I:' and 'Item:' markers for item numbers",
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Skip the joined-text pass",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log every matched field"
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Receiving label field extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="Configuration YAML file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    single_parser = subparsers.add_parser(
        "extract", help="Extract fields from one OCR text"
    )
    single_parser.add_argument(
        "file", type=Path, help="OCR text file, or '-' to read stdin"
    )
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")
    _add_extraction_flags(single_parser)

    batch_parser = subparsers.add_parser(
        "batch", help="Extract fields from a folder of OCR text files"
    )
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with .txt files"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.json"),
        help="Output JSON file (default: results.json)",
    )
    _add_extraction_flags(batch_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = load_config(args.config)
    setup_logging(config.log_level)
    extractor = _build_extractor(
        config, args.strict_items, args.no_fallback, args.verbose
    )

    if args.command == "extract":
        if str(args.file) == "-":
            text = sys.stdin.read()
        elif not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        else:
            try:
                text = args.file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                print(f"Error: cannot read {args.file}: {exc}", file=sys.stderr)
                sys.exit(1)

        rules_engine = RulesEngine(Path(config.validation.rules_path))
        result = extract_text(
            text, extractor, rules_engine, config.validation.profile
        )
        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, config, extractor, args.verbose)


if __name__ == "__main__":
    main()
