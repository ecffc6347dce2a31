#!/usr/bin/env python3
"""
Main CLI entrypoint for receipt understanding.
"""

import argparse
import json
import os
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

from receipt_understanding.core.utils import get_current_week
from receipt_understanding.core.models import ParserConfig
from receipt_understanding.core.parsers import DATE_ORDERS, DEFAULT_MAX_AMOUNT
from receipt_understanding.core.categorization import load_rules, describe_rules, RulesError
from receipt_understanding.core.receipt_parser import ReceiptParser
from receipt_understanding.core.processor import ReceiptProcessor


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="receipt-understanding",
        description="Turn receipt scans into structured transactions (amount, merchant, date, items, category)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process receipts in ./incoming with all defaults
  receipt-understanding

  # Reprocess an existing batch (incoming + files already filed in that batch)
  receipt-understanding --subdir 2025-W44

  # Parse OCR text dumps and print JSON, no folders involved
  receipt-understanding --text scan1.txt scan2.txt

  # Month-first dates and a custom category table
  receipt-understanding --date-order mdy --rules ./rules.json
        """
    )
    parser.add_argument("--incoming", default="./incoming",
                        help="Folder with new receipts (default: ./incoming)")
    parser.add_argument("--output", default="./output",
                        help="Root folder for output batches (default: ./output)")
    parser.add_argument("--subdir",
                        help="Batch identifier (e.g., 2025-W43). Defaults to the current week")
    parser.add_argument("--rules", default="./rules.json",
                        help="rules.json with the ordered category keyword table (default: ./rules.json)")
    parser.add_argument("--lang",
                        help="OCR language hint (default: eng, or RECEIPT_OCR_LANG env var)")
    parser.add_argument("--date-order", choices=DATE_ORDERS,
                        help="How to read numeric dates (default: dmy, or RECEIPT_DATE_ORDER env var)")
    parser.add_argument("--max-amount",
                        help=f"Largest plausible total (default: {DEFAULT_MAX_AMOUNT}, "
                             f"or RECEIPT_MAX_AMOUNT env var)")
    parser.add_argument("--export-db", action="store_true",
                        help="Also export results to SQLite (receipts.sqlite)")
    parser.add_argument("--text", nargs="+", metavar="FILE",
                        help="Parse raw OCR text files and print JSON results")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Show detailed parsing information for debugging")
    return parser


def build_config(args) -> ParserConfig:
    """Resolve parser settings from CLI args, environment and the rules file."""
    date_order = (args.date_order or os.getenv("RECEIPT_DATE_ORDER", "dmy")).lower()
    if date_order not in DATE_ORDERS:
        raise ValueError(f"Invalid date order: {date_order} (must be one of: {', '.join(DATE_ORDERS)})")

    raw_max = args.max_amount or os.getenv("RECEIPT_MAX_AMOUNT")
    max_amount = DEFAULT_MAX_AMOUNT
    if raw_max:
        try:
            max_amount = Decimal(raw_max)
        except InvalidOperation:
            raise ValueError(f"Invalid max amount: {raw_max}") from None
        if not max_amount.is_finite() or max_amount <= 0:
            raise ValueError(f"Invalid max amount: {raw_max}")

    rules = load_rules(Path(args.rules))
    return ParserConfig(max_amount=max_amount, date_order=date_order, rules=rules)


def parse_text_files(paths, parser: ReceiptParser) -> int:
    """Print one JSON result per text file. Returns 1 if any failed."""
    status = 0
    for p in paths:
        path = Path(p)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            print(f"[ERROR] Could not read {path}: {e}", file=sys.stderr)
            status = 1
            continue
        result = parser.parse(text)
        if not result.success:
            status = 1
        out = {"file": path.as_posix(), **result.to_dict()}
        print(json.dumps(out, ensure_ascii=False))
    return status


def main(argv=None):
    """Main CLI entrypoint."""
    args = build_arg_parser().parse_args(argv)

    try:
        config = build_config(args)
    except (ValueError, RulesError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    parser = ReceiptParser(config)

    if args.text:
        return parse_text_files(args.text, parser)

    lang = args.lang or os.getenv("RECEIPT_OCR_LANG", "eng")
    subdir_id = args.subdir if args.subdir else get_current_week()
    print(f"[INFO] Processing receipts for: {subdir_id}")
    print(f"[INFO] OCR language: {lang}; dates read as {config.date_order}; "
          f"max amount {config.max_amount}")
    if args.verbose:
        for line in describe_rules(config.rules):
            print(f"  [DEBUG] {line}")

    processor = ReceiptProcessor(
        incoming_dir=Path(args.incoming),
        output_dir=Path(args.output),
        subdir_id=subdir_id,
        parser=parser,
        lang=lang,
        export_db=args.export_db,
        verbose=args.verbose,
    )

    rows = processor.process_all()
    if not rows:
        return 0

    processor.generate_reports(rows)
    return 0


if __name__ == "__main__":
    sys.exit(main())
