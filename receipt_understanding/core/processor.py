"""
Batch processing: OCR every receipt in a folder, parse it, and file it.
"""

import shutil
from pathlib import Path
from typing import List, Dict, Optional

from .utils import sha1_file, slugify, RECEIPT_EXTS, money_fmt
from .ocr import extract_text, OCRError, ReceiptFileError
from .receipt_parser import ReceiptParser
from .database import upsert_sqlite
from .reporting import write_csv, write_json

REVIEW_DIR_NAME = "needs_review"


class ReceiptProcessor:
    """Runs OCR and the receipt parser over a batch of receipt files."""

    def __init__(self, incoming_dir: Path, output_dir: Path, subdir_id: str,
                 parser: Optional[ReceiptParser] = None,
                 lang: str = "eng",
                 export_db: bool = False,
                 verbose: bool = False):
        """
        Initialize receipt processor.

        Args:
            incoming_dir: Directory with new receipts
            output_dir: Root directory for output batches
            subdir_id: Batch identifier (e.g., week ID)
            parser: Configured receipt parser (defaults to built-in settings)
            lang: OCR language hint
            export_db: Whether to export to SQLite
            verbose: Whether to show verbose debugging output
        """
        self.incoming_dir = incoming_dir
        self.output_dir = output_dir
        self.subdir_id = subdir_id
        self.parser = parser or ReceiptParser()
        self.lang = lang
        self.export_db = export_db
        self.verbose = verbose

        # Setup directories
        self.batch_dir = output_dir / subdir_id  # e.g. output/2025-W43/
        self.reports_dir = self.batch_dir / "reports"  # CSV, JSON, SQLite
        self.processed_dir = self.batch_dir / "processed"  # Parsed receipts by category
        self.review_dir = self.batch_dir / REVIEW_DIR_NAME  # Receipts needing manual entry

        for dir_path in [self.incoming_dir, self.output_dir, self.batch_dir,
                         self.reports_dir, self.processed_dir, self.review_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _receipts_in(directory: Path) -> List[Path]:
        return [p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in RECEIPT_EXTS]

    def discover_files(self) -> List[Path]:
        """Discover receipt files from incoming, processed and review directories."""
        files_from_incoming = self._receipts_in(self.incoming_dir)

        # Already filed receipts are picked up again for reprocessing
        files_from_batch = self._receipts_in(self.review_dir)
        for cat_dir in self.processed_dir.iterdir():
            if cat_dir.is_dir():
                files_from_batch.extend(self._receipts_in(cat_dir))

        files = sorted(files_from_incoming + files_from_batch, key=lambda p: p.name)
        print(f"[INFO] Found {len(files_from_incoming)} file(s) in incoming, "
              f"{len(files_from_batch)} file(s) already in {self.subdir_id}")
        return files

    def process_file(self, path: Path, file_hash: Optional[str] = None) -> Dict:
        """
        Process a single receipt file.

        Raises:
            ReceiptFileError: file type or size not accepted
            OCRError: text recognition failed

        Returns:
            Dictionary with the parse outcome
        """
        print(f"[INFO] Processing {path.name}")

        text = extract_text(path, self.lang)
        sha1 = file_hash if file_hash else sha1_file(path)
        result = self.parser.parse(text)

        row = {"sha1": sha1, "status": "success" if result.success else "failure",
               "error": result.reason.value if result.reason else None}
        if result.success:
            row.update(result.data.to_dict())
            dest_dir = self.processed_dir / slugify(result.data.category.value)
        else:
            row.update(result.fields.to_dict() if result.fields else {})
            dest_dir = self.review_dir

        if self.verbose:
            print(f"  [DEBUG] Merchant: '{row.get('merchant') or '(none)'}'")
            print(f"  [DEBUG] Date: {row.get('date') or '(none)'}"
                  f"{' (defaulted to today)' if row.get('date_defaulted') else ''}")
            print(f"  [DEBUG] Amount: {money_fmt(row.get('amount')) or '(none)'}")
            print(f"  [DEBUG] Items: {row.get('items') or '(none)'}")
            if result.success:
                print(f"  [DEBUG] Category: {row['category']} (confidence {row['confidence']})")
            if not row.get("merchant"):
                print(f"  [DEBUG] First 5 lines of OCR text:")
                for i, line in enumerate(text.splitlines()[:5], 1):
                    print(f"    {i}: {line[:80]}")

        if not result.success:
            print(f"  [WARN] {path.name}: {result.reason.value}; moved to {REVIEW_DIR_NAME}/ for manual entry")

        dest = self._move(path, dest_dir, sha1)
        row["source_file"] = dest.relative_to(self.batch_dir).as_posix()
        return row

    def _move(self, path: Path, dest_dir: Path, sha1: str) -> Path:
        """Move a receipt into its category (or review) directory."""
        dest_dir.mkdir(parents=True, exist_ok=True)
        if path.parent == dest_dir:
            # Reprocessed into the same place
            return path
        dest = dest_dir / path.name
        if dest.exists():
            # Avoid overwrite by suffixing sha1
            dest = dest_dir / f"{path.stem}_{sha1[:8]}{path.suffix}"
        shutil.move(path.as_posix(), dest.as_posix())
        return dest

    def process_all(self) -> List[Dict]:
        """Process all receipts; a file that cannot be read is reported and skipped."""
        files = self.discover_files()
        if not files:
            print("No receipt files found in incoming or batch directories.")
            return []

        rows = []
        for file_path in files:
            try:
                rows.append(self.process_file(file_path))
            except (OCRError, ReceiptFileError) as e:
                print(f"[ERROR] Failed {file_path.name}: {e}")
        return rows

    def generate_reports(self, rows: List[Dict]):
        """Write CSV, JSON and (optionally) SQLite outputs."""
        out_csv = self.reports_dir / "receipts.csv"
        write_csv(rows, out_csv)
        print(f"[OK] Wrote {out_csv}")

        out_json = self.reports_dir / "results.json"
        write_json(rows, out_json)
        print(f"[OK] Wrote {out_json}")

        if self.export_db:
            sqlite_path = self.reports_dir / "receipts.sqlite"
            upsert_sqlite(rows, sqlite_path)
            print(f"[OK] Exported to SQLite: {sqlite_path}")

        failed = [r for r in rows if r["status"] != "success"]
        if failed:
            print(f"[WARN] {len(failed)} receipt(s) need manual entry: {self.review_dir}")
        print(f"[OK] Processing complete for {self.subdir_id}. Reports in: {self.reports_dir}")
