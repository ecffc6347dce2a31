"""
CSV and JSON reports for a batch of processed receipts.
"""

import csv
import json
from pathlib import Path
from typing import List, Dict

CSV_FIELDS = ["date", "merchant", "amount", "category", "description", "items",
              "confidence", "status", "error", "source_file", "sha1"]


def write_csv(rows: List[Dict], out_csv: Path):
    """Write receipts to CSV file. Items are joined with '; '."""
    with out_csv.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        w.writeheader()
        for r in rows:
            row = {k: r.get(k) for k in CSV_FIELDS}
            row["items"] = "; ".join(r.get("items") or [])
            w.writerow(row)


def write_json(rows: List[Dict], out_json: Path):
    """Write receipts to a JSON array."""
    with out_json.open("w", encoding="utf-8") as f:
        json.dump(rows, f, indent=2, ensure_ascii=False)
        f.write("\n")
