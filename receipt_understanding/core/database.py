"""
SQLite storage for processed receipts.
"""

import json
import sqlite3
from pathlib import Path
from typing import List, Dict

SCHEMA = """
CREATE TABLE IF NOT EXISTS receipts (
    id INTEGER PRIMARY KEY,
    sha1 TEXT UNIQUE,
    source_file TEXT,
    status TEXT,
    error TEXT,
    date TEXT,
    merchant TEXT,
    amount REAL,
    category TEXT,
    description TEXT,
    items TEXT,
    confidence INTEGER,
    processed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""


def init_db(sqlite_path: Path):
    """Create the receipts table if needed."""
    with sqlite3.connect(sqlite_path.as_posix()) as conn:
        conn.execute(SCHEMA)
        conn.commit()


def upsert_sqlite(rows: List[Dict], sqlite_path: Path):
    """
    Save receipts to SQLite database.
    Rows are keyed by file hash, so reprocessing a receipt replaces its old row.
    """
    init_db(sqlite_path)
    with sqlite3.connect(sqlite_path.as_posix()) as conn:
        cur = conn.cursor()
        data = [(r.get("sha1"), r.get("source_file"), r.get("status"), r.get("error"),
                 r.get("date"), r.get("merchant"), r.get("amount"), r.get("category"),
                 r.get("description"), json.dumps(r.get("items") or []), r.get("confidence"))
                for r in rows]

        cur.executemany("""
        INSERT INTO receipts (sha1,source_file,status,error,date,merchant,amount,
                              category,description,items,confidence)
        VALUES (?,?,?,?,?,?,?,?,?,?,?)
        ON CONFLICT(sha1) DO UPDATE SET
            source_file=excluded.source_file, status=excluded.status, error=excluded.error,
            date=excluded.date, merchant=excluded.merchant, amount=excluded.amount,
            category=excluded.category, description=excluded.description,
            items=excluded.items, confidence=excluded.confidence,
            processed_at=CURRENT_TIMESTAMP
        """, data)

        conn.commit()


def read_receipts(sqlite_path: Path) -> List[Dict]:
    """Load all stored receipts, oldest first."""
    with sqlite3.connect(sqlite_path.as_posix()) as conn:
        conn.row_factory = sqlite3.Row
        cur = conn.execute("""
            SELECT sha1, source_file, status, error, date, merchant, amount,
                   category, description, items, confidence
            FROM receipts
            ORDER BY id
        """)
        results = []
        for row in cur.fetchall():
            r = dict(row)
            r["items"] = json.loads(r["items"] or "[]")
            results.append(r)
        return results
