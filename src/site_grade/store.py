"""SQLite-backed storage for scan reports, consultation requests and counters."""

import hmac
import json
import logging
import re
import sqlite3
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .errors import InvalidLead, InvalidReportId, ReportNotFound, Unauthorized

logger = logging.getLogger(__name__)


REPORT_ID_RE = re.compile(r"^[a-f0-9-]{8,12}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DEFAULT_TTL_SECONDS = 30 * 24 * 60 * 60

SCHEMA = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS reports (
  id TEXT PRIMARY KEY,
  body_json TEXT NOT NULL,
  created_at REAL NOT NULL,
  expires_at REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS counters (
  event TEXT NOT NULL,
  dimension TEXT NOT NULL,
  key TEXT NOT NULL,
  count INTEGER NOT NULL DEFAULT 0,
  PRIMARY KEY (event, dimension, key)
);

CREATE TABLE IF NOT EXISTS meta (
  key TEXT PRIMARY KEY,
  value TEXT
);

CREATE TABLE IF NOT EXISTS leads (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  report_id TEXT NOT NULL,
  name TEXT NOT NULL,
  email TEXT NOT NULL,
  phone TEXT,
  created_at TEXT NOT NULL
);
"""

# Counter dimensions per event type
SCAN_DIMENSIONS = ("byType", "byGrade", "byAdSpend")
LEAD_DIMENSIONS = ("byType", "byGrade")


def validate_report_id(report_id: str) -> str:
    if not report_id or not REPORT_ID_RE.match(report_id):
        raise InvalidReportId(f"Invalid report ID: {report_id!r}")
    return report_id


def check_token(token: Optional[str], expected: Optional[str]) -> None:
    """Constant-time shared-secret check for the stats view."""
    if not expected or not token:
        raise Unauthorized("Unauthorized")
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        raise Unauthorized("Unauthorized")


class ReportStore:
    """Reports keyed by short id, each with an expiry, plus analytics counters.

    ``clock`` returns the current time in epoch seconds; tests pass their own.
    """

    def __init__(self, db_path: str | Path, clock=time.time):
        db_path = Path(db_path)
        if str(db_path) != ":memory:":
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self.clock = clock
        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "ReportStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -------------------------
    # Reports
    # -------------------------
    def save(self, report: dict[str, Any], ttl_seconds: int = DEFAULT_TTL_SECONDS) -> str:
        report_id = validate_report_id(report.get("id", ""))
        now = self.clock()
        self.conn.execute(
            "INSERT OR REPLACE INTO reports(id, body_json, created_at, expires_at) VALUES (?,?,?,?)",
            (report_id, json.dumps(report), now, now + ttl_seconds),
        )
        self.conn.commit()
        return report_id

    def get(self, report_id: str) -> dict[str, Any]:
        validate_report_id(report_id)
        row = self.conn.execute(
            "SELECT body_json, expires_at FROM reports WHERE id = ?", (report_id,)
        ).fetchone()
        if row is None:
            raise ReportNotFound(f"Report not found: {report_id}")

        body_json, expires_at = row
        if expires_at <= self.clock():
            self.conn.execute("DELETE FROM reports WHERE id = ?", (report_id,))
            self.conn.commit()
            raise ReportNotFound(f"Report not found: {report_id}")
        return json.loads(body_json)

    def purge_expired(self) -> int:
        cur = self.conn.execute("DELETE FROM reports WHERE expires_at <= ?", (self.clock(),))
        self.conn.commit()
        if cur.rowcount:
            logger.info("Purged %d expired reports", cur.rowcount)
        return cur.rowcount

    # -------------------------
    # Analytics
    # -------------------------
    def _inc(self, event: str, dimension: str, key: str) -> None:
        self.conn.execute(
            "INSERT INTO counters(event, dimension, key, count) VALUES (?,?,?,1) "
            "ON CONFLICT(event, dimension, key) DO UPDATE SET count = count + 1",
            (event, dimension, key),
        )

    def _touch(self) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO meta(key, value) VALUES ('last_updated', ?)",
            (datetime.fromtimestamp(self.clock(), tz=timezone.utc).isoformat(),),
        )

    def record_scan(self, business_type: str, grade: str, ad_spend: Optional[str]) -> None:
        self._inc("scans", "total", "")
        self._inc("scans", "byType", business_type)
        self._inc("scans", "byGrade", grade[:1])
        self._inc("scans", "byAdSpend", ad_spend or "none")
        self._touch()
        self.conn.commit()

    def record_lead(
        self,
        report: dict[str, Any],
        name: str,
        email: str,
        phone: Optional[str] = None,
    ) -> int:
        """Store a consultation request against a report and count it.

        Name and email are required; a blank phone is stored as NULL.
        Returns the new lead's row id.
        """
        report_id = validate_report_id(report.get("id", ""))
        name = (name or "").strip()
        email = (email or "").strip()
        phone = (phone or "").strip() or None
        if not name or not email:
            raise InvalidLead("Name and email are required")
        if not EMAIL_RE.match(email):
            raise InvalidLead(f"Invalid email address: {email!r}")

        created_at = datetime.fromtimestamp(self.clock(), tz=timezone.utc).isoformat()
        cur = self.conn.execute(
            "INSERT INTO leads(report_id, name, email, phone, created_at) VALUES (?,?,?,?,?)",
            (report_id, name, email, phone, created_at),
        )
        self._inc("leads", "total", "")
        self._inc("leads", "byType", report.get("businessType") or "Other")
        self._inc("leads", "byGrade", (report.get("overallGrade") or "F")[:1])
        self._touch()
        self.conn.commit()
        logger.info("Lead recorded for report %s", report_id)
        return cur.lastrowid

    def get_leads(
        self,
        token: Optional[str],
        expected_token: Optional[str],
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        """Most recent consultation requests, newest first. Requires the stats token."""
        check_token(token, expected_token)
        rows = self.conn.execute(
            "SELECT report_id, name, email, phone, created_at FROM leads "
            "ORDER BY id DESC LIMIT ?",
            (limit,),
        )
        return [
            {"reportId": report_id, "name": name, "email": email, "phone": phone, "createdAt": created_at}
            for report_id, name, email, phone, created_at in rows
        ]

    def _event_stats(self, event: str, dimensions: tuple[str, ...]) -> dict[str, Any]:
        stats: dict[str, Any] = {"total": 0}
        for dimension in dimensions:
            stats[dimension] = {}
        rows = self.conn.execute(
            "SELECT dimension, key, count FROM counters WHERE event = ? ORDER BY dimension, key",
            (event,),
        )
        for dimension, key, count in rows:
            if dimension == "total":
                stats["total"] = count
            elif dimension in stats:
                stats[dimension][key] = count
        return stats

    def get_stats(self, token: Optional[str], expected_token: Optional[str]) -> dict[str, Any]:
        """Scan and lead counters with conversion rates. Requires the stats token."""
        check_token(token, expected_token)

        scans = self._event_stats("scans", SCAN_DIMENSIONS)
        leads = self._event_stats("leads", LEAD_DIMENSIONS)
        row = self.conn.execute("SELECT value FROM meta WHERE key = 'last_updated'").fetchone()

        by_type = {}
        for trade, scan_count in scans["byType"].items():
            lead_count = leads["byType"].get(trade, 0)
            by_type[trade] = lead_count / scan_count if scan_count > 0 else 0

        return {
            "scans": scans,
            "leads": leads,
            "lastUpdated": row[0] if row else None,
            "conversion": {
                "overall": leads["total"] / scans["total"] if scans["total"] > 0 else 0,
                "byType": by_type,
            },
        }
