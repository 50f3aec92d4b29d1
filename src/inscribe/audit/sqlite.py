"""
SQLite storage driver for audit logging.

Indexed columns keep filtering cheap on large audit logs.
"""

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from uuid import UUID

from inscribe.logging_config import logger
from inscribe.schemas import AuditEntry
from .storage import AuditStorage

SCHEMA = """
CREATE TABLE IF NOT EXISTS audit_log (
    id TEXT PRIMARY KEY,
    ts TEXT NOT NULL,
    session_id TEXT,
    effect_key TEXT NOT NULL,
    effect_args TEXT,
    result TEXT,
    file_path TEXT,
    hints TEXT,
    status TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_audit_ts ON audit_log(ts);
CREATE INDEX IF NOT EXISTS idx_audit_session ON audit_log(session_id);
CREATE INDEX IF NOT EXISTS idx_audit_effect ON audit_log(effect_key);
CREATE INDEX IF NOT EXISTS idx_audit_file ON audit_log(file_path);
CREATE INDEX IF NOT EXISTS idx_audit_status ON audit_log(status);
"""


def _to_iso(dt: datetime) -> str:
    # Fixed-width UTC text so ORDER BY ts sorts chronologically
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteAuditStorage(AuditStorage):
    """
    SQLite-backed audit storage.

    Each call opens its own connection, so the storage can be shared
    between threads.
    """

    def __init__(self, path):
        if not path:
            raise ValueError("SQLiteAuditStorage requires a path")
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_database(self) -> None:
        conn = self._connect()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()
        logger.debug(f"Audit database initialized: {self.path}")

    def append(self, entry: AuditEntry) -> AuditEntry:
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO audit_log
                (id, ts, session_id, effect_key, effect_args, result, file_path, hints, status)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(entry.id),
                    _to_iso(entry.ts),
                    entry.session_id,
                    entry.effect_key,
                    json.dumps(entry.effect_args),
                    json.dumps(entry.result),
                    entry.file_path,
                    json.dumps(entry.hints),
                    entry.status,
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return entry

    def query(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        session_id: Optional[str] = None,
        effect_key: Optional[str] = None,
        file_path: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 100,
    ) -> List[AuditEntry]:
        conditions = []
        params = []
        if since is not None:
            conditions.append("ts > ?")
            params.append(_to_iso(since))
        if until is not None:
            conditions.append("ts < ?")
            params.append(_to_iso(until))
        if session_id is not None:
            conditions.append("session_id = ?")
            params.append(session_id)
        if effect_key is not None:
            conditions.append("effect_key = ?")
            params.append(effect_key)
        if file_path is not None:
            conditions.append("file_path LIKE ? ESCAPE '\\'")
            params.append(_escape_like(file_path) + "%")
        if status is not None:
            conditions.append("status = ?")
            params.append(status)

        sql = "SELECT * FROM audit_log"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY ts DESC LIMIT ?"
        params.append(limit)

        conn = self._connect()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()

        return [self._row_to_entry(row) for row in rows]

    def _row_to_entry(self, row: sqlite3.Row) -> AuditEntry:
        return AuditEntry(
            id=UUID(row["id"]),
            ts=datetime.fromisoformat(row["ts"]),
            session_id=row["session_id"],
            effect_key=row["effect_key"],
            effect_args=json.loads(row["effect_args"]) if row["effect_args"] else {},
            result=json.loads(row["result"]) if row["result"] else {},
            file_path=row["file_path"],
            hints=json.loads(row["hints"]) if row["hints"] else [],
            status=row["status"] or "unknown",
        )

    def clear(self, before: Optional[datetime] = None, all: bool = False) -> int:
        if all:
            sql, params = "DELETE FROM audit_log", ()
        elif before is not None:
            sql, params = "DELETE FROM audit_log WHERE ts < ?", (_to_iso(before),)
        else:
            return 0

        conn = self._connect()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()
