"""
Audit log query conveniences.
"""

from datetime import datetime, timedelta, timezone
from typing import List

from inscribe.schemas import AuditEntry
from .storage import AuditStorage


def _hours_ago(hours: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(hours=hours)


def recent_activity(storage: AuditStorage, hours: float = 24, limit: int = 100) -> List[AuditEntry]:
    """Entries from the last `hours`, newest first."""
    return storage.query(since=_hours_ago(hours), limit=limit)


def session_activity(storage: AuditStorage, session_id: str, limit: int = 100) -> List[AuditEntry]:
    return storage.query(session_id=session_id, limit=limit)


def file_history(storage: AuditStorage, path: str, limit: int = 100) -> List[AuditEntry]:
    """Entries for a file; path is a prefix, so a directory covers its files."""
    return storage.query(file_path=path, limit=limit)


def warning_entries(storage: AuditStorage, hours: float = 24, limit: int = 100) -> List[AuditEntry]:
    """Recent entries carrying hints (e.g. threshold warnings)."""
    entries = storage.query(since=_hours_ago(hours), limit=limit * 10)
    return [e for e in entries if e.hints][:limit]
