"""
Flat-file storage driver for audit logging.

Stores one JSON entry per line for easy appending and grepping.
Suitable for projects with moderate audit log sizes.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from inscribe.logging_config import logger
from inscribe.schemas import AuditEntry
from .storage import AuditStorage


class FileAuditStorage(AuditStorage):
    """
    JSON-lines audit storage.

    Appends are fsynced; malformed lines are skipped on read.
    """

    def __init__(self, path):
        if not path:
            raise ValueError("FileAuditStorage requires a path")
        self.path = Path(path)

    def _ensure_parent(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, entry: AuditEntry) -> AuditEntry:
        self._ensure_parent()
        line = entry.model_dump_json() + "\n"
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())
        return entry

    def _read_entries(self) -> List[AuditEntry]:
        if not self.path.exists():
            return []

        entries = []
        with open(self.path, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    entries.append(AuditEntry.model_validate_json(line))
                except ValidationError:
                    logger.warning(f"Skipping malformed audit line {lineno} in {self.path}")
        return entries

    def _write_entries(self, entries: List[AuditEntry]) -> None:
        self._ensure_parent()
        content = "".join(e.model_dump_json() + "\n" for e in entries)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(content)

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
        def matches(e: AuditEntry) -> bool:
            return (
                (since is None or e.ts > since)
                and (until is None or e.ts < until)
                and (session_id is None or e.session_id == session_id)
                and (effect_key is None or e.effect_key == effect_key)
                and (file_path is None or (e.file_path or "").startswith(file_path))
                and (status is None or e.status == status)
            )

        entries = [e for e in self._read_entries() if matches(e)]
        entries.sort(key=lambda e: e.ts, reverse=True)
        return entries[:limit]

    def clear(self, before: Optional[datetime] = None, all: bool = False) -> int:
        if all:
            count = len(self._read_entries())
            if self.path.exists():
                self.path.write_text("", encoding="utf-8")
            return count

        if before is not None:
            entries = self._read_entries()
            keep = [e for e in entries if not e.ts < before]
            self._write_entries(keep)
            return len(entries) - len(keep)

        return 0
