"""
Audit logging for file effects.

Pluggable storage (JSON lines or SQLite) fed by a registry observer.
"""

from .storage import AuditStorage, build_entry, truncate_content, extract_file_path
from .file import FileAuditStorage
from .sqlite import SQLiteAuditStorage
from .interceptor import AuditLogger, is_file_effect
from .queries import recent_activity, session_activity, file_history, warning_entries

__all__ = [
    "AuditStorage",
    "build_entry",
    "truncate_content",
    "extract_file_path",
    "FileAuditStorage",
    "SQLiteAuditStorage",
    "AuditLogger",
    "is_file_effect",
    "recent_activity",
    "session_activity",
    "file_history",
    "warning_entries",
]
