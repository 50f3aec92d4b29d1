"""
Storage protocol and entry helpers for audit logging.
"""

import re
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from inscribe.schemas import AuditEntry

DEFAULT_CONTENT_LIMIT = 1000
TRUNCATION_MARKER = "... (truncated)"


class AuditStorage(ABC):
    """Protocol for audit log storage backends."""

    @abstractmethod
    def append(self, entry: AuditEntry) -> AuditEntry:
        """Append an entry to the log."""

    @abstractmethod
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
        """
        Query entries, newest first.

        file_path is a prefix match; every other filter is exact.
        """

    @abstractmethod
    def clear(self, before: Optional[datetime] = None, all: bool = False) -> int:
        """
        Clear entries older than before, or everything with all=True.

        Returns:
            Number of entries removed
        """


def truncate_content(text: Optional[str], max_length: int) -> Optional[str]:
    """Truncate string content to max_length, marking the cut."""
    if text is not None and len(text) > max_length:
        return text[:max_length] + TRUNCATION_MARKER
    return text


def to_plain(value: Any) -> Any:
    """Convert args/results into JSON-safe builtins."""
    if isinstance(value, BaseModel):
        if hasattr(value, "to_dict"):
            return to_plain(value.to_dict())
        return to_plain(value.model_dump())
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(to_plain(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, PurePath):
        return str(value)
    return value


def extract_file_path(effect_args: Any, result: Dict[str, Any]) -> Optional[str]:
    """File path from args, then result, then a bare string argument."""
    if isinstance(effect_args, dict) and effect_args.get("path"):
        return effect_args["path"]
    if result.get("path"):
        return result["path"]
    if isinstance(effect_args, str):
        return effect_args
    return None


def build_entry(
    effect_key: str,
    effect_args: Any,
    result: Any,
    content_limit: int = DEFAULT_CONTENT_LIMIT,
    session_id: Optional[str] = None,
) -> AuditEntry:
    """
    Build an audit entry from an effect invocation.

    Args:
        effect_key: Effect that ran
        effect_args: Its arguments (content is truncated to content_limit)
        result: What it returned
        content_limit: Max chars kept from a content argument
        session_id: Session identifier to include
    """
    args = to_plain(effect_args)
    if isinstance(args, dict) and "content" in args:
        args["content"] = truncate_content(args["content"], content_limit)

    plain_result = to_plain(result) if result is not None else {}
    if not isinstance(plain_result, dict):
        plain_result = {"value": plain_result}

    return AuditEntry(
        id=uuid.uuid4(),
        ts=datetime.now(timezone.utc),
        session_id=session_id,
        effect_key=effect_key,
        effect_args=args if args is not None else {},
        result=plain_result,
        file_path=extract_file_path(args, plain_result),
        hints=plain_result.get("hints") or [],
        status=plain_result.get("status") or "unknown",
    )
