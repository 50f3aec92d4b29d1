"""
AuditLogger: registry observer that records file effects to storage.
"""

from typing import Any, Callable, Optional

from inscribe.logging_config import logger
from inscribe.registry import FILE_EFFECTS
from .storage import AuditStorage, DEFAULT_CONTENT_LIMIT, build_entry


def is_file_effect(effect_key: str) -> bool:
    return effect_key in FILE_EFFECTS


class AuditLogger:
    """
    Record file effects (write/append/insert/replace/read-meta) to storage.

    Example:
        storage = FileAuditStorage(".inscribe/audit.jsonl")
        registry = EffectRegistry(config, observers=[AuditLogger(storage, session_id="s-1")])
    """

    def __init__(
        self,
        storage: AuditStorage,
        effect_filter: Optional[Callable[[str, Any], bool]] = None,
        content_limit: int = DEFAULT_CONTENT_LIMIT,
        session_id: Optional[str] = None,
    ):
        """
        Args:
            storage: Backend receiving entries
            effect_filter: Predicate (key, args); False skips logging
            content_limit: Max chars kept from content arguments
            session_id: Session identifier stamped on every entry
        """
        self.storage = storage
        self.effect_filter = effect_filter
        self.content_limit = content_limit
        self.session_id = session_id

    def __call__(self, effect_key: str, effect_args: Any, result: Any) -> None:
        if not is_file_effect(effect_key):
            return
        if self.effect_filter is not None and not self.effect_filter(effect_key, effect_args):
            return

        entry = build_entry(
            effect_key,
            effect_args,
            result,
            content_limit=self.content_limit,
            session_id=self.session_id,
        )
        self.storage.append(entry)
        logger.debug(f"Audit: {effect_key} {entry.file_path} -> {entry.status}")
