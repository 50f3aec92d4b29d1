import re
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Set
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator


def _check_pattern(value: Any) -> Any:
    if isinstance(value, (str, re.Pattern)):
        return value
    raise ValueError("pattern must be a string or a compiled regular expression")


class LineCounts(BaseModel):
    """
    Line counts around a mutation. before/delta are None for new files.
    """
    before: Optional[int] = None
    after: int
    delta: Optional[int] = None


class ThresholdStatus(BaseModel):
    """
    Result of checking a line count against a caller-supplied limit.
    """
    limit: int
    exceeded: bool
    remaining: int  # limit - after, negative once exceeded


class ModuleInfo(BaseModel):
    """
    Module affected by a write, for callers tracking pending reloads.
    """
    identifiers: List[str]
    kind: str


class OperationResult(BaseModel):
    """
    Uniform record returned by every mutating operation.
    """
    path: str
    status: Literal["ok", "created", "error"]
    loc: Optional[LineCounts] = None
    threshold: Optional[ThresholdStatus] = None
    hints: List[Any] = Field(default_factory=list)  # reserved for downstream enrichment
    module: Optional[ModuleInfo] = None
    formatted: Optional[bool] = None
    format_error: Optional[Dict[str, Any]] = None

    @property
    def module_name(self) -> Optional[str]:
        if self.module and self.module.identifiers:
            return self.module.identifiers[0]
        return None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dict; absent optional sections are dropped."""
        data = self.model_dump(mode="json")
        return {k: v for k, v in data.items() if v is not None}


class FileMeta(BaseModel):
    """
    Metadata for a file without its content.
    """
    path: str
    exists: bool
    loc: Optional[int] = None
    modified_at: Optional[datetime] = None
    module: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        return {k: v for k, v in data.items() if v is not None}


# Effect arguments

class InsertLocation(BaseModel):
    """
    Where insert places content: exactly one of line, after, before.

    line is 1-indexed and content goes before the line currently there.
    after/before take a literal substring or a compiled regex.
    """
    line: Optional[int] = None
    after: Optional[Any] = None
    before: Optional[Any] = None

    @field_validator("after", "before")
    @classmethod
    def _pattern_type(cls, value):
        if value is None:
            return value
        return _check_pattern(value)

    @model_validator(mode="after")
    def _exactly_one(self):
        given = [k for k in ("line", "after", "before") if getattr(self, k) is not None]
        if len(given) != 1:
            raise ValueError("insert location needs exactly one of 'line', 'after', 'before'")
        return self

    def to_dict(self) -> Dict[str, Any]:
        for key in ("line", "after", "before"):
            value = getattr(self, key)
            if value is not None:
                return {key: getattr(value, "pattern", value)}
        return {}


class WriteArgs(BaseModel):
    path: str
    content: str
    create_parent_dirs: bool = False
    threshold: Optional[int] = None


class AppendArgs(BaseModel):
    path: str
    content: str
    create_parent_dirs: bool = False
    threshold: Optional[int] = None


class InsertArgs(BaseModel):
    path: str
    content: str
    at: InsertLocation
    threshold: Optional[int] = None


class ReplaceArgs(BaseModel):
    path: str
    find: Any
    replacement: str
    all: bool = False
    threshold: Optional[int] = None

    @field_validator("find")
    @classmethod
    def _find_type(cls, value):
        return _check_pattern(value)


class ReloadArgs(BaseModel):
    only: Optional[Set[str]] = None


class ClearPendingArgs(BaseModel):
    only: Optional[Set[str]] = None
    all: bool = False


# Effect results outside the mutation core

class ReloadResult(BaseModel):
    """
    Outcome of reloading pending modules through an executor.
    """
    executor: Optional[str] = None
    requested: Set[str] = Field(default_factory=set)
    reloaded: Set[str] = Field(default_factory=set)
    failed: Dict[str, str] = Field(default_factory=dict)
    skipped: Set[str] = Field(default_factory=set)
    pending_remaining: Set[str] = Field(default_factory=set)
    error: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        return {k: (sorted(v) if isinstance(v, list) else v) for k, v in data.items() if v is not None}


class ClearPendingResult(BaseModel):
    cleared: Set[str] = Field(default_factory=set)
    remaining: Set[str] = Field(default_factory=set)

    def to_dict(self) -> Dict[str, Any]:
        return {"cleared": sorted(self.cleared), "remaining": sorted(self.remaining)}


class AuditEntry(BaseModel):
    """
    One audit log record: an effect invocation and what it returned.
    """
    id: UUID
    ts: datetime
    session_id: Optional[str] = None
    effect_key: str
    effect_args: Any = None
    result: Dict[str, Any] = Field(default_factory=dict)
    file_path: Optional[str] = None
    hints: List[Any] = Field(default_factory=list)
    status: str = "unknown"
