"""
Result shape helpers for file operations.
"""

from typing import Optional

from inscribe.schemas import ModuleInfo, OperationResult
from .formatter import FormatOutcome, NOT_CONFIGURED
from .metrics import check_threshold, line_counts


def build_result(
    path: str,
    status: str,
    loc_before: Optional[int],
    loc_after: int,
    threshold: Optional[int] = None,
    module: Optional[str] = None,
    module_kind: str = "clojure",
    format_outcome: FormatOutcome = NOT_CONFIGURED,
) -> OperationResult:
    """
    Construct the uniform result for a file operation.

    Args:
        path: Absolute file path
        status: "ok", "created" or "error"
        loc_before: Line count before the operation (None for new files)
        loc_after: Line count of the final on-disk file
        threshold: Limit to check loc_after against
        module: Inferred module identifier
        module_kind: Source family of the module
        format_outcome: Result of the formatting step
    """
    result = OperationResult(
        path=path,
        status=status,
        loc=line_counts(loc_before, loc_after),
        threshold=check_threshold(loc_after, threshold),
        module=ModuleInfo(identifiers=[module], kind=module_kind) if module else None,
        formatted=format_outcome.formatted,
    )
    if format_outcome.formatted is False:
        result.format_error = format_outcome.error or {}
    return result
