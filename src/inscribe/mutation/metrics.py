"""
Line counting and threshold checks.
"""

from pathlib import Path
from typing import Optional

from inscribe.schemas import LineCounts, ThresholdStatus


def count_text_lines(text: str) -> int:
    """
    Count newline-delimited lines; a trailing line without a newline counts.

    "" -> 0, "a" -> 1, "a\\n" -> 1, "a\\nb" -> 2
    """
    if not text:
        return 0
    count = text.count("\n")
    if not text.endswith("\n"):
        count += 1
    return count


def count_lines(path) -> int:
    """Count lines in a file. Returns 0 if the file doesn't exist."""
    file_path = Path(path)
    if not file_path.is_file():
        return 0

    count = 0
    last = b""
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            count += chunk.count(b"\n")
            last = chunk[-1:]
    if last and last != b"\n":
        count += 1
    return count


def line_counts(before: Optional[int], after: int) -> LineCounts:
    delta = after - before if before is not None else None
    return LineCounts(before=before, after=after, delta=delta)


def check_threshold(lines_after: int, limit: Optional[int]) -> Optional[ThresholdStatus]:
    """
    Check a line count against a limit.

    A file exactly at the limit is not exceeded.

    Returns:
        ThresholdStatus, or None when no limit was given
    """
    if limit is None:
        return None
    return ThresholdStatus(
        limit=limit,
        exceeded=lines_after > limit,
        remaining=limit - lines_after,
    )
