"""
Locate insertion points and compile find patterns.
"""

import re
from typing import List, Union

from inscribe.exceptions import InvalidLocationError, PatternNotFoundError
from inscribe.schemas import InsertLocation

Pattern = Union[str, re.Pattern]


def compile_pattern(pattern: Pattern) -> re.Pattern:
    """Strings match literally; compiled patterns are used as-is."""
    if isinstance(pattern, str):
        return re.compile(re.escape(pattern))
    return pattern


def find_line(lines: List[str], pattern: Pattern) -> int:
    """
    Index of the first line matching pattern, or -1.

    Literal strings are substring searches; regexes use re.search.
    """
    if isinstance(pattern, str):
        for i, line in enumerate(lines):
            if pattern in line:
                return i
        return -1

    for i, line in enumerate(lines):
        if pattern.search(line):
            return i
    return -1


def resolve_insert_index(path: str, lines: List[str], at: InsertLocation) -> int:
    """
    Resolve an insert location to a 0-based splice index.

    Args:
        path: File path, for error context
        lines: Current file lines
        at: Where to insert (line, after or before)

    Returns:
        Index in lines at which new lines are spliced in

    Raises:
        InvalidLocationError: line outside 1..len(lines)+1
        PatternNotFoundError: after/before pattern matched no line
    """
    if at.line is not None:
        if at.line < 1 or at.line > len(lines) + 1:
            raise InvalidLocationError(
                path,
                at.to_dict(),
                f"line must be between 1 and {len(lines) + 1}"
            )
        return at.line - 1

    pattern = at.after if at.after is not None else at.before
    idx = find_line(lines, pattern)
    if idx < 0:
        raise PatternNotFoundError(path, pattern)
    return idx + 1 if at.after is not None else idx
