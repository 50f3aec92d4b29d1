"""
MutationFacade: orchestrate file mutation operations.

Main entry point for write/append/insert/replace/read-meta.
"""

import os
import re
from collections.abc import MutableSet
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from inscribe.exceptions import InvalidPatternError, TargetNotFoundError
from inscribe.logging_config import logger
from inscribe.schemas import FileMeta, InsertLocation, OperationResult

from .config import RegistryConfig
from .editor import atomic_write, read_text
from .formatter import FormatterRunner
from .locator import Pattern, compile_pattern, resolve_insert_index
from .metrics import count_lines
from .modules import infer_module
from .result import build_result


class MutationFacade:
    """
    Main facade for file mutation operations.

    Every mutating operation runs the same pipeline:
    1. Snapshot pre-state (existence, line count)
    2. Compute the new full content in memory
    3. Write atomically (editor)
    4. Format if a formatter is configured for the extension (FormatterRunner)
    5. Recount lines on the final on-disk file (metrics)
    6. Infer the affected module (modules)
    7. Build the result and register the module on the caller's context

    Operations are synchronous and hold no lock across the read-modify-write
    window: concurrent append/insert/replace calls on the same path can
    lose updates. Callers that need per-path linearizability must serialize
    calls per path themselves.
    """

    def __init__(self, config: RegistryConfig):
        """
        Initialize mutation facade.

        Args:
            config: Read-only registry configuration
        """
        self.config = config
        self.formatter = FormatterRunner(config.formatters, config.on_diagnostic)
        logger.debug(f"MutationFacade initialized for {config.project_root}")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def write(
        self,
        path: str,
        content: str,
        create_parent_dirs: bool = False,
        threshold: Optional[int] = None,
        context: Any = None,
    ) -> OperationResult:
        """
        Replace the entire content of a file.

        Returns:
            OperationResult with status "created" if the file was absent
        """
        target = self._resolve(path)
        existed = target.is_file()
        loc_before = count_lines(target) if existed else None

        atomic_write(target, content, create_parent_dirs=create_parent_dirs)
        logger.info(f"Wrote {target} ({'replaced' if existed else 'created'})")

        return self._finish(target, "ok" if existed else "created", loc_before, threshold, context)

    def append(
        self,
        path: str,
        content: str,
        threshold: Optional[int] = None,
        create_parent_dirs: bool = False,
        context: Any = None,
    ) -> OperationResult:
        """
        Append content verbatim to the end of a file.

        No newline is added; include one in content if needed.
        """
        target = self._resolve(path)
        existed = target.is_file()
        loc_before = count_lines(target) if existed else None
        current = read_text(target) if existed else ""

        atomic_write(target, current + content, create_parent_dirs=create_parent_dirs)
        logger.info(f"Appended {len(content)} chars to {target}")

        return self._finish(target, "ok" if existed else "created", loc_before, threshold, context)

    def insert(
        self,
        path: str,
        content: str,
        at: Union[InsertLocation, dict],
        threshold: Optional[int] = None,
        context: Any = None,
    ) -> OperationResult:
        """
        Insert content at a line or next to the first line matching a pattern.

        Args:
            path: Existing file
            content: Text to insert; its lines are spliced in
            at: {"line": N} inserts before line N (1-indexed),
                {"after": pattern} / {"before": pattern} anchor on the first
                matching line. String patterns match as literal substrings.
                Existing lines keep their own endings; inserted lines take
                the ending of the file's first line.
            threshold: Optional line limit

        Raises:
            TargetNotFoundError: file does not exist
            PatternNotFoundError: no line matches the anchor pattern
            InvalidLocationError: line outside 1..line_count+1
        """
        location = at if isinstance(at, InsertLocation) else InsertLocation(**at)
        target = self._require_existing(path, "insert into")
        loc_before = count_lines(target)
        original = read_text(target)

        line_ending = _detect_line_ending(original)
        lines = _split_keepends(original)
        idx = resolve_insert_index(str(target), [_strip_ending(line) for line in lines], location)

        inserted = [line + line_ending for line in _split_lines(content)]
        if lines and not lines[-1].endswith("\n"):
            lines[-1] += line_ending
        new_content = "".join(lines[:idx] + inserted + lines[idx:])

        atomic_write(target, new_content)
        logger.info(f"Inserted {len(inserted)} line(s) into {target} at index {idx}")

        return self._finish(target, "ok", loc_before, threshold, context)

    def replace(
        self,
        path: str,
        find: Pattern,
        replacement: str,
        all: bool = False,
        threshold: Optional[int] = None,
        context: Any = None,
    ) -> OperationResult:
        """
        Find and replace within a file.

        String finds match literally and their replacement is literal too;
        compiled regexes use re.sub template semantics (\\1, \\g<name>).
        Only the first match is replaced unless all=True. No match is a
        successful no-op.

        Raises:
            TargetNotFoundError: file does not exist
            InvalidPatternError: replacement template is invalid for the regex
        """
        target = self._require_existing(path, "replace in")
        loc_before = count_lines(target)
        current = read_text(target)

        pattern = compile_pattern(find)
        repl = (lambda _m: replacement) if isinstance(find, str) else replacement
        try:
            new_content, replaced = pattern.subn(repl, current, count=0 if all else 1)
        except re.error as e:
            raise InvalidPatternError(str(target), pattern, f"bad replacement {replacement!r}: {e}") from e

        atomic_write(target, new_content)
        logger.info(f"Replaced {replaced} occurrence(s) of {pattern.pattern!r} in {target}")

        return self._finish(target, "ok", loc_before, threshold, context)

    def read_meta(self, path: str) -> FileMeta:
        """
        File metadata without content. A missing file is a normal result.
        """
        target = self._resolve(path)
        if not target.is_file():
            return FileMeta(path=str(target), exists=False)

        stat = target.stat()
        return FileMeta(
            path=str(target),
            exists=True,
            loc=count_lines(target),
            modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            module=self.infer_module(target),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def infer_module(self, path) -> Optional[str]:
        return infer_module(
            str(path),
            self.config.project_root,
            self.config.source_roots,
            self.config.source_family,
        )

    def _resolve(self, path) -> Path:
        """Absolute path; relative paths are taken from the project root."""
        p = Path(os.path.expanduser(os.fspath(path)))
        if not p.is_absolute():
            p = Path(self.config.project_root) / p
        return Path(os.path.abspath(p))

    def _require_existing(self, path, operation: str) -> Path:
        target = self._resolve(path)
        if not target.is_file():
            raise TargetNotFoundError(str(target), operation)
        return target

    def _finish(
        self,
        target: Path,
        status: str,
        loc_before: Optional[int],
        threshold: Optional[int],
        context: Any,
    ) -> OperationResult:
        outcome = self.formatter.run(str(target))
        loc_after = count_lines(target)
        module = self.infer_module(target)

        if module:
            _register_pending(context, module)

        result = build_result(
            path=str(target),
            status=status,
            loc_before=loc_before,
            loc_after=loc_after,
            threshold=self.config.effective_threshold(threshold),
            module=module,
            module_kind=self.config.source_family.kind,
            format_outcome=outcome,
        )
        if result.threshold and result.threshold.exceeded:
            logger.warning(
                f"{target} has {loc_after} lines, over the {result.threshold.limit} line threshold"
            )
        return result


def _register_pending(context: Any, module: str) -> None:
    """Record a changed module on the caller's context, if it has a slot for it."""
    if context is None:
        return
    add_pending = getattr(context, "add_pending", None)
    if callable(add_pending):
        add_pending(module)
    elif isinstance(context, MutableSet):
        context.add(module)


def _detect_line_ending(content: str) -> str:
    """Ending of the first terminated line; LF for files without one."""
    first = content.find("\n")
    if first > 0 and content[first - 1] == "\r":
        return "\r\n"
    return "\n"


def _split_keepends(text: str) -> list:
    """Split on LF only, keeping each line's own ending."""
    return re.findall(r"[^\n]*\n|[^\n]+$", text)


def _strip_ending(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    return line.rstrip("\n")


def _split_lines(text: str) -> list:
    """Split on LF/CRLF; a trailing newline does not start an extra line."""
    if not text:
        return []
    lines = text.replace("\r\n", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines
