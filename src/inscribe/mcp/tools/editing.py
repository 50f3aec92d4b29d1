"""File mutation tools: write, append, insert, replace, metadata."""
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from inscribe.exceptions import InscribeError
from inscribe.logging_config import logger
from inscribe.registry import DispatchContext, EffectRegistry


def _call(registry: EffectRegistry, context: DispatchContext, key: str, args: Any) -> dict:
    """Invoke an effect, turning failures into a structured error dict."""
    try:
        return registry.invoke(key, args, context).to_dict()
    except InscribeError as e:
        return {"status": "error", **e.to_dict()}
    except ValidationError as e:
        return {"status": "error", "error_type": "invalid_arguments", "message": str(e)}


def _pattern(text: Optional[str], regex: bool):
    if text is None or not regex:
        return text
    return re.compile(text)


def register(mcp, registry: EffectRegistry, context: DispatchContext):
    @mcp.tool()
    def write_file(
        path: str,
        content: str,
        create_parent_dirs: bool = False,
        threshold: Optional[int] = None,
    ) -> dict:
        """
        Replace the entire content of a file (creating it if needed).

        Args:
            path: Absolute path, or path relative to the project root
            content: Full new file content
            create_parent_dirs: Create missing parent directories
            threshold: Line limit to report against (never enforced)

        Returns:
            status (ok/created), loc before/after/delta, threshold, module
        """
        return _call(registry, context, "write", {
            "path": path,
            "content": content,
            "create_parent_dirs": create_parent_dirs,
            "threshold": threshold,
        })

    @mcp.tool()
    def append_file(path: str, content: str, threshold: Optional[int] = None) -> dict:
        """
        Append content verbatim to the end of a file. No newline is added.
        """
        return _call(registry, context, "append", {"path": path, "content": content, "threshold": threshold})

    @mcp.tool()
    def insert_content(
        path: str,
        content: str,
        line: Optional[int] = None,
        after: Optional[str] = None,
        before: Optional[str] = None,
        regex: bool = False,
        threshold: Optional[int] = None,
    ) -> dict:
        """
        Insert content into an existing file.

        Give exactly one of:
            line: insert before this 1-indexed line (line_count + 1 appends)
            after: insert after the first line containing this text
            before: insert before the first line containing this text

        Args:
            regex: Treat after/before as regular expressions
        """
        try:
            at: Dict[str, Any] = {
                k: v for k, v in {
                    "line": line,
                    "after": _pattern(after, regex),
                    "before": _pattern(before, regex),
                }.items() if v is not None
            }
        except re.error as e:
            return {"status": "error", "error_type": "invalid_pattern", "message": str(e)}
        return _call(registry, context, "insert", {
            "path": path, "content": content, "at": at, "threshold": threshold,
        })

    @mcp.tool()
    def replace_content(
        path: str,
        find: str,
        replacement: str,
        all: bool = False,
        regex: bool = False,
        threshold: Optional[int] = None,
    ) -> dict:
        """
        Find and replace within an existing file.

        Only the first match is replaced unless all=True. Zero matches is a
        successful no-op.
        """
        try:
            pattern = _pattern(find, regex)
        except re.error as e:
            return {"status": "error", "error_type": "invalid_pattern", "message": str(e)}
        return _call(registry, context, "replace", {
            "path": path,
            "find": pattern,
            "replacement": replacement,
            "all": all,
            "threshold": threshold,
        })

    @mcp.tool()
    def file_meta(path: str) -> dict:
        """
        Line count, modification time and module of a file, without content.
        """
        return _call(registry, context, "read-meta", path)

    logger.debug("Registered editing tools")
