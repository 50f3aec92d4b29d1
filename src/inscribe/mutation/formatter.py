"""
FormatterRunner: best-effort formatting after a write.

A failing formatter never fails the write: the content was already
committed, so the failure is reported in the outcome instead.
"""

import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from inscribe.exceptions import FormatterCommandError, InscribeError
from inscribe.logging_config import logger


@dataclass(frozen=True)
class FormatOutcome:
    """
    Result of the formatting step.

    formatted: True on success, False on failure, None when no formatter is
    configured for the file's extension.
    """
    formatted: Optional[bool] = None
    error: Optional[Dict[str, Any]] = None


NOT_CONFIGURED = FormatOutcome()


def get_extension(path: str) -> Optional[str]:
    """Get file extension including the dot, e.g. ".clj". Dotfiles have none."""
    name = os.path.basename(os.fspath(path))
    idx = name.rfind(".")
    if idx <= 0:
        return None
    return name[idx:]


def shell_formatter(command_template: str, timeout: int = 30) -> Callable[[str], None]:
    """
    Create a formatter from a shell command. Use {path} as placeholder.

    Example:
        shell_formatter("cljfmt fix {path}")
    """
    def run(path: str) -> None:
        command = command_template.replace("{path}", shlex.quote(path))
        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired as e:
            raise FormatterCommandError(command, None, f"Formatter timeout after {timeout}s") from e

        if result.returncode != 0:
            raise FormatterCommandError(command, result.returncode, result.stderr or result.stdout)
        logger.debug(f"Formatted {path} with: {command}")

    run.command_template = command_template
    return run


class FormatterRunner:
    """
    Run the formatter registered for a file's extension.

    Formatters are plain callables taking the path and rewriting the file
    in place; they signal failure by raising.
    """

    def __init__(
        self,
        formatters: Optional[Mapping[str, Callable[[str], None]]] = None,
        on_diagnostic: Optional[Callable[[dict], None]] = None
    ):
        self.formatters = formatters or {}
        self.on_diagnostic = on_diagnostic

    def run(self, path: str) -> FormatOutcome:
        formatter = self.formatters.get(get_extension(path))
        if formatter is None:
            return NOT_CONFIGURED

        try:
            formatter(path)
        except Exception as e:
            return self._failed(path, e)

        logger.debug(f"Formatter succeeded for {path}")
        return FormatOutcome(formatted=True)

    def _failed(self, path: str, error: Exception) -> FormatOutcome:
        if isinstance(error, InscribeError):
            detail = error.to_dict()
        else:
            detail = {"error_type": type(error).__name__, "message": str(error)}

        logger.warning(f"Formatter failed for {path}: {error}")
        self._emit({"event": "format_error", "path": path, "error": detail})
        return FormatOutcome(formatted=False, error=detail)

    def _emit(self, event: dict) -> None:
        if self.on_diagnostic is None:
            return
        try:
            self.on_diagnostic(event)
        except Exception as e:
            logger.warning(f"Diagnostic hook raised while reporting {event['event']}: {e}")
