"""
Mutation package: file operations with metadata tracking.

Provides write/append/insert/replace/read-meta operations that commit
atomically and report line counts, thresholds and affected modules.
"""

from .facade import MutationFacade
from .editor import atomic_write, read_text
from .formatter import FormatterRunner, FormatOutcome, get_extension, shell_formatter
from .locator import compile_pattern, find_line, resolve_insert_index
from .metrics import check_threshold, count_lines, count_text_lines
from .modules import infer_module, is_source_file, module_to_path
from .result import build_result
from .config import (
    RegistryConfig,
    SourceFamily,
    CLOJURE,
    PYTHON,
    SOURCE_FAMILIES,
    DEFAULT_SOURCE_ROOTS,
)

__all__ = [
    # Main facade
    "MutationFacade",

    # Components
    "atomic_write",
    "read_text",
    "FormatterRunner",
    "FormatOutcome",
    "get_extension",
    "shell_formatter",
    "compile_pattern",
    "find_line",
    "resolve_insert_index",
    "check_threshold",
    "count_lines",
    "count_text_lines",
    "infer_module",
    "is_source_file",
    "module_to_path",
    "build_result",

    # Configuration
    "RegistryConfig",
    "SourceFamily",
    "CLOJURE",
    "PYTHON",
    "SOURCE_FAMILIES",
    "DEFAULT_SOURCE_ROOTS",
]
